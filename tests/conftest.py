import os
import sys
import tempfile
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="backoffice-tests-"))

from backoffice.core.config import settings
from backoffice.db.session import Base

# Ensure models are imported so metadata is populated
from backoffice.models import expense as expense_model  # noqa: F401
from backoffice.models import ingredient as ingredient_model  # noqa: F401
from backoffice.models import inventory as inventory_model  # noqa: F401
from backoffice.models import product as product_model  # noqa: F401
from backoffice.models import purchase as purchase_model  # noqa: F401
from backoffice.models import sale as sale_model  # noqa: F401


@pytest.fixture()
def db_session():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False})
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def media_root(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "DATA_DIR", tmp_path)
    return tmp_path / "media"
