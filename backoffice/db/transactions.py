"""Commit helpers shared by the CRUD modules."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ..core.errors import PersistenceError, StockConflictError

logger = logging.getLogger(__name__)


def utcnow() -> str:
    return datetime.utcnow().isoformat(timespec="seconds") + "Z"


def commit(db: Session, action: str, **context: Any) -> None:
    """Commit the session or roll it back and raise a domain error.

    Nothing is retried. ``context`` ends up in the log line and in the error
    details so the caller can reconcile by hand.
    """

    try:
        db.commit()
    except StaleDataError as exc:
        db.rollback()
        logger.warning(f"{action}.conflict", extra={"extra_data": context})
        raise StockConflictError(
            "Stock changed while this request was being processed; reload and try again",
            details=context or None,
        ) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception(f"{action}.failed", extra={"extra_data": context})
        raise PersistenceError(f"Could not save {action.replace('.', ' ')}", details=context or None) from exc


__all__ = ["commit", "utcnow"]
