from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from backoffice.core.config import settings
from backoffice.core.errors import InsufficientStockError, StockConflictError
from backoffice.crud.ingredients import create_ingredient, get_ingredient
from backoffice.crud.inventory import list_movements, record_adjustment
from backoffice.crud.products import create_product
from backoffice.crud.sales import delete_sale, list_sales, record_sale
from backoffice.db.session import Base
from backoffice.services.reporting import sales_summary


@pytest.fixture()
def pizza(db_session):
    flour = create_ingredient(db_session, {"name": "Flour", "price_per_kg": 10.0, "unit": "kg", "current_stock": 1.0})
    product = create_product(
        db_session,
        {
            "name": "Pizza",
            "selling_price": 10.0,
            "ingredients": [{"ingredient_id": flour.id, "quantity": 200, "unit": "g"}],
        },
    )
    return product, flour


def test_sale_totals_and_stock_decrement(db_session, pizza, monkeypatch):
    monkeypatch.setattr(settings, "GST_RATE", 0.05)
    monkeypatch.setattr(settings, "QST_RATE", 0.09975)
    product, flour = pizza

    sale = record_sale(db_session, {"products": [{"product_id": product.id, "quantity": 2}], "order_id": "A-1"})

    assert sale.subtotal == pytest.approx(20.0)
    assert sale.gst == pytest.approx(1.0)
    assert sale.qst == pytest.approx(2.0)
    assert sale.total_amount == pytest.approx(23.0)
    assert sale.cost_total == pytest.approx(4.0)
    assert sale.profit_total == pytest.approx(16.0)
    assert sale.units_sold == 2
    assert sale.low_stock_flag is False
    assert sale.products[0].original_price == 10.0
    assert get_ingredient(db_session, flour.id).current_stock == pytest.approx(0.6)

    (movement,) = list_movements(db_session, source="sale")
    assert movement.sale_id == sale.id
    assert movement.change == pytest.approx(-0.4)


def test_discount_is_taken_before_tax(db_session, pizza):
    product, _ = pizza

    sale = record_sale(
        db_session,
        {"products": [{"product_id": product.id, "quantity": 1, "sale_price": 8.0}], "discount_amount": 3.0},
    )

    assert sale.subtotal == pytest.approx(8.0)
    assert sale.discount_amount == pytest.approx(3.0)
    assert sale.gst == pytest.approx(round(5.0 * settings.GST_RATE, 2))
    assert sale.profit_total == pytest.approx(3.0)


def test_oversell_is_recorded_and_flagged(db_session, pizza):
    product, flour = pizza

    sale = record_sale(db_session, {"products": [{"product_id": product.id, "quantity": 7}]})

    assert sale.low_stock_flag is True
    assert get_ingredient(db_session, flour.id).current_stock == 0.0
    (movement,) = list_movements(db_session, source="sale")
    assert movement.clamped is True


def test_oversell_can_be_refused(db_session, pizza):
    product, flour = pizza

    with pytest.raises(InsufficientStockError) as excinfo:
        record_sale(
            db_session,
            {"products": [{"product_id": product.id, "quantity": 7}], "allow_insufficient_stock": False},
        )

    (shortfall,) = excinfo.value.details["shortfalls"]
    assert shortfall["ingredient_id"] == flour.id
    assert shortfall["needed"] == pytest.approx(1.4)
    assert list_sales(db_session) == []
    assert get_ingredient(db_session, flour.id).current_stock == pytest.approx(1.0)


def test_direct_cost_sale_touches_no_stock(db_session):
    soda = create_product(
        db_session,
        {"name": "Soda", "product_type": "directCost", "direct_cost_price": 0.75, "selling_price": 2.5},
    )

    sale = record_sale(db_session, {"products": [{"product_id": soda.id, "quantity": 4}]})

    assert sale.cost_total == pytest.approx(3.0)
    assert list_movements(db_session) == []


def test_sale_validation(db_session, pizza):
    product, _ = pizza
    with pytest.raises(ValueError):
        record_sale(db_session, {"products": []})
    with pytest.raises(ValueError):
        record_sale(db_session, {"products": [{"product_id": product.id, "quantity": 0}]})
    with pytest.raises(LookupError):
        record_sale(db_session, {"products": [{"product_id": "nope", "quantity": 1}]})


def test_deleting_sale_does_not_restore_stock(db_session, pizza):
    product, flour = pizza
    sale = record_sale(db_session, {"products": [{"product_id": product.id, "quantity": 1}]})

    delete_sale(db_session, sale)

    assert list_sales(db_session) == []
    assert get_ingredient(db_session, flour.id).current_stock == pytest.approx(0.8)
    (movement,) = list_movements(db_session, source="sale")
    assert movement.sale_id is None


def test_list_sales_window(db_session, pizza):
    product, _ = pizza
    record_sale(db_session, {"products": [{"product_id": product.id, "quantity": 1}], "sale_date": "2001-01-01"})
    recent = record_sale(db_session, {"products": [{"product_id": product.id, "quantity": 1}]})

    assert [sale.id for sale in list_sales(db_session, days=7)] == [recent.id]
    assert len(list_sales(db_session)) == 2


def test_order_total_is_checked_across_products_sharing_an_ingredient(db_session, pizza):
    _, flour = pizza
    large, calzone = (
        create_product(
            db_session,
            {
                "name": name,
                "selling_price": 12.0,
                "ingredients": [{"ingredient_id": flour.id, "quantity": 600, "unit": "g"}],
            },
        )
        for name in ("Large Pizza", "Calzone")
    )

    with pytest.raises(InsufficientStockError) as excinfo:
        record_sale(
            db_session,
            {
                "products": [
                    {"product_id": large.id, "quantity": 1},
                    {"product_id": calzone.id, "quantity": 1},
                ],
                "allow_insufficient_stock": False,
            },
        )

    (shortfall,) = excinfo.value.details["shortfalls"]
    assert shortfall["ingredient_id"] == flour.id
    assert shortfall["needed"] == pytest.approx(1.2)
    assert shortfall["have"] == pytest.approx(1.0)
    assert shortfall["products"] == ["Large Pizza", "Calzone"]
    assert list_sales(db_session) == []
    assert get_ingredient(db_session, flour.id).current_stock == pytest.approx(1.0)


def test_sales_listing_and_summary_share_the_window(db_session, pizza):
    product, _ = pizza
    now = datetime(2026, 3, 11, 12, 0)
    record_sale(
        db_session,
        {"products": [{"product_id": product.id, "quantity": 1}], "sale_date": "2026-03-10T08:00:00Z"},
    )
    inside = record_sale(
        db_session,
        {"products": [{"product_id": product.id, "quantity": 1}], "sale_date": "2026-03-10T13:00:00Z"},
    )

    listed = list_sales(db_session, days=1, now=now)
    summary = sales_summary(list_sales(db_session), days=1, now=now)

    assert [sale.id for sale in listed] == [inside.id]
    assert summary["sale_count"] == len(listed) == 1


def test_concurrent_stock_update_is_rejected(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'race.db'}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    first, second = Session(), Session()
    try:
        flour = create_ingredient(first, {"name": "Flour", "unit": "kg", "current_stock": 1.0})
        record_adjustment(second, ingredient_id=flour.id, change=0.5)

        with pytest.raises(StockConflictError):
            record_adjustment(first, ingredient_id=flour.id, change=-0.2)

        first.expire_all()
        assert get_ingredient(first, flour.id).current_stock == pytest.approx(1.5)
    finally:
        first.close()
        second.close()
        engine.dispose()
