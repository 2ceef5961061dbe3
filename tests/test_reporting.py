from datetime import datetime

import pytest

from backoffice.crud.ingredients import create_ingredient, ingredients_by_id
from backoffice.crud.products import create_product
from backoffice.crud.purchases import list_purchases, record_purchase
from backoffice.crud.sales import list_sales, record_sale
from backoffice.services.reporting import parse_timestamp, purchase_stats, sales_summary
from backoffice.services.totals import money, sale_totals


def test_sale_totals_round_half_up():
    totals = sale_totals(
        [{"quantity": 3, "sale_price": 3.35, "cost_price": 1.1}],
        discount=50,
        gst_rate=0.05,
        qst_rate=0.09975,
    )

    assert totals["subtotal"] == 10.05
    assert totals["discount_amount"] == 10.05
    assert totals["total_amount"] == 0.0
    assert totals["profit_total"] == -3.3


def test_money_rounds_to_cents():
    assert money(2.675) == 2.68
    assert money("$1,234.5") == 1234.5
    assert money(None) == 0.0


def test_parse_timestamp_formats():
    assert parse_timestamp("2026-03-01") == datetime(2026, 3, 1)
    assert parse_timestamp("2026-03-01T10:15:00Z") == datetime(2026, 3, 1, 10, 15)
    assert parse_timestamp("not a date") is None
    assert parse_timestamp(None) is None


def test_purchase_stats(db_session):
    flour = create_ingredient(db_session, {"name": "Flour", "category": "dry", "unit": "kg"})
    basil = create_ingredient(db_session, {"name": "Basil", "category": "herbs", "unit": "g"})
    record_purchase(db_session, {"ingredient_id": flour.id, "quantity": 10, "unit": "kg", "price_per_kg": 2.0, "supplier": "Mill", "purchase_date": "2026-03-01"})
    record_purchase(db_session, {"ingredient_id": basil.id, "quantity": 200, "unit": "g", "price_per_kg": 40.0, "supplier": "Farm", "purchase_date": "2026-01-01"})
    record_purchase(db_session, {"purchase_type": "supply", "supply_name": "Boxes", "supply_category": "packaging", "total_cost": 15.0, "purchase_date": "2026-03-05"})

    stats = purchase_stats(
        list_purchases(db_session),
        ingredients_by_id(db_session),
        recent_days=30,
        now=datetime(2026, 3, 10),
    )

    assert stats["purchase_count"] == 3
    assert stats["total_spent"] == pytest.approx(43.0)
    assert stats["recent_spent"] == pytest.approx(35.0)
    assert stats["by_supplier"][0] == {"supplier": "Mill", "total": 20.0}
    assert {row["category"]: row["total"] for row in stats["by_category"]} == {"dry": 20.0, "packaging": 15.0, "herbs": 8.0}
    assert [row["ingredient"] for row in stats["top_ingredients"]] == ["Flour", "Basil"]


def test_sales_summary(db_session):
    flour = create_ingredient(db_session, {"name": "Flour", "price_per_kg": 10.0, "unit": "kg", "current_stock": 5.0})
    pizza = create_product(
        db_session,
        {"name": "Pizza", "selling_price": 10.0, "ingredients": [{"ingredient_id": flour.id, "quantity": 200, "unit": "g"}]},
    )
    soda = create_product(db_session, {"name": "Soda", "product_type": "directCost", "direct_cost_price": 0.5, "selling_price": 2.0})
    record_sale(db_session, {"products": [{"product_id": pizza.id, "quantity": 2}, {"product_id": soda.id, "quantity": 1}], "sale_date": "2026-03-09"})
    record_sale(db_session, {"products": [{"product_id": pizza.id, "quantity": 1}], "sale_date": "2025-01-01"})

    everything = sales_summary(list_sales(db_session))
    recent = sales_summary(list_sales(db_session), days=7, now=datetime(2026, 3, 10))

    assert everything["sale_count"] == 2
    assert everything["revenue"] == pytest.approx(32.0)
    assert everything["cost"] == pytest.approx(6.5)
    assert everything["average_order_value"] == pytest.approx(16.0)
    assert everything["by_product"][0] == {"product_id": pizza.id, "name": "Pizza", "units": 3, "revenue": 30.0}
    assert recent["sale_count"] == 1
    assert recent["revenue"] == pytest.approx(22.0)
    assert recent["profit"] == pytest.approx(17.5)
