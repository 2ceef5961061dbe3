from datetime import date

import pytest

from backoffice.crud.expenses import create_expense, delete_expense, list_expenses
from backoffice.crud.ingredients import create_ingredient, ingredients_by_id
from backoffice.crud.products import create_product, list_products
from backoffice.services.reporting import break_even, expense_report, expenses_by_category, monthly_expenses


@pytest.fixture()
def expenses(db_session):
    create_expense(db_session, {"name": "Rent", "amount": 1500, "category": "rent", "date": "2026-01-01", "recurring": True})
    create_expense(db_session, {"name": "Ads", "amount": 200, "category": "marketing", "date": "2026-03-05"})
    create_expense(db_session, {"name": "Oven repair", "amount": 350.5, "category": "maintenance", "date": "2026-02-20"})
    return list_expenses(db_session)


def test_create_and_delete_expense(db_session):
    expense = create_expense(db_session, {"name": " Hydro ", "amount": 120.456, "category": "Utilities"})

    assert expense.name == "Hydro"
    assert expense.amount == 120.46
    assert expense.category == "utilities"
    assert expense.recurring is False
    assert len(expense.date) == 10

    delete_expense(db_session, expense)
    assert list_expenses(db_session) == []


def test_expense_validation(db_session):
    with pytest.raises(ValueError):
        create_expense(db_session, {"name": "", "amount": 10})
    with pytest.raises(ValueError):
        create_expense(db_session, {"name": "Gift", "amount": 0})
    with pytest.raises(ValueError):
        create_expense(db_session, {"name": "Yacht", "amount": 10, "category": "leisure"})


def test_monthly_expenses_include_recurring(expenses):
    assert monthly_expenses(expenses, date(2026, 3, 15)) == pytest.approx(1700.0)
    assert monthly_expenses(expenses, date(2026, 2, 1)) == pytest.approx(1850.5)
    assert monthly_expenses(expenses, date(2025, 6, 1)) == pytest.approx(1500.0)


def test_expenses_by_category(expenses):
    rows = expenses_by_category(expenses)

    assert rows[0] == {"category": "rent", "total": 1500.0}
    assert [row["category"] for row in rows] == ["rent", "maintenance", "marketing"]


def test_expense_report(expenses):
    report = expense_report(expenses, date(2026, 3, 1))

    assert report["month"] == "2026-03"
    assert report["expense_count"] == 3
    assert report["total"] == pytest.approx(2050.5)
    assert report["monthly_total"] == pytest.approx(1700.0)
    assert report["recurring_total"] == pytest.approx(1500.0)


def test_break_even_averages_contribution_margin(db_session):
    flour = create_ingredient(db_session, {"name": "Flour", "price_per_kg": 10.0, "unit": "kg"})
    for name, grams, price in (("Pizza", 200, 10.0), ("Calzone", 400, 16.0)):
        create_product(
            db_session,
            {
                "name": name,
                "selling_price": price,
                "ingredients": [{"ingredient_id": flour.id, "quantity": grams, "unit": "g"}],
            },
        )
    create_product(db_session, {"name": "Water", "selling_price": 0.0})

    result = break_even(list_products(db_session), ingredients_by_id(db_session), 1000.0)

    # margins 8 and 12, average 10; average price 13
    assert result["product_count"] == 2
    assert sorted(result["products"]) == ["Calzone", "Pizza"]
    assert result["average_contribution_margin"] == pytest.approx(10.0)
    assert result["break_even_units"] == 100
    assert result["break_even_revenue"] == pytest.approx(1300.0)


def test_break_even_rounds_units_up(db_session):
    flour = create_ingredient(db_session, {"name": "Flour", "price_per_kg": 10.0, "unit": "kg"})
    create_product(
        db_session,
        {"name": "Pizza", "selling_price": 10.0, "ingredients": [{"ingredient_id": flour.id, "quantity": 200, "unit": "g"}]},
    )

    result = break_even(list_products(db_session), ingredients_by_id(db_session), 100.0)

    assert result["break_even_units"] == 13
    assert result["break_even_revenue"] == pytest.approx(130.0)


def test_break_even_needs_a_positive_margin(db_session):
    truffle = create_ingredient(db_session, {"name": "Truffle", "price_per_kg": 2000.0, "unit": "kg"})
    create_product(
        db_session,
        {"name": "Truffle pasta", "selling_price": 30.0, "ingredients": [{"ingredient_id": truffle.id, "quantity": 50, "unit": "g"}]},
    )

    assert break_even(list_products(db_session), ingredients_by_id(db_session), 500.0) is None
    assert break_even([], {}, 500.0) is None
