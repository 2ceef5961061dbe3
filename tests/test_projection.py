import pytest

from backoffice.core.catalog_types import PRODUCT_TYPE_DIRECT_COST, PRODUCT_TYPE_INGREDIENT_BASED
from backoffice.models.ingredient import Ingredient
from backoffice.models.product import Product, ProductIngredient
from backoffice.services.costing import index_ingredients
from backoffice.services.inventory import (
    STOCK_LOW,
    STOCK_OK,
    STOCK_OUT,
    aggregate_ingredients,
    check_availability,
    cost_analysis,
    inventory_summary,
    max_units,
    project_product,
)


def _ingredient(ingredient_id, stock, unit="kg", price=10.0, minimum=0.0):
    return Ingredient(
        id=ingredient_id,
        name=ingredient_id.title(),
        price_per_kg=price,
        unit=unit,
        current_stock=stock,
        minimum_stock=minimum,
        category="dry",
    )


def _product(lines, *, product_id="p1", name="Pizza", selling_price=None, product_type=PRODUCT_TYPE_INGREDIENT_BASED):
    return Product(
        id=product_id,
        name=name,
        product_type=product_type,
        selling_price=selling_price,
        ingredients=[
            ProductIngredient(ingredient_id=ingredient_id, quantity=quantity, unit=unit, position=position)
            for position, (ingredient_id, quantity, unit) in enumerate(lines)
        ],
    )


def test_max_units_is_floor_of_stock_over_requirement():
    ingredients = index_ingredients([_ingredient("flour", 1.5), _ingredient("cheese", 5.0)])
    product = _product([("flour", 200, "g"), ("cheese", 100, "g")])

    result = max_units(product, ingredients)

    assert result["max_units"] == 7
    assert result["limiting_ingredient"]["ingredient_id"] == "flour"


def test_max_units_ties_pick_first_line():
    ingredients = index_ingredients([_ingredient("flour", 1.0), _ingredient("cheese", 1.0)])
    product = _product([("cheese", 500, "g"), ("flour", 500, "g")])

    assert max_units(product, ingredients)["limiting_ingredient"]["ingredient_id"] == "cheese"


def test_missing_ingredient_blocks_production():
    ingredients = index_ingredients([_ingredient("flour", 10.0)])
    result = max_units(_product([("flour", 200, "g"), ("ghost", 10, "g")]), ingredients)

    assert result["max_units"] == 0
    assert result["limiting_ingredient"]["missing"] is True


def test_zero_quantity_lines_do_not_constrain():
    ingredients = index_ingredients([_ingredient("flour", 1.0), _ingredient("salt", 0.0)])
    result = max_units(_product([("flour", 250, "g"), ("salt", 0, "g")]), ingredients)

    assert result["max_units"] == 4
    assert result["limiting_ingredient"]["ingredient_id"] == "flour"


def test_product_without_constraining_lines_makes_nothing():
    assert max_units(_product([]), {}) == {"max_units": 0, "limiting_ingredient": None}


def test_direct_cost_product_is_unconstrained():
    product = _product([], product_type=PRODUCT_TYPE_DIRECT_COST)
    assert max_units(product, {}) == {"max_units": None, "limiting_ingredient": None}
    assert check_availability(product, 100, {})["sufficient"] is True


def test_project_product_reports_potential():
    ingredients = index_ingredients([_ingredient("flour", 1.5)])
    projection = project_product(_product([("flour", 200, "g")], selling_price=5.0), ingredients)

    assert projection["cost"] == pytest.approx(2.0)
    assert projection["profit"] == pytest.approx(3.0)
    assert projection["margin"] == pytest.approx(60.0)
    assert projection["potential_revenue"] == pytest.approx(35.0)
    assert projection["potential_profit"] == pytest.approx(21.0)


def test_check_availability_reports_shortfalls_in_stock_unit():
    ingredients = index_ingredients([_ingredient("flour", 0.5), _ingredient("cheese", 5.0)])
    product = _product([("flour", 200, "g"), ("cheese", 100, "g"), ("ghost", 5, "g")])

    result = check_availability(product, 3, ingredients)

    assert result["sufficient"] is False
    by_id = {row["ingredient_id"]: row for row in result["shortfalls"]}
    assert set(by_id) == {"flour", "ghost"}
    assert by_id["flour"]["needed"] == pytest.approx(0.6)
    assert by_id["flour"]["have"] == pytest.approx(0.5)
    assert by_id["flour"]["unit"] == "kg"
    assert by_id["ghost"]["missing"] is True


def test_check_availability_does_not_touch_stock():
    flour = _ingredient("flour", 1.0)
    check_availability(_product([("flour", 200, "g")]), 2, {"flour": flour})
    assert flour.current_stock == 1.0


def test_inventory_summary_counts_and_values():
    summary = inventory_summary(
        [
            _ingredient("flour", 2.0, price=3.0, minimum=1.0),
            _ingredient("yeast", 500, unit="g", price=20.0, minimum=600),
            _ingredient("basil", 0.0, price=30.0),
        ]
    )

    assert summary["total_ingredients"] == 3
    assert summary["total_inventory_value"] == pytest.approx(16.0)
    statuses = {item["ingredient_id"]: item["status"] for item in summary["items"]}
    assert statuses == {"flour": STOCK_OK, "yeast": STOCK_LOW, "basil": STOCK_OUT}
    assert [item["name"] for item in summary["items"]] == ["Basil", "Flour", "Yeast"]


def test_cost_analysis_totals():
    ingredients = index_ingredients([_ingredient("flour", 1.0)])
    analysis = cost_analysis(
        [
            _product([("flour", 250, "g")], selling_price=6.0),
            _product([], product_id="p2", name="Soda", product_type=PRODUCT_TYPE_DIRECT_COST, selling_price=2.0),
        ],
        ingredients,
    )

    assert analysis["total_products"] == 2
    assert analysis["total_potential_revenue"] == pytest.approx(24.0)
    assert analysis["total_potential_profit"] == pytest.approx(14.0)
    assert analysis["total_inventory_value"] == pytest.approx(10.0)


class _OrderLine:
    def __init__(self, product_id, quantity):
        self.product_id = product_id
        self.quantity = quantity


def test_aggregate_ingredients_for_prep_list():
    pizza = _product([("flour", 200, "g"), ("cheese", 100, "g")])
    bread = _product([("flour", 300, "g")], product_id="p2", name="Bread")
    soda = _product([], product_id="p3", name="Soda", product_type=PRODUCT_TYPE_DIRECT_COST)

    prep = aggregate_ingredients(
        [_OrderLine("p1", 2), _OrderLine("p2", 1), _OrderLine("p3", 4), _OrderLine("unknown", 1)],
        {"p1": pizza, "p2": bread, "p3": soda},
    )

    assert [row["ingredient_id"] for row in prep] == ["flour", "cheese"]
    assert prep[0]["quantity"] == pytest.approx(700)
    assert prep[0]["products"] == ["Pizza", "Bread"]
    assert prep[1]["quantity"] == pytest.approx(200)
