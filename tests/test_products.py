import pytest

from backoffice.crud.ingredients import create_ingredient, delete_ingredient, update_ingredient
from backoffice.crud.products import (
    create_product,
    delete_product,
    get_product,
    list_products,
    recalculate,
    recalculate_all,
    update_product,
)


@pytest.fixture()
def flour(db_session):
    return create_ingredient(db_session, {"name": "Flour", "price_per_kg": 10.0, "unit": "kg", "current_stock": 2.0})


def test_create_product_caches_cost_and_margin(db_session, flour):
    product = create_product(
        db_session,
        {
            "name": " Focaccia ",
            "selling_price": 5.0,
            "tags": ["bread", " vegan "],
            "ingredients": [{"ingredient_id": flour.id, "quantity": 250, "unit": "g"}],
        },
    )

    assert product.name == "Focaccia"
    assert product.product_type == "ingredientBased"
    assert product.cost_price == pytest.approx(2.5)
    assert product.profit_margin == pytest.approx(50.0)
    assert product.tags == ["bread", "vegan"]
    assert product.ingredients[0].name == "Flour"


def test_direct_cost_product_drops_recipe_lines(db_session, flour):
    product = create_product(
        db_session,
        {
            "name": "Soda",
            "product_type": "directcost",
            "direct_cost_price": 0.8,
            "selling_price": 2.0,
            "ingredients": [{"ingredient_id": flour.id, "quantity": 1, "unit": "g"}],
        },
    )

    assert product.product_type == "directCost"
    assert product.ingredients == []
    assert product.cost_price == pytest.approx(0.8)
    assert product.profit_margin == pytest.approx(60.0)


def test_update_replaces_recipe_and_recalculates(db_session, flour):
    product = create_product(
        db_session,
        {"name": "Pizza", "selling_price": 10.0, "ingredients": [{"ingredient_id": flour.id, "quantity": 200, "unit": "g"}]},
    )

    update_product(db_session, product, {"ingredients": [{"ingredient_id": flour.id, "quantity": 0.5, "unit": "kg"}]})

    assert len(product.ingredients) == 1
    assert product.cost_price == pytest.approx(5.0)
    assert product.profit_margin == pytest.approx(50.0)


def test_price_change_is_picked_up_by_recalculation(db_session, flour):
    product = create_product(
        db_session,
        {"name": "Pizza", "selling_price": 10.0, "ingredients": [{"ingredient_id": flour.id, "quantity": 200, "unit": "g"}]},
    )
    update_ingredient(db_session, flour, {"price_per_kg": 20.0})
    assert get_product(db_session, product.id).cost_price == pytest.approx(2.0)

    recalculate(db_session, product)
    assert product.cost_price == pytest.approx(4.0)


def test_recalculate_all_after_ingredient_removed(db_session, flour):
    create_product(
        db_session,
        {"name": "Pizza", "selling_price": 10.0, "ingredients": [{"ingredient_id": flour.id, "quantity": 200, "unit": "g"}]},
    )
    delete_ingredient(db_session, flour)

    (product,) = recalculate_all(db_session)

    assert product.cost_price == 0.0
    assert product.profit_margin == 0.0
    assert product.ingredients[0].ingredient_id == flour.id


def test_invalid_products(db_session):
    with pytest.raises(ValueError):
        create_product(db_session, {"name": "  "})
    with pytest.raises(ValueError):
        create_product(db_session, {"name": "Pizza", "ingredients": [{"quantity": 1, "unit": "g"}]})
    with pytest.raises(ValueError):
        create_product(db_session, {"name": "Pizza", "ingredients": [{"ingredient_id": "x", "quantity": -1}]})
    assert list_products(db_session) == []


def test_delete_product(db_session, media_root):
    product = create_product(db_session, {"name": "Pizza"})
    (media_root / "products" / product.id / "images").mkdir(parents=True)

    delete_product(db_session, product)

    assert get_product(db_session, product.id) is None
    assert not (media_root / "products" / product.id).exists()
