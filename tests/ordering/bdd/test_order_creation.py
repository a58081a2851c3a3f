"""BDD tests for order creation and deletion."""

import pytest
from pytest_bdd import given, parsers, scenarios, then, when

from storefront.catalogue.product import Product
from storefront.errors import InsufficientStock
from storefront.ordering.order import Order

scenarios("features/order_creation.feature")

USER = "bdd-buyer"


@pytest.fixture()
def products():
    return {}


@pytest.fixture()
def outcome():
    return {"order": None, "exc": None}


def _order(shop, products, qty_a, name_a, qty_b, name_b):
    return shop.create_order(
        USER,
        {
            "line_items": [
                {"product_id": str(products[name_a].id), "quantity": qty_a},
                {"product_id": str(products[name_b].id), "quantity": qty_b},
            ]
        },
    )


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('product "{name}" priced {price:f} with {stock:d} in stock'))
def product_in_stock(make_product, products, name, price, stock):
    products[name] = make_product(name=name, price=price, stock=stock)


@given(parsers.cfparse('the customer ordered {qty_a:d} of "{name_a}" and {qty_b:d} of "{name_b}"'))
def existing_order(shop, products, outcome, qty_a, name_a, qty_b, name_b):
    outcome["order"] = _order(shop, products, qty_a, name_a, qty_b, name_b)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the customer orders {qty_a:d} of "{name_a}" and {qty_b:d} of "{name_b}"'))
def place_order(shop, products, outcome, qty_a, name_a, qty_b, name_b):
    try:
        outcome["order"] = _order(shop, products, qty_a, name_a, qty_b, name_b)
    except InsufficientStock as exc:
        outcome["exc"] = exc


@when("the order is deleted")
def delete_order(shop, outcome):
    shop.delete_order(outcome["order"].id)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the order is placed with a total of {total:f}"))
def order_placed(store, outcome, total):
    assert outcome["exc"] is None
    assert store.get(Order, outcome["order"].id).total_price == total


@then("the order fails with insufficient stock")
def order_failed(outcome):
    assert isinstance(outcome["exc"], InsufficientStock)
    assert outcome["order"] is None


@then(parsers.cfparse('product "{name}" has {stock:d} in stock'))
def product_stock(store, products, name, stock):
    assert store.get(Product, products[name].id).stock == stock


@then("no order exists")
def no_order(store):
    assert store.find(Order) == []
