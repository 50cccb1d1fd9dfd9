"""Application tests for PlaceOrder: pricing, availability and stock effects."""

import json
from decimal import Decimal

import pytest
from marketplace.exceptions import InsufficientStock, InvariantViolation, NotFound, NotPermitted
from marketplace.order.order import Order
from marketplace.order.placement import PlaceOrder
from marketplace.product.listing import UpdateProduct
from marketplace.product.product import Product
from protean import current_domain
from protean.exceptions import ValidationError


def _stock(product_id):
    return current_domain.repository_for(Product).get(product_id).stock


class TestPlaceOrder:
    def test_two_items_total_and_stock(self, world, builders):
        honey = builders.list_product(world.farmer_user_id, name="Honey", price="5.00", stock=4)
        order_id = builders.place_order(world.buyer_id, world.farmer_id, [(world.product_id, 3), (honey, 1)])

        order = current_domain.repository_for(Order).get(order_id)
        assert order.status == "PENDING"
        assert order.total_amount == Decimal("11.00")
        assert _stock(world.product_id) == 7
        assert _stock(honey) == 3

    def test_price_is_captured_at_order_time(self, world, builders):
        order_id = builders.place_order(world.buyer_id, world.farmer_id, [(world.product_id, 2)])
        current_domain.process(
            UpdateProduct(
                product_id=world.product_id,
                actor_id=world.farmer_user_id,
                actor_role="FARMER",
                price=Decimal("9.99"),
            ),
            asynchronous=False,
        )
        order = current_domain.repository_for(Order).get(order_id)
        assert order.items[0].price_at_time == Decimal("2.00")
        assert order.total_amount == Decimal("4.00")

    def test_repeated_lines_are_checked_together(self, world, builders):
        with pytest.raises(InsufficientStock):
            builders.place_order(world.buyer_id, world.farmer_id, [(world.product_id, 6), (world.product_id, 5)])
        assert _stock(world.product_id) == 10

    def test_repeated_lines_decrement_once_each(self, world, builders):
        builders.place_order(world.buyer_id, world.farmer_id, [(world.product_id, 6), (world.product_id, 4)])
        assert _stock(world.product_id) == 0


class TestAllOrNothing:
    def test_one_short_item_rejects_the_whole_order(self, world, builders):
        honey = builders.list_product(world.farmer_user_id, name="Honey", price="5.00", stock=1)
        with pytest.raises(InsufficientStock) as exc:
            builders.place_order(world.buyer_id, world.farmer_id, [(world.product_id, 3), (honey, 2)])

        assert "Honey" in exc.value.messages["items"][0]
        assert _stock(world.product_id) == 10
        assert _stock(honey) == 1
        assert current_domain.repository_for(Order)._dao.query.all().total == 0

    def test_unknown_product(self, world, builders):
        with pytest.raises(NotFound) as exc:
            builders.place_order(world.buyer_id, world.farmer_id, [(world.product_id, 1), ("no-such-product", 1)])
        assert "no-such-product" in str(exc.value)
        assert _stock(world.product_id) == 10

    def test_product_of_another_farmer(self, world, builders):
        other_user = builders.register_user("FARMER", name="Other Farmer")
        builders.register_farmer(other_user, farm_name="Other Farm")
        foreign = builders.list_product(other_user, name="Apples")

        with pytest.raises(ValidationError) as exc:
            builders.place_order(world.buyer_id, world.farmer_id, [(foreign, 1)])
        assert foreign in exc.value.messages["items"][0]

    def test_unpublished_product(self, world, builders):
        draft = builders.list_product(world.farmer_user_id, name="Garlic", publish=False)
        with pytest.raises(ValidationError) as exc:
            builders.place_order(world.buyer_id, world.farmer_id, [(draft, 1)])
        assert "not available" in exc.value.messages["items"][0]


class TestParties:
    def test_only_buyers_place_orders(self, world, builders):
        with pytest.raises(NotPermitted):
            builders.place_order(world.admin_id, world.farmer_id, [(world.product_id, 1)])

    def test_unknown_farmer(self, world, builders):
        with pytest.raises(NotFound):
            builders.place_order(world.buyer_id, "no-such-farmer", [(world.product_id, 1)])

    def test_unknown_buyer(self, world, builders):
        with pytest.raises(NotFound):
            builders.place_order("no-such-buyer", world.farmer_id, [(world.product_id, 1)])

    def test_buyer_cannot_be_the_farmer(self, world, builders):
        # A farmer profile owned by a buyer account can only come from bad data
        from marketplace.farmer.farmer import Farmer

        own_farm = Farmer.register(
            user_id=world.buyer_id, farm_name="Self Farm", district="Kaski", municipality="Pokhara"
        )
        current_domain.repository_for(Farmer).add(own_farm)
        with pytest.raises(InvariantViolation):
            builders.place_order(world.buyer_id, own_farm.id, [(world.product_id, 1)])


class TestItemValidation:
    @pytest.mark.parametrize("quantity", [0, -1, 1_000_000])
    def test_quantity_bounds(self, world, quantity):
        with pytest.raises(ValidationError):
            current_domain.process(
                PlaceOrder(
                    buyer_id=world.buyer_id,
                    farmer_id=world.farmer_id,
                    items=json.dumps([{"product_id": world.product_id, "quantity": quantity}]),
                    delivery_address="Ward 4, Banepa, Kavre",
                ),
                asynchronous=False,
            )

    def test_empty_order(self, world):
        with pytest.raises(ValidationError):
            current_domain.process(
                PlaceOrder(
                    buyer_id=world.buyer_id,
                    farmer_id=world.farmer_id,
                    items="[]",
                    delivery_address="Ward 4, Banepa, Kavre",
                ),
                asynchronous=False,
            )

    @pytest.mark.parametrize("items", ['["carrots"]', "[[1, 2]]", "[null]", "not json"])
    def test_malformed_items(self, world, items):
        with pytest.raises(ValidationError) as exc:
            current_domain.process(
                PlaceOrder(
                    buyer_id=world.buyer_id,
                    farmer_id=world.farmer_id,
                    items=items,
                    delivery_address="Ward 4, Banepa, Kavre",
                ),
                asynchronous=False,
            )
        assert "items" in exc.value.messages
