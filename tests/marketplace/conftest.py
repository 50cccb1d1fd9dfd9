import json
from decimal import Decimal
from types import SimpleNamespace

import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture

from marketplace.farmer.registration import RegisterFarmer
from marketplace.order.placement import PlaceOrder
from marketplace.product.listing import CreateProduct, UpdateProduct
from marketplace.shared.principal import Principal
from marketplace.user.registration import RegisterUser


@pytest.fixture(scope="session")
def marketplace_bed():
    from marketplace.domain import marketplace

    bed = DomainFixture(marketplace)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(marketplace_bed):
    with marketplace_bed.domain_context():
        yield


# ---------------------------------------------------------------------------
# Builders: each goes through the real command handlers
# ---------------------------------------------------------------------------
def register_user(role, name=None, email=None, language="en"):
    name = name or f"{role.title()} User"
    email = email or f"{name.lower().replace(' ', '.')}.{role.lower()}@example.com"
    return current_domain.process(
        RegisterUser(name=name, email=email, role=role, language=language),
        asynchronous=False,
    )


def register_farmer(user_id, farm_name="Green Valley Farm", actor_id=None, actor_role="FARMER"):
    return current_domain.process(
        RegisterFarmer(
            user_id=user_id,
            actor_id=actor_id or user_id,
            actor_role=actor_role,
            farm_name=farm_name,
            district="Kavrepalanchok",
            municipality="Dhulikhel",
        ),
        asynchronous=False,
    )


def list_product(farmer_user_id, name="Tomatoes", price="2.00", stock=10, publish=True):
    product_id = current_domain.process(
        CreateProduct(
            actor_id=farmer_user_id,
            name=name,
            description=f"Fresh {name.lower()} from the hills",
            price=Decimal(price),
            stock=stock,
            category="Vegetables",
            unit="kg",
        ),
        asynchronous=False,
    )
    if publish:
        current_domain.process(
            UpdateProduct(
                product_id=product_id,
                actor_id=farmer_user_id,
                actor_role="FARMER",
                status="PUBLISHED",
            ),
            asynchronous=False,
        )
    return product_id


def place_order(buyer_id, farmer_id, items, address="Ward 4, Banepa, Kavre"):
    return current_domain.process(
        PlaceOrder(
            buyer_id=buyer_id,
            farmer_id=farmer_id,
            items=json.dumps([{"product_id": pid, "quantity": qty} for pid, qty in items]),
            delivery_address=address,
        ),
        asynchronous=False,
    )


class World:
    """A buyer, a farmer with a profile, an admin, and one published product."""

    def __init__(self):
        self.buyer_id = register_user("BUYER", name="Sita Buyer")
        self.farmer_user_id = register_user("FARMER", name="Ram Farmer")
        self.admin_id = register_user("ADMIN", name="Hari Admin")
        self.farmer_id = register_farmer(self.farmer_user_id)
        self.product_id = list_product(self.farmer_user_id, stock=10)

    @property
    def buyer(self):
        return Principal(user_id=self.buyer_id, role="BUYER")

    @property
    def farmer(self):
        return Principal(user_id=self.farmer_user_id, role="FARMER")

    @property
    def admin(self):
        return Principal(user_id=self.admin_id, role="ADMIN")


@pytest.fixture()
def world():
    return World()


@pytest.fixture()
def builders():
    """The builder functions, for tests that need more than one world."""
    return SimpleNamespace(
        register_user=register_user,
        register_farmer=register_farmer,
        list_product=list_product,
        place_order=place_order,
    )
