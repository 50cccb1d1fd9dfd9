"""Faker-based payloads for the Locust scenarios.

Every generator returns a body that passes the API's request schemas and
the domain's own rules (unique emails, 10+ character descriptions and
comments, delivery addresses of at least 10 characters).
"""

import random
import uuid
from decimal import Decimal

from faker import Faker

fake = Faker()

DISTRICTS = ["Kavrepalanchok", "Lalitpur", "Bhaktapur", "Chitwan", "Kaski"]
PRODUCE = [
    ("Tomatoes", "Vegetables", "kg"),
    ("Spinach", "Vegetables", "bunch"),
    ("Mandarins", "Fruits", "dozen"),
    ("Basmati rice", "Grains", "kg"),
    ("Buffalo milk", "Dairy", "liter"),
    ("Timur", "Spices", "g"),
]


def unique_email(role: str) -> str:
    return f"{fake.user_name()[:20]}.{uuid.uuid4().hex[:6]}.{role.lower()}@example.com"


def user_data(role: str) -> dict:
    return {
        "name": fake.name()[:100],
        "email": unique_email(role),
        "role": role,
        "language": random.choice(["en", "ne"]),
    }


def farmer_data(user_id: str) -> dict:
    return {
        "user_id": user_id,
        "farm_name": f"{fake.last_name()} Family Farm",
        "district": random.choice(DISTRICTS),
        "municipality": fake.city()[:100],
    }


def product_data(stock: int | None = None) -> dict:
    name, category, unit = random.choice(PRODUCE)
    return {
        "name": name,
        "description": f"{name} harvested {fake.day_of_week().lower()} morning, {fake.sentence(nb_words=6)}",
        "category": category,
        "unit": unit,
        "price": str(Decimal(random.randint(50, 50_000)) / 100),
        "stock": stock if stock is not None else random.randint(5, 200),
    }


def order_data(farmer_id: str, product_ids: list[str], max_quantity: int = 3) -> dict:
    return {
        "farmer_id": farmer_id,
        "items": [{"product_id": pid, "quantity": random.randint(1, max_quantity)} for pid in product_ids],
        "delivery_address": f"{fake.street_address()}, {random.choice(DISTRICTS)}",
    }


def review_data(order_id: str, reviewee_id: str) -> dict:
    return {
        "order_id": order_id,
        "reviewee_id": reviewee_id,
        "rating": random.randint(1, 5),
        "comment": fake.sentence(nb_words=10)[:1000],
    }


def message_data(receiver_id: str) -> dict:
    return {"receiver_id": receiver_id, "content": fake.sentence(nb_words=12)}
