"""Marketplace journeys.

``OrderLifecycleJourney`` walks one buyer/farmer pair from registration
through a completed, reviewed order. ``StockContentionUser`` hammers a
single low-stock product from many users so conflicting stock writes are
retried and the product is never oversold.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import (
    farmer_data,
    message_data,
    order_data,
    product_data,
    review_data,
    user_data,
)
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import Actor, MarketState


def _register(client, role) -> Actor | None:
    with client.post("/users", json=user_data(role), catch_response=True, name="POST /users") as resp:
        if resp.status_code != 201:
            resp.failure(f"Register {role} failed: {resp.status_code} {extract_error_detail(resp)}")
            return None
        return Actor(user_id=resp.json()["id"], role=role)


def _open_farm(client, state: MarketState, stock=None) -> bool:
    """Register a farmer with a profile and one published product."""
    state.farmer = _register(client, "FARMER")
    if state.farmer is None:
        return False

    with client.post(
        "/farmers",
        json=farmer_data(state.farmer.user_id),
        headers=state.farmer.headers,
        catch_response=True,
        name="POST /farmers",
    ) as resp:
        if resp.status_code != 201:
            resp.failure(f"Register farmer failed: {resp.status_code} {extract_error_detail(resp)}")
            return False
        state.farmer_id = resp.json()["id"]

    with client.post(
        "/products",
        json=product_data(stock),
        headers=state.farmer.headers,
        catch_response=True,
        name="POST /products",
    ) as resp:
        if resp.status_code != 201:
            resp.failure(f"Create product failed: {resp.status_code} {extract_error_detail(resp)}")
            return False
        product_id = resp.json()["id"]

    with client.put(
        f"/products/{product_id}",
        json={"status": "PUBLISHED"},
        headers=state.farmer.headers,
        catch_response=True,
        name="PUT /products/{id}",
    ) as resp:
        if resp.status_code != 200:
            resp.failure(f"Publish product failed: {resp.status_code} {extract_error_detail(resp)}")
            return False

    state.product_ids.append(product_id)
    return True


class OrderLifecycleJourney(SequentialTaskSet):
    """Register -> list -> order -> accept -> complete -> review -> moderate -> message."""

    def on_start(self):
        self.state = MarketState()

    @task
    def set_up_market(self):
        state = self.state
        state.buyer = _register(self.client, "BUYER")
        state.admin = _register(self.client, "ADMIN")
        if state.buyer is None or state.admin is None or not _open_farm(self.client, state):
            self.interrupt()

    @task
    def browse(self):
        self.client.get("/products", params={"available_only": True}, name="GET /products")
        self.client.get(f"/farmers/{self.state.farmer_id}/products", name="GET /farmers/{id}/products")

    @task
    def place_order(self):
        with self.client.post(
            "/orders",
            json=order_data(self.state.farmer_id, self.state.product_ids),
            headers=self.state.buyer.headers,
            catch_response=True,
            name="POST /orders",
        ) as resp:
            if resp.status_code != 201:
                resp.failure(f"Place order failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()
            self.state.order_id = resp.json()["id"]

    @task
    def fulfil(self):
        for status in ("ACCEPTED", "COMPLETED"):
            with self.client.put(
                f"/orders/{self.state.order_id}/status",
                json={"status": status},
                headers=self.state.farmer.headers,
                catch_response=True,
                name="PUT /orders/{id}/status",
            ) as resp:
                if resp.status_code != 200:
                    resp.failure(f"Move to {status} failed: {resp.status_code} {extract_error_detail(resp)}")
                    self.interrupt()

    @task
    def review(self):
        with self.client.post(
            "/reviews",
            json=review_data(self.state.order_id, self.state.farmer.user_id),
            headers=self.state.buyer.headers,
            catch_response=True,
            name="POST /reviews",
        ) as resp:
            if resp.status_code != 201:
                resp.failure(f"Submit review failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()
            self.state.review_id = resp.json()["id"]

        with self.client.put(
            f"/reviews/{self.state.review_id}/moderate",
            json={"action": "approve"},
            headers=self.state.admin.headers,
            catch_response=True,
            name="PUT /reviews/{id}/moderate",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Approve review failed: {resp.status_code} {extract_error_detail(resp)}")

    @task
    def message(self):
        with self.client.post(
            "/messages",
            json=message_data(self.state.farmer.user_id),
            headers=self.state.buyer.headers,
            catch_response=True,
            name="POST /messages",
        ) as resp:
            if resp.status_code != 201:
                resp.failure(f"Send message failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()
            self.state.message_id = resp.json()["id"]

        self.client.put(
            f"/messages/{self.state.message_id}/moderate",
            json={"action": "APPROVED"},
            headers=self.state.admin.headers,
            name="PUT /messages/{id}/moderate",
        )
        self.client.get("/messages/unread-count", headers=self.state.farmer.headers, name="GET /messages/unread-count")

    @task
    def done(self):
        self.interrupt()


class MarketplaceUser(HttpUser):
    """Buyers and farmers completing whole orders."""

    wait_time = between(0.5, 2)
    tasks = [OrderLifecycleJourney]


class StockContentionUser(HttpUser):
    """Many buyers racing for one product with a handful of units.

    The first user to start opens the farm; everyone then orders single
    units until the API answers 400 for insufficient stock. Out-of-stock
    answers are expected and are not counted as failures.
    """

    wait_time = between(0.05, 0.2)
    shared = MarketState()

    def on_start(self):
        if not StockContentionUser.shared.product_ids:
            _open_farm(self.client, StockContentionUser.shared, stock=random.randint(20, 50))
        self.buyer = _register(self.client, "BUYER")

    @task
    def grab_one(self):
        shared = StockContentionUser.shared
        if self.buyer is None or not shared.product_ids:
            return

        with self.client.post(
            "/orders",
            json=order_data(shared.farmer_id, shared.product_ids[:1], max_quantity=1),
            headers=self.buyer.headers,
            catch_response=True,
            name="POST /orders (contended)",
        ) as resp:
            if resp.status_code in (201, 400):
                resp.success()
            else:
                resp.failure(f"Contended order failed: {resp.status_code} {extract_error_detail(resp)}")
