"""Marketplace load testing, Locust entry point.

Usage:
    # All scenarios (web UI):
    locust -f loadtests/locustfile.py

    # Stock contention only, headless:
    locust -f loadtests/locustfile.py StockContentionUser --headless \
           -u 50 -r 10 -t 120s --host http://localhost:8000
"""

import logging
import time

import requests
from locust import events

from loadtests.helpers.response import extract_error_detail
from loadtests.scenarios.marketplace import MarketplaceUser, StockContentionUser  # noqa: F401

logger = logging.getLogger("loadtest")


@events.request.add_listener
def on_request(request_type, name, response, exception, **_kw):
    """Log the API's error body for every failed request."""
    if exception:
        logger.error("[EXCEPTION] %s %s: %s", request_type, name, exception)
    elif response is not None and response.status_code >= 400:
        logger.error("[%s] %s %s: %s", response.status_code, request_type, name, extract_error_detail(response))


@events.test_start.add_listener
def on_test_start(environment, **_kwargs):
    print(f"\n[LOADTEST] Started at {time.strftime('%H:%M:%S')}")
    print(f"[LOADTEST] Target host: {environment.host}\n")


@events.test_stop.add_listener
def on_test_stop(environment, **_kwargs):
    """Print the contended product's final stock; it must never go below zero."""
    print(f"\n[LOADTEST] Stopped at {time.strftime('%H:%M:%S')}")
    product_ids = StockContentionUser.shared.product_ids
    if not product_ids or not environment.host:
        return
    try:
        resp = requests.get(f"{environment.host}/products/{product_ids[0]}", timeout=5)
        print(f"[LOADTEST] Contended product stock: {resp.json()['stock']}\n")
    except requests.RequestException as exc:
        print(f"[LOADTEST] Could not fetch contended product: {exc}\n")
