"""Per-user state for Locust scenarios.

Each simulated user keeps the ids the API handed back so follow-up
requests can reference them. Nothing is shared between users.
"""

from dataclasses import dataclass, field


@dataclass
class Actor:
    user_id: str
    role: str

    @property
    def headers(self) -> dict:
        return {"X-Actor-Id": self.user_id, "X-Actor-Role": self.role}


@dataclass
class MarketState:
    """One buyer, one farmer with a farm, and what they have created so far."""

    buyer: Actor | None = None
    farmer: Actor | None = None
    admin: Actor | None = None
    farmer_id: str | None = None
    product_ids: list[str] = field(default_factory=list)
    order_id: str | None = None
    review_id: str | None = None
    message_id: str | None = None
