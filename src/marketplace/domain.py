"""Marketplace bounded context: Farmers, Products, Orders, Reviews, Messages.

A single domain so that one Unit of Work can span the Order and Product
aggregates: placing or cancelling an order and the matching stock movement
commit together or not at all.
"""

from protean.domain import Domain

from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

# Domain Composition Root
marketplace = Domain(name="marketplace")
