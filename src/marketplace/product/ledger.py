"""Inventory ledger: the only path by which orders move product stock.

Both operations run inside the caller's Unit of Work. ``adjust_stock`` writes
through the Product repository, so the stock change commits or aborts with
whatever else the command wrote. Concurrent adjustments of the same product
are serialised by the product's optimistic version: a stale writer fails at
commit and its handler is re-run against the fresh stock level.
"""

from protean.utils.globals import current_domain

from marketplace.domain import logger
from marketplace.exceptions import NotFound
from marketplace.product.product import Product


def load_product(product_id) -> Product:
    """Fetch a product or raise ``NotFound``."""
    product = current_domain.repository_for(Product).get_or_none(product_id)
    if product is None:
        raise NotFound("Product", product_id)
    return product


def can_fulfill(product_id, quantity) -> bool:
    """Whether ``quantity`` units of the product can be ordered right now."""
    product = current_domain.repository_for(Product).get_or_none(product_id)
    if product is None:
        return False
    return product.can_be_ordered(quantity)


def adjust_stock(product_id, delta, reason, reference_id=None) -> int:
    """Apply ``delta`` to the product's stock and return the new level.

    Raises ``NotFound`` for unknown products and ``InsufficientStock`` when
    the result would be negative.
    """
    repo = current_domain.repository_for(Product)
    product = load_product(product_id)
    new_stock = product.adjust_stock(delta, reason=reason, reference_id=reference_id)
    repo.add(product)

    logger.debug(
        "Stock adjusted",
        product_id=str(product_id),
        delta=delta,
        new_stock=new_stock,
        reason=reason,
    )
    return new_stock
