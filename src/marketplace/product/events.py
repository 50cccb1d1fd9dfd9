"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Decimal, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Product")
class ProductCreated:
    __version__ = 1

    product_id = Identifier(required=True)
    farmer_id = Identifier(required=True)
    name = String(required=True)
    price = Decimal(required=True)
    stock = Integer(required=True)
    created_at = DateTime(required=True)


@marketplace.event(part_of="Product")
class ProductUpdated:
    __version__ = 1

    product_id = Identifier(required=True)
    changed_fields = String(required=True)
    price = Decimal()
    updated_at = DateTime(required=True)


@marketplace.event(part_of="Product")
class ProductStatusChanged:
    __version__ = 1

    product_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_at = DateTime(required=True)


@marketplace.event(part_of="Product")
class ProductDeleted:
    __version__ = 1

    product_id = Identifier(required=True)
    deleted_by = Identifier(required=True)
    deleted_at = DateTime(required=True)


@marketplace.event(part_of="Product")
class StockAdjusted:
    """Stock moved by an order, a cancellation, or a farmer's count."""

    __version__ = 1

    product_id = Identifier(required=True)
    previous_stock = Integer(required=True)
    delta = Integer(required=True)
    new_stock = Integer(required=True)
    reason = String(required=True)
    reference_id = Identifier()
    adjusted_at = DateTime(required=True)
