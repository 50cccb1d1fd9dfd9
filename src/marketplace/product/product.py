"""Product aggregate: a farmer's listing and the stock it carries.

Status changes are caller-driven; there is no automatic lifecycle here.
Stock is the exception: every mutation is validated against the current
value and a result below zero is refused, never clamped.
"""

import decimal
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Decimal, Identifier, Integer, String, Text

from marketplace.domain import marketplace
from marketplace.exceptions import InsufficientStock
from marketplace.product.events import (
    ProductCreated,
    ProductDeleted,
    ProductStatusChanged,
    ProductUpdated,
    StockAdjusted,
)
from marketplace.shared.money import to_money

# Sentinel for distinguishing "not provided" from None in partial updates
_UNSET = object()

MAX_STOCK = 999_999
MIN_PRICE = decimal.Decimal("0.01")
MAX_PRICE = decimal.Decimal("999999.99")


class ProductStatus(Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    INACTIVE = "INACTIVE"


class Category(Enum):
    VEGETABLES = "Vegetables"
    FRUITS = "Fruits"
    GRAINS = "Grains"
    DAIRY = "Dairy"
    MEAT = "Meat"
    HERBS = "Herbs"
    SPICES = "Spices"
    NUTS = "Nuts"
    SEEDS = "Seeds"
    OTHER = "Other"


class Unit(Enum):
    KG = "kg"
    G = "g"
    LB = "lb"
    PIECE = "piece"
    DOZEN = "dozen"
    LITER = "liter"
    ML = "ml"
    BUNCH = "bunch"
    BAG = "bag"
    BOX = "box"


@marketplace.aggregate(limit=None)
class Product:
    farmer_id = Identifier(required=True)
    name = String(required=True, min_length=2, max_length=200)
    description = Text(required=True)
    category = String(choices=Category, default=Category.OTHER.value)
    unit = String(choices=Unit, default=Unit.KG.value)
    price = Decimal(required=True, precision=8, scale=2)
    stock = Integer(default=0)
    status = String(choices=ProductStatus, default=ProductStatus.DRAFT.value)
    is_deleted = Boolean(default=False)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def price_within_range(self):
        if self.price is not None and not MIN_PRICE <= self.price <= MAX_PRICE:
            raise ValidationError({"price": [f"Price must be between {MIN_PRICE} and {MAX_PRICE}"]})

    @invariant.post
    def stock_is_never_negative(self):
        if self.stock is not None and self.stock < 0:
            raise ValidationError({"stock": ["Stock cannot be negative"]})

    @invariant.post
    def stock_within_limit(self):
        if self.stock is not None and self.stock > MAX_STOCK:
            raise ValidationError({"stock": [f"Stock cannot exceed {MAX_STOCK:,}"]})

    @invariant.post
    def description_length(self):
        if self.description is not None and not 10 <= len(self.description.strip()) <= 2000:
            raise ValidationError({"description": ["Product description must be between 10 and 2000 characters"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, farmer_id, name, description, price, stock=0, category=None, unit=None):
        """List a new product. New listings always start as drafts."""
        now = datetime.now(UTC)
        product = cls(
            farmer_id=farmer_id,
            name=name,
            description=description,
            price=to_money(price),
            stock=stock,
            category=category or Category.OTHER.value,
            unit=unit or Unit.KG.value,
            status=ProductStatus.DRAFT.value,
            is_deleted=False,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductCreated(
                product_id=str(product.id),
                farmer_id=str(farmer_id),
                name=name,
                price=product.price,
                stock=stock,
                created_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Availability
    # -------------------------------------------------------------------
    @property
    def is_orderable(self) -> bool:
        """Published and not deleted; stock is checked separately."""
        return self.status == ProductStatus.PUBLISHED.value and not self.is_deleted

    @property
    def is_available(self) -> bool:
        return self.is_orderable and self.stock > 0

    def can_be_ordered(self, quantity) -> bool:
        return self.is_orderable and quantity > 0 and self.stock >= quantity

    # -------------------------------------------------------------------
    # Stock
    # -------------------------------------------------------------------
    def adjust_stock(self, delta, reason, reference_id=None):
        """Apply ``delta`` to stock and return the new level.

        Raises ``InsufficientStock`` when the result would be negative.
        """
        new_stock = self.stock + delta
        if new_stock < 0:
            raise InsufficientStock(
                {
                    "stock": [
                        f"Insufficient stock for product {self.id}: "
                        f"requested {-delta}, available {self.stock}"
                    ]
                }
            )

        previous = self.stock
        now = datetime.now(UTC)
        self.stock = new_stock
        self.updated_at = now

        self.raise_(
            StockAdjusted(
                product_id=str(self.id),
                previous_stock=previous,
                delta=delta,
                new_stock=new_stock,
                reason=reason,
                reference_id=str(reference_id) if reference_id else None,
                adjusted_at=now,
            )
        )
        return new_stock

    # -------------------------------------------------------------------
    # Listing edits
    # -------------------------------------------------------------------
    def update_details(
        self,
        name=_UNSET,
        description=_UNSET,
        category=_UNSET,
        unit=_UNSET,
        price=_UNSET,
    ):
        """Edit listing fields. Orders already placed keep their captured prices."""
        if self.is_deleted:
            raise ValidationError({"product": ["Deleted products cannot be edited"]})

        changed = []
        with atomic_change(self):
            if name is not _UNSET:
                self.name = name
                changed.append("name")
            if description is not _UNSET:
                self.description = description
                changed.append("description")
            if category is not _UNSET:
                self.category = category
                changed.append("category")
            if unit is not _UNSET:
                self.unit = unit
                changed.append("unit")
            if price is not _UNSET:
                self.price = to_money(price)
                changed.append("price")
            self.updated_at = datetime.now(UTC)

        if changed:
            self.raise_(
                ProductUpdated(
                    product_id=str(self.id),
                    changed_fields=",".join(changed),
                    price=self.price,
                    updated_at=self.updated_at,
                )
            )

    def set_stock(self, new_stock):
        """Replace the stock level, as a farmer does after a stock count."""
        if new_stock is None or new_stock < 0:
            raise InsufficientStock({"stock": ["Stock cannot be negative"]})
        return self.adjust_stock(new_stock - self.stock, reason="Stock count")

    def change_status(self, status):
        if self.is_deleted:
            raise ValidationError({"product": ["Deleted products cannot change status"]})

        target = ProductStatus(status)
        if target.value == self.status:
            return

        previous = self.status
        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now
        self.raise_(
            ProductStatusChanged(
                product_id=str(self.id),
                previous_status=previous,
                new_status=target.value,
                changed_at=now,
            )
        )

    def delete(self, deleted_by):
        """Soft delete: the listing stays for order history but can no longer be ordered."""
        if self.is_deleted:
            raise ValidationError({"product": ["Product is already deleted"]})

        now = datetime.now(UTC)
        with atomic_change(self):
            self.is_deleted = True
            self.status = ProductStatus.INACTIVE.value
            self.updated_at = now

        self.raise_(
            ProductDeleted(
                product_id=str(self.id),
                deleted_by=str(deleted_by),
                deleted_at=now,
            )
        )
