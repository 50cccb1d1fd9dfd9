"""Read paths for product listings."""

from protean.utils.globals import current_domain

from marketplace.product.product import Product, ProductStatus


def products_by_farmer(farmer_id, include_unpublished=False) -> list[Product]:
    """A farmer's live listings; drafts and inactive ones only on request."""
    repo = current_domain.repository_for(Product)
    items = repo._dao.query.filter(farmer_id=str(farmer_id), is_deleted=False).all().items
    if not include_unpublished:
        items = [p for p in items if p.status == ProductStatus.PUBLISHED.value]
    return sorted(items, key=lambda p: p.created_at, reverse=True)


def search_products(category=None, text=None, available_only=False) -> list[Product]:
    """Published listings, optionally narrowed by category and a name/description match."""
    criteria = {"status": ProductStatus.PUBLISHED.value, "is_deleted": False}
    if category:
        criteria["category"] = category

    items = current_domain.repository_for(Product)._dao.query.filter(**criteria).all().items

    if text:
        needle = text.strip().lower()
        items = [p for p in items if needle in p.name.lower() or needle in p.description.lower()]
    if available_only:
        items = [p for p in items if p.stock > 0]

    return sorted(items, key=lambda p: p.name.lower())
