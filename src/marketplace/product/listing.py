"""Product listing management: create, edit and delete listings."""

from protean import handle
from protean.fields import Decimal, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import logger, marketplace
from marketplace.exceptions import NotPermitted
from marketplace.farmer.registration import farmer_for_user, load_farmer
from marketplace.product.ledger import load_product
from marketplace.product.product import Product
from marketplace.user.user import is_admin


@marketplace.command(part_of="Product")
class CreateProduct:
    actor_id = Identifier(required=True)
    name = String(required=True, max_length=200)
    description = Text(required=True)
    price = Decimal(required=True)
    stock = Integer(default=0)
    category = String(max_length=50)
    unit = String(max_length=20)


@marketplace.command(part_of="Product")
class UpdateProduct:
    product_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=10)
    name = String(max_length=200)
    description = Text()
    category = String(max_length=50)
    unit = String(max_length=20)
    price = Decimal()
    stock = Integer()
    status = String(max_length=20)


@marketplace.command(part_of="Product")
class DeleteProduct:
    product_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=10)


def _assert_can_manage(product, actor_id, actor_role):
    if is_admin(actor_role):
        return
    farmer = load_farmer(product.farmer_id)
    if str(farmer.user_id) != str(actor_id):
        raise NotPermitted({"product": ["Only the owning farmer or an administrator can manage this product"]})


@marketplace.command_handler(part_of=Product)
class ProductListingHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        farmer = farmer_for_user(command.actor_id)
        if farmer is None:
            raise NotPermitted({"actor": ["Only farmers with a profile can list products"]})

        product = Product.create(
            farmer_id=farmer.id,
            name=command.name,
            description=command.description,
            price=command.price,
            stock=command.stock or 0,
            category=command.category,
            unit=command.unit,
        )
        current_domain.repository_for(Product).add(product)
        logger.info("Product listed", product_id=str(product.id), farmer_id=str(farmer.id))
        return str(product.id)

    @handle(UpdateProduct)
    def update_product(self, command):
        repo = current_domain.repository_for(Product)
        product = load_product(command.product_id)
        _assert_can_manage(product, command.actor_id, command.actor_role)

        details = {
            field: getattr(command, field)
            for field in ("name", "description", "category", "unit", "price")
            if getattr(command, field) is not None
        }
        if details:
            product.update_details(**details)
        if command.stock is not None:
            product.set_stock(command.stock)
        if command.status is not None:
            product.change_status(command.status)

        repo.add(product)

    @handle(DeleteProduct)
    def delete_product(self, command):
        repo = current_domain.repository_for(Product)
        product = load_product(command.product_id)
        _assert_can_manage(product, command.actor_id, command.actor_role)

        product.delete(deleted_by=command.actor_id)
        repo.add(product)
        logger.info("Product deleted", product_id=str(product.id), deleted_by=str(command.actor_id))
