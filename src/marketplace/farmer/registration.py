"""Farmer profile registration and verification: commands and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import logger, marketplace
from marketplace.exceptions import NotFound, NotPermitted
from marketplace.farmer.farmer import Farmer
from marketplace.user.registration import load_user
from marketplace.user.user import is_admin


@marketplace.command(part_of="Farmer")
class RegisterFarmer:
    user_id: Identifier(required=True)
    actor_id: Identifier(required=True)
    actor_role: String(required=True, max_length=10)
    farm_name: String(required=True, max_length=200)
    district: String(required=True, max_length=100)
    municipality: String(required=True, max_length=100)
    latitude: Float()
    longitude: Float()


@marketplace.command(part_of="Farmer")
class VerifyFarmer:
    farmer_id: Identifier(required=True)
    actor_id: Identifier(required=True)
    actor_role: String(required=True, max_length=10)


@marketplace.command_handler(part_of=Farmer)
class FarmerProfileHandler:
    @handle(RegisterFarmer)
    def register_farmer(self, command):
        # A profile is opened by its own user, or on their behalf by an admin
        if not is_admin(command.actor_role) and str(command.actor_id) != str(command.user_id):
            raise NotPermitted({"user_id": ["You can only register a farmer profile for yourself"]})

        user = load_user(command.user_id)
        if not user.is_farmer:
            raise NotPermitted({"user_id": ["Only users with the FARMER role can own a farmer profile"]})

        repo = current_domain.repository_for(Farmer)
        if repo._dao.query.filter(user_id=str(command.user_id)).all().items:
            raise ValidationError({"user_id": ["This user already has a farmer profile"]})

        farmer = Farmer.register(
            user_id=command.user_id,
            farm_name=command.farm_name,
            district=command.district,
            municipality=command.municipality,
            latitude=command.latitude,
            longitude=command.longitude,
        )
        repo.add(farmer)
        logger.info("Farmer registered", farmer_id=str(farmer.id), user_id=str(command.user_id))
        return str(farmer.id)

    @handle(VerifyFarmer)
    def verify_farmer(self, command):
        if not is_admin(command.actor_role):
            raise NotPermitted({"actor": ["Only administrators can verify farmers"]})

        repo = current_domain.repository_for(Farmer)
        farmer = load_farmer(command.farmer_id)
        farmer.verify(verified_by=command.actor_id)
        repo.add(farmer)


def load_farmer(farmer_id) -> Farmer:
    """Fetch a farmer profile or raise ``NotFound``."""
    farmer = current_domain.repository_for(Farmer).get_or_none(farmer_id)
    if farmer is None:
        raise NotFound("Farmer", farmer_id)
    return farmer


def farmer_for_user(user_id) -> Farmer | None:
    """The farmer profile owned by ``user_id``, if any."""
    farmers = current_domain.repository_for(Farmer)._dao.query.filter(user_id=str(user_id)).all().items
    return farmers[0] if farmers else None
