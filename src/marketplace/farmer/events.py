"""Domain events for the Farmer aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Farmer")
class FarmerRegistered:
    __version__ = 1

    farmer_id = Identifier(required=True)
    user_id = Identifier(required=True)
    farm_name = String(required=True)
    registered_at = DateTime(required=True)


@marketplace.event(part_of="Farmer")
class FarmerVerified:
    __version__ = 1

    farmer_id = Identifier(required=True)
    verified_by = Identifier(required=True)
    verified_at = DateTime(required=True)


@marketplace.event(part_of="Farmer")
class FarmerRatingRecomputed:
    """The derived rating was rebuilt from the approved buyer reviews."""

    __version__ = 1

    farmer_id = Identifier(required=True)
    user_id = Identifier(required=True)
    rating = Float(required=True)
    review_count = Integer(required=True)
    recomputed_at = DateTime(required=True)
