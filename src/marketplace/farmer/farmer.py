"""Farmer aggregate: a seller's profile and its derived rating.

The rating and review count are never authored directly. They are written
only by ``marketplace.farmer.rating.recompute_rating`` from the current set of
approved buyer reviews.
"""

from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, ValueObject

from marketplace.domain import marketplace
from marketplace.farmer.events import FarmerRatingRecomputed, FarmerRegistered, FarmerVerified


@marketplace.value_object(part_of="Farmer")
class Location:
    """Where the farm is. Coordinates are optional but come as a pair."""

    district: String(required=True, max_length=100)
    municipality: String(required=True, max_length=100)
    latitude: Float(min_value=-90.0, max_value=90.0)
    longitude: Float(min_value=-180.0, max_value=180.0)

    @invariant.post
    def coordinates_come_in_pairs(self):
        if (self.latitude is None) != (self.longitude is None):
            raise ValidationError({"coordinates": ["Both latitude and longitude are required"]})


@marketplace.aggregate
class Farmer:
    user_id: Identifier(required=True, unique=True)
    farm_name: String(required=True, min_length=2, max_length=200)
    location: ValueObject(Location, required=True)
    is_verified: Boolean(default=False)
    rating: Float(default=0.0)
    review_count: Integer(default=0, min_value=0)
    registered_at: DateTime()
    rating_updated_at: DateTime()

    @invariant.post
    def rating_is_zero_or_between_one_and_five(self):
        if self.rating is None or self.rating == 0:
            return
        if self.rating < 1 or self.rating > 5:
            raise ValidationError({"rating": ["Rating must be 0 or between 1 and 5"]})

    @invariant.post
    def zero_rating_means_no_reviews(self):
        if (self.rating or 0) == 0 and (self.review_count or 0) != 0:
            raise ValidationError({"review_count": ["A farmer with reviews cannot have a zero rating"]})

    @classmethod
    def register(cls, user_id, farm_name, district, municipality, latitude=None, longitude=None):
        now = datetime.now(UTC)
        farmer = cls(
            user_id=user_id,
            farm_name=farm_name,
            location=Location(
                district=district,
                municipality=municipality,
                latitude=latitude,
                longitude=longitude,
            ),
            is_verified=False,
            rating=0.0,
            review_count=0,
            registered_at=now,
        )
        farmer.raise_(
            FarmerRegistered(
                farmer_id=str(farmer.id),
                user_id=str(user_id),
                farm_name=farm_name,
                registered_at=now,
            )
        )
        return farmer

    def verify(self, verified_by):
        if self.is_verified:
            raise ValidationError({"is_verified": ["Farmer is already verified"]})

        now = datetime.now(UTC)
        self.is_verified = True
        self.raise_(
            FarmerVerified(
                farmer_id=str(self.id),
                verified_by=str(verified_by),
                verified_at=now,
            )
        )

    def record_rating(self, rating, review_count):
        """Store a freshly recomputed rating aggregate."""
        now = datetime.now(UTC)
        with atomic_change(self):
            self.rating = rating
            self.review_count = review_count
            self.rating_updated_at = now
        self.raise_(
            FarmerRatingRecomputed(
                farmer_id=str(self.id),
                user_id=str(self.user_id),
                rating=rating,
                review_count=review_count,
                recomputed_at=now,
            )
        )
