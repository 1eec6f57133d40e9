"""
Listing Domain Entities
=======================

Pure Python domain entities for property listings.

Following Domain-Driven Design principles, these entities contain
business logic and are free of infrastructure concerns.
"""

import re
import unicodedata
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from estate.config import ListingStatus, PropertyType, LISTING_STATUSES, PROPERTY_TYPES


_NON_SLUG = re.compile(r"[^a-z0-9]+")

# Statuses a listing may move to from each status
ALLOWED_TRANSITIONS = {
    ListingStatus.ACTIVE: {ListingStatus.PENDING, ListingStatus.SOLD, ListingStatus.WITHDRAWN},
    ListingStatus.PENDING: {ListingStatus.ACTIVE, ListingStatus.SOLD, ListingStatus.WITHDRAWN},
    ListingStatus.WITHDRAWN: {ListingStatus.ACTIVE},
    ListingStatus.SOLD: set(),
}


def slugify(value: str) -> str:
    """
    Lowercase ASCII slug.

    >>> slugify("Sunny Loft, Alfama!")
    'sunny-loft-alfama'
    """
    normalized = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    return _NON_SLUG.sub("-", normalized.lower()).strip("-")


def make_listing_slug(title: str, listing_id: str) -> str:
    """Slug from the title, suffixed with the id prefix so it stays unique."""
    base = slugify(title) or "listing"
    return f"{base[:80].rstrip('-')}-{listing_id.replace('-', '')[:8]}"


@dataclass
class Listing:
    """
    A property offered on the site.

    Encapsulates price/size sanity rules and status transitions.
    """

    id: str
    slug: str
    title: str
    description: str
    price: float
    currency: str
    property_type: PropertyType
    status: ListingStatus
    address: str
    city: str

    bedrooms: int = 0
    bathrooms: int = 0
    area_sqm: Optional[float] = None
    amenities: List[str] = field(default_factory=list)
    images: List[str] = field(default_factory=list)

    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self):
        """Validate listing on initialization."""
        if self.price < 0:
            raise ValueError("price cannot be negative")
        if self.bedrooms < 0 or self.bathrooms < 0:
            raise ValueError("room counts cannot be negative")
        if self.area_sqm is not None and self.area_sqm <= 0:
            raise ValueError("area_sqm must be positive")
        if self.property_type not in PROPERTY_TYPES:
            raise ValueError(f"unknown property type: {self.property_type}")
        if self.status not in LISTING_STATUSES:
            raise ValueError(f"unknown listing status: {self.status}")

    @property
    def is_available(self) -> bool:
        """Whether buyers can still enquire about this listing."""
        return self.status in (ListingStatus.ACTIVE, ListingStatus.PENDING)

    @property
    def price_per_sqm(self) -> Optional[float]:
        if not self.area_sqm:
            return None
        return round(self.price / self.area_sqm, 2)

    @property
    def primary_image(self) -> Optional[str]:
        return self.images[0] if self.images else None

    def can_transition_to(self, new_status: ListingStatus) -> bool:
        if new_status == self.status:
            return True
        return new_status in ALLOWED_TRANSITIONS.get(self.status, set())

    def change_status(self, new_status: ListingStatus, timestamp: Optional[datetime] = None) -> None:
        """Move to a new status, enforcing the transition table."""
        if not self.can_transition_to(new_status):
            raise ValueError(f"cannot move listing from {self.status} to {new_status}")
        self.status = new_status
        self.updated_at = timestamp or datetime.now(timezone.utc)


@dataclass
class Inquiry:
    """A prospective buyer's message about a listing."""

    id: str
    listing_id: str
    name: str
    email: str
    message: str
    phone: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self):
        if "@" not in self.email:
            raise ValueError("email must contain '@'")
        if not self.message.strip():
            raise ValueError("message cannot be empty")
