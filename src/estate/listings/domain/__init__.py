"""
Listing Domain Layer
====================

Entities and pure business rules for property listings.

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from estate.listings.domain.entities import (
    ALLOWED_TRANSITIONS,
    Inquiry,
    Listing,
    make_listing_slug,
    slugify,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "Inquiry",
    "Listing",
    "make_listing_slug",
    "slugify",
]
