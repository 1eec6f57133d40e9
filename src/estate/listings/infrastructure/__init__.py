"""
Listing Infrastructure Layer
============================

Infrastructure implementations for listings:
- Models: SQLAlchemy ORM models
- Repositories: Data access layer
"""

from estate.listings.infrastructure.models import InquiryModel, ListingModel
from estate.listings.infrastructure.repositories import (
    SQLAlchemyInquiryRepository,
    SQLAlchemyListingRepository,
)

__all__ = [
    "InquiryModel",
    "ListingModel",
    "SQLAlchemyInquiryRepository",
    "SQLAlchemyListingRepository",
]
