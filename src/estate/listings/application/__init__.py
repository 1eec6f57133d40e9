"""
Listing Application Layer
=========================

Contains:
- Services: Orchestrate business logic and coordinate with repositories
- DTOs: Data transfer objects for API serialization
- Metadata: Page metadata for listing pages

This layer depends on the domain layer and repository interfaces,
but not on concrete infrastructure implementations.
"""

from estate.listings.application.dto import (
    InquiryCreateDTO,
    InquiryResponse,
    ListingCreateDTO,
    ListingPageResponse,
    ListingQueryDTO,
    ListingResponse,
    ListingUpdateDTO,
    OpenGraphDTO,
    PageMetadataResponse,
)
from estate.listings.application.metadata import build_listing_metadata
from estate.listings.application.services import (
    IInquiryRepository,
    IListingRepository,
    ListingService,
)

__all__ = [
    # DTOs
    "InquiryCreateDTO",
    "InquiryResponse",
    "ListingCreateDTO",
    "ListingPageResponse",
    "ListingQueryDTO",
    "ListingResponse",
    "ListingUpdateDTO",
    "OpenGraphDTO",
    "PageMetadataResponse",
    # Metadata
    "build_listing_metadata",
    # Services
    "ListingService",
    # Repository Interfaces
    "IListingRepository",
    "IInquiryRepository",
]
