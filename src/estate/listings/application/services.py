"""
Listing Application Services
============================

Application services orchestrate business logic and coordinate between
domain entities and repositories.

Following SOLID principles:
- Single Responsibility: Each service has one clear purpose
- Dependency Inversion: Depend on abstractions (repositories), not concrete implementations
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import List, Optional, Tuple
from uuid import uuid4

from estate.core import ResourceNotFoundException, ValidationException
from estate.listings.application.dto import (
    InquiryCreateDTO,
    ListingCreateDTO,
    ListingQueryDTO,
    ListingUpdateDTO,
)
from estate.listings.domain import Inquiry, Listing, make_listing_slug
from estate.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


# ========== Repository Interfaces (Dependency Inversion) ==========

class IListingRepository(ABC):
    """Interface for listing data access."""

    @abstractmethod
    async def get_by_id(self, listing_id: str) -> Optional[Listing]:
        """Get listing by id."""

    @abstractmethod
    async def get_by_slug(self, slug: str) -> Optional[Listing]:
        """Get listing by slug."""

    @abstractmethod
    async def add(self, listing: Listing) -> Listing:
        """Persist a new listing."""

    @abstractmethod
    async def save(self, listing: Listing) -> Listing:
        """Persist changes to an existing listing."""

    @abstractmethod
    async def delete(self, listing_id: str) -> bool:
        """Delete a listing. Returns False when it did not exist."""

    @abstractmethod
    async def search(
        self,
        filters: dict,
        sort: str = "newest",
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[Listing], int]:
        """Search listings. Returns the page and the total match count."""


class IInquiryRepository(ABC):
    """Interface for inquiry data access."""

    @abstractmethod
    async def add(self, inquiry: Inquiry) -> Inquiry:
        """Persist a new inquiry."""

    @abstractmethod
    async def list_for_listing(self, listing_id: str, limit: int = 50) -> List[Inquiry]:
        """Inquiries for a listing, newest first."""


# ========== Application Services ==========

class ListingService:
    """
    Service for listing management and buyer inquiries.

    Coordinates between domain logic and data access.
    """

    def __init__(
        self,
        listing_repository: IListingRepository,
        inquiry_repository: Optional[IInquiryRepository] = None
    ):
        self._listings = listing_repository
        self._inquiries = inquiry_repository

    async def create_listing(self, dto: ListingCreateDTO) -> Listing:
        listing_id = str(uuid4())
        now = datetime.now(timezone.utc)

        try:
            listing = Listing(
                id=listing_id,
                slug=make_listing_slug(dto.title, listing_id),
                title=dto.title,
                description=dto.description,
                price=dto.price,
                currency=dto.currency,
                property_type=dto.property_type,
                status=dto.status,
                address=dto.address,
                city=dto.city,
                bedrooms=dto.bedrooms,
                bathrooms=dto.bathrooms,
                area_sqm=dto.area_sqm,
                amenities=list(dto.amenities),
                images=list(dto.images),
                created_at=now,
                updated_at=now,
            )
        except ValueError as e:
            raise ValidationException(str(e)) from e

        listing = await self._listings.add(listing)
        logger.info("Listing created", extra={"listing_id": listing.id, "city": listing.city})
        return listing

    async def get_listing(self, listing_id: str) -> Listing:
        """
        Get a listing by id.

        Raises:
            ResourceNotFoundException: If no listing has this id
        """
        listing = await self._listings.get_by_id(listing_id)
        if listing is None:
            raise ResourceNotFoundException("Listing", listing_id)
        return listing

    async def get_listing_by_slug(self, slug: str) -> Listing:
        listing = await self._listings.get_by_slug(slug)
        if listing is None:
            raise ResourceNotFoundException("Listing", slug)
        return listing

    async def search_listings(self, query: ListingQueryDTO) -> Tuple[List[Listing], int]:
        if (
            query.min_price is not None
            and query.max_price is not None
            and query.min_price > query.max_price
        ):
            raise ValidationException("min_price cannot exceed max_price")

        return await self._listings.search(
            query.filters(),
            sort=query.sort,
            limit=query.limit,
            offset=query.offset
        )

    async def update_listing(self, listing_id: str, dto: ListingUpdateDTO) -> Listing:
        """
        Apply a partial update.

        Status changes go through the domain transition rules; a sold
        listing cannot be reopened.
        """
        listing = await self.get_listing(listing_id)
        changes = dto.model_dump(exclude_unset=True, exclude_none=True)
        now = datetime.now(timezone.utc)

        new_status = changes.pop("status", None)
        if new_status is not None:
            try:
                listing.change_status(new_status, now)
            except ValueError as e:
                raise ValidationException(str(e)) from e

        for field_name, value in changes.items():
            setattr(listing, field_name, value)
        if "title" in changes:
            listing.slug = make_listing_slug(listing.title, listing.id)

        listing.updated_at = now
        listing = await self._listings.save(listing)
        logger.info(
            "Listing updated",
            extra={"listing_id": listing.id, "fields": sorted(changes) + (["status"] if new_status else [])}
        )
        return listing

    async def delete_listing(self, listing_id: str) -> None:
        if not await self._listings.delete(listing_id):
            raise ResourceNotFoundException("Listing", listing_id)
        logger.info("Listing deleted", extra={"listing_id": listing_id})

    async def create_inquiry(self, listing_id: str, dto: InquiryCreateDTO) -> Inquiry:
        """
        Record a buyer inquiry.

        Raises:
            ResourceNotFoundException: Unknown listing
            ValidationException: Listing is sold or withdrawn
        """
        if self._inquiries is None:
            raise ValueError("Inquiry repository not configured")

        listing = await self.get_listing(listing_id)
        if not listing.is_available:
            raise ValidationException(
                f"Listing is {listing.status} and no longer accepts inquiries",
                {"listing_id": listing_id, "status": listing.status}
            )

        try:
            inquiry = Inquiry(
                id=str(uuid4()),
                listing_id=listing.id,
                name=dto.name,
                email=dto.email,
                phone=dto.phone,
                message=dto.message,
            )
        except ValueError as e:
            raise ValidationException(str(e)) from e

        inquiry = await self._inquiries.add(inquiry)
        logger.info("Inquiry received", extra={"listing_id": listing.id, "inquiry_id": inquiry.id})
        return inquiry

    async def list_inquiries(self, listing_id: str, limit: int = 50) -> List[Inquiry]:
        if self._inquiries is None:
            raise ValueError("Inquiry repository not configured")

        await self.get_listing(listing_id)
        return await self._inquiries.list_for_listing(listing_id, limit=limit)
