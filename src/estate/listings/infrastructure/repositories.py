"""
Listing Infrastructure Repositories
===================================

Concrete implementations of repository interfaces using SQLAlchemy.

This layer contains the data access logic - how we store and retrieve
entities from the database.
"""

from typing import List, Optional, Tuple

from sqlalchemy import and_, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from estate.core import RepositoryException
from estate.listings.application import IInquiryRepository, IListingRepository
from estate.listings.domain import Inquiry, Listing
from estate.listings.infrastructure.models import InquiryModel, ListingModel


SORT_ORDERS = {
    "newest": (ListingModel.created_at.desc(), ListingModel.id),
    "price_asc": (ListingModel.price.asc(), ListingModel.id),
    "price_desc": (ListingModel.price.desc(), ListingModel.id),
}


def listing_from_model(model: ListingModel) -> Listing:
    return Listing(
        id=model.id,
        slug=model.slug,
        title=model.title,
        description=model.description,
        price=model.price,
        currency=model.currency,
        property_type=model.property_type,
        status=model.status,
        address=model.address,
        city=model.city,
        bedrooms=model.bedrooms,
        bathrooms=model.bathrooms,
        area_sqm=model.area_sqm,
        amenities=list(model.amenities or []),
        images=list(model.images or []),
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def inquiry_from_model(model: InquiryModel) -> Inquiry:
    return Inquiry(
        id=model.id,
        listing_id=model.listing_id,
        name=model.name,
        email=model.email,
        phone=model.phone,
        message=model.message,
        created_at=model.created_at,
    )


class SQLAlchemyListingRepository(IListingRepository):
    """
    SQLAlchemy implementation of listing repository.

    Handles persistence of Listing entities using async SQLAlchemy.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def _get_model(self, listing_id: str) -> Optional[ListingModel]:
        return await self._session.get(ListingModel, listing_id)

    async def get_by_id(self, listing_id: str) -> Optional[Listing]:
        model = await self._get_model(listing_id)
        return listing_from_model(model) if model else None

    async def get_by_slug(self, slug: str) -> Optional[Listing]:
        stmt = select(ListingModel).where(ListingModel.slug == slug)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return listing_from_model(model) if model else None

    async def add(self, listing: Listing) -> Listing:
        model = ListingModel(
            id=listing.id,
            slug=listing.slug,
            title=listing.title,
            description=listing.description,
            price=listing.price,
            currency=listing.currency,
            property_type=listing.property_type,
            status=listing.status,
            address=listing.address,
            city=listing.city,
            bedrooms=listing.bedrooms,
            bathrooms=listing.bathrooms,
            area_sqm=listing.area_sqm,
            amenities=list(listing.amenities),
            images=list(listing.images),
            created_at=listing.created_at,
            updated_at=listing.updated_at,
        )

        self._session.add(model)
        await self._session.flush()

        return listing_from_model(model)

    async def save(self, listing: Listing) -> Listing:
        model = await self._get_model(listing.id)
        if not model:
            raise RepositoryException(f"Listing {listing.id} not found")

        model.slug = listing.slug
        model.title = listing.title
        model.description = listing.description
        model.price = listing.price
        model.status = listing.status
        model.bedrooms = listing.bedrooms
        model.bathrooms = listing.bathrooms
        model.area_sqm = listing.area_sqm
        model.amenities = list(listing.amenities)
        model.images = list(listing.images)
        model.updated_at = listing.updated_at

        await self._session.flush()

        return listing_from_model(model)

    async def delete(self, listing_id: str) -> bool:
        model = await self._get_model(listing_id)
        if not model:
            return False

        # SQLite ignores ON DELETE CASCADE unless foreign keys are enabled
        await self._session.execute(delete(InquiryModel).where(InquiryModel.listing_id == listing_id))
        await self._session.delete(model)
        await self._session.flush()
        return True

    async def search(
        self,
        filters: dict,
        sort: str = "newest",
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[Listing], int]:
        conditions = []
        if "city" in filters:
            conditions.append(func.lower(ListingModel.city) == filters["city"].lower())
        if "property_type" in filters:
            conditions.append(ListingModel.property_type == filters["property_type"])
        if "status" in filters:
            conditions.append(ListingModel.status == filters["status"])
        if "min_price" in filters:
            conditions.append(ListingModel.price >= filters["min_price"])
        if "max_price" in filters:
            conditions.append(ListingModel.price <= filters["max_price"])
        if "min_bedrooms" in filters:
            conditions.append(ListingModel.bedrooms >= filters["min_bedrooms"])

        stmt = select(ListingModel)
        count_stmt = select(func.count()).select_from(ListingModel)
        if conditions:
            stmt = stmt.where(and_(*conditions))
            count_stmt = count_stmt.where(and_(*conditions))

        stmt = stmt.order_by(*SORT_ORDERS.get(sort, SORT_ORDERS["newest"]))
        stmt = stmt.limit(limit).offset(offset)

        result = await self._session.execute(stmt)
        total = await self._session.scalar(count_stmt)

        return [listing_from_model(m) for m in result.scalars().all()], int(total or 0)


class SQLAlchemyInquiryRepository(IInquiryRepository):
    """SQLAlchemy implementation of inquiry repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def add(self, inquiry: Inquiry) -> Inquiry:
        model = InquiryModel(
            id=inquiry.id,
            listing_id=inquiry.listing_id,
            name=inquiry.name,
            email=inquiry.email,
            phone=inquiry.phone,
            message=inquiry.message,
            created_at=inquiry.created_at,
        )

        self._session.add(model)
        await self._session.flush()

        return inquiry_from_model(model)

    async def list_for_listing(self, listing_id: str, limit: int = 50) -> List[Inquiry]:
        stmt = (
            select(InquiryModel)
            .where(InquiryModel.listing_id == listing_id)
            .order_by(InquiryModel.created_at.desc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [inquiry_from_model(m) for m in result.scalars().all()]
