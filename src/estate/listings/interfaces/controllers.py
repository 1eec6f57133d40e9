"""
Listing Controllers (API Routes)
================================

FastAPI routes for listings and buyer inquiries.

Controllers are thin - they delegate to application services. Every
handler here reads the datastore, so every handler is declared
``@force_dynamic``: the hosting platform must evaluate it per request and
must not try to pre-render it during the build.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from estate.infrastructure.database import get_session
from estate.listings.application import (
    InquiryCreateDTO,
    InquiryResponse,
    ListingCreateDTO,
    ListingPageResponse,
    ListingQueryDTO,
    ListingResponse,
    ListingService,
    ListingUpdateDTO,
    PageMetadataResponse,
    build_listing_metadata,
)
from estate.listings.application.dto import ListingStatusStr, PropertyTypeStr, SortFieldStr
from estate.listings.infrastructure import (
    SQLAlchemyInquiryRepository,
    SQLAlchemyListingRepository,
)
from estate.shared.api import DynamicAwareRoute, force_dynamic
from estate.shared.infrastructure.logging import get_logger, log_latency

logger = get_logger(__name__)
router = APIRouter(prefix="/listings", tags=["Listings"], route_class=DynamicAwareRoute)


# ========== Example payloads for Swagger ==========

LISTING_CREATE_EXAMPLE = {
    "title": "Sunny two-bedroom flat in Alfama",
    "description": "Renovated flat with river views, close to the tram line.",
    "price": 485000,
    "currency": "EUR",
    "property_type": "apartment",
    "address": "Rua de São Miguel 12",
    "city": "Lisbon",
    "bedrooms": 2,
    "bathrooms": 1,
    "area_sqm": 78,
    "amenities": ["balcony", "elevator"],
    "images": ["/images/alfama-1.jpg"]
}


# ========== Dependencies ==========

async def get_listing_service(
    session: AsyncSession = Depends(get_session)
) -> ListingService:
    """Get listing service bound to the request's session."""
    return ListingService(
        SQLAlchemyListingRepository(session),
        SQLAlchemyInquiryRepository(session)
    )


# ========== Route Handlers ==========

@router.post(
    "",
    response_model=ListingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a listing",
    openapi_extra={
        "requestBody": {"content": {"application/json": {"example": LISTING_CREATE_EXAMPLE}}}
    }
)
@force_dynamic
async def create_listing(
    request: ListingCreateDTO,
    service: ListingService = Depends(get_listing_service)
):
    listing = await service.create_listing(request)
    return ListingResponse.model_validate(listing)


@router.get(
    "",
    response_model=ListingPageResponse,
    summary="Search listings",
    description="""
    Search listings with optional filters.

    **Sort**: `newest` (default), `price_asc`, `price_desc`
    """
)
@force_dynamic
async def search_listings(
    city: Optional[str] = Query(None, description="City, case-insensitive"),
    property_type: Optional[PropertyTypeStr] = Query(None),
    listing_status: Optional[ListingStatusStr] = Query(None, alias="status"),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    min_bedrooms: Optional[int] = Query(None, ge=0),
    sort: SortFieldStr = Query("newest"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    service: ListingService = Depends(get_listing_service)
):
    query = ListingQueryDTO(
        city=city,
        property_type=property_type,
        status=listing_status,
        min_price=min_price,
        max_price=max_price,
        min_bedrooms=min_bedrooms,
        sort=sort,
        limit=limit,
        offset=offset,
    )

    with log_latency(logger, "listing_search", filters=sorted(query.filters())):
        listings, total = await service.search_listings(query)

    return ListingPageResponse(
        listings=[ListingResponse.model_validate(listing) for listing in listings],
        total_count=total,
        limit=query.limit,
        offset=query.offset
    )


@router.get(
    "/slug/{slug}",
    response_model=ListingResponse,
    summary="Get a listing by slug",
    responses={404: {"description": "Listing not found"}}
)
@force_dynamic
async def get_listing_by_slug(
    slug: str,
    service: ListingService = Depends(get_listing_service)
):
    listing = await service.get_listing_by_slug(slug)
    return ListingResponse.model_validate(listing)


@router.get(
    "/{listing_id}",
    response_model=ListingResponse,
    summary="Get a listing",
    responses={404: {"description": "Listing not found"}}
)
@force_dynamic
async def get_listing(
    listing_id: str,
    service: ListingService = Depends(get_listing_service)
):
    listing = await service.get_listing(listing_id)
    return ListingResponse.model_validate(listing)


@router.patch(
    "/{listing_id}",
    response_model=ListingResponse,
    summary="Update a listing",
    description="""
    Partially update a listing. Status changes follow the listing lifecycle:
    a `sold` listing cannot be reopened, a `withdrawn` one can only go back
    to `active`.
    """,
    responses={404: {"description": "Listing not found"}, 422: {"description": "Invalid change"}}
)
@force_dynamic
async def update_listing(
    listing_id: str,
    request: ListingUpdateDTO,
    service: ListingService = Depends(get_listing_service)
):
    listing = await service.update_listing(listing_id, request)
    return ListingResponse.model_validate(listing)


@router.delete(
    "/{listing_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a listing",
    responses={404: {"description": "Listing not found"}}
)
@force_dynamic
async def delete_listing(
    listing_id: str,
    service: ListingService = Depends(get_listing_service)
):
    await service.delete_listing(listing_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{listing_id}/metadata",
    response_model=PageMetadataResponse,
    summary="Page metadata for a listing",
    description="""
    Title, description, canonical URL and Open Graph data for the listing
    page. URLs are built from `PUBLIC_SITE_URL`, falling back to
    `https://example.com` when it is unset.
    """
)
@force_dynamic
async def get_listing_metadata(
    listing_id: str,
    service: ListingService = Depends(get_listing_service)
):
    listing = await service.get_listing(listing_id)
    return build_listing_metadata(listing)


@router.post(
    "/{listing_id}/inquiries",
    response_model=InquiryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Send an inquiry about a listing",
    responses={
        404: {"description": "Listing not found"},
        422: {"description": "Listing no longer accepts inquiries"}
    }
)
@force_dynamic
async def create_inquiry(
    listing_id: str,
    request: InquiryCreateDTO,
    service: ListingService = Depends(get_listing_service)
):
    inquiry = await service.create_inquiry(listing_id, request)
    return InquiryResponse.model_validate(inquiry)


@router.get(
    "/{listing_id}/inquiries",
    response_model=List[InquiryResponse],
    summary="List inquiries for a listing"
)
@force_dynamic
async def list_inquiries(
    listing_id: str,
    limit: int = Query(50, ge=1, le=200),
    service: ListingService = Depends(get_listing_service)
):
    inquiries = await service.list_inquiries(listing_id, limit=limit)
    return [InquiryResponse.model_validate(inquiry) for inquiry in inquiries]
