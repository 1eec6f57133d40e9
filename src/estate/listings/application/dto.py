"""
Listing Application DTOs
========================

Data Transfer Objects for the listings API layer.

These Pydantic models handle serialization/deserialization and validation
for API requests and responses.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ========== Type Aliases for Literals ==========
PropertyTypeStr = Literal["house", "apartment", "condo", "townhouse", "land", "commercial"]
ListingStatusStr = Literal["active", "pending", "sold", "withdrawn"]
SortFieldStr = Literal["newest", "price_asc", "price_desc"]


# ========== Request DTOs ==========

class ListingCreateDTO(BaseModel):
    """DTO for creating a listing."""
    title: str = Field(..., min_length=3, max_length=200, description="Listing headline")
    description: str = Field(..., min_length=1, description="Full description")
    price: float = Field(..., ge=0, description="Asking price")
    currency: str = Field(default="EUR", min_length=3, max_length=3, description="ISO 4217 code")
    property_type: PropertyTypeStr = Field(..., description="Kind of property")
    status: ListingStatusStr = Field(default="active", description="Listing status")
    address: str = Field(..., min_length=1, description="Street address")
    city: str = Field(..., min_length=1, description="City")
    bedrooms: int = Field(default=0, ge=0)
    bathrooms: int = Field(default=0, ge=0)
    area_sqm: Optional[float] = Field(None, gt=0, description="Floor area in square metres")
    amenities: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list, description="Image URLs, first is primary")

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.upper()


class ListingUpdateDTO(BaseModel):
    """DTO for partially updating a listing. Omitted fields are unchanged."""
    title: Optional[str] = Field(None, min_length=3, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, ge=0)
    status: Optional[ListingStatusStr] = None
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)
    area_sqm: Optional[float] = Field(None, gt=0)
    amenities: Optional[List[str]] = None
    images: Optional[List[str]] = None


class ListingQueryDTO(BaseModel):
    """Query parameters for listing search."""
    city: Optional[str] = None
    property_type: Optional[PropertyTypeStr] = None
    status: Optional[ListingStatusStr] = None
    min_price: Optional[float] = Field(None, ge=0)
    max_price: Optional[float] = Field(None, ge=0)
    min_bedrooms: Optional[int] = Field(None, ge=0)
    sort: SortFieldStr = "newest"
    limit: int = Field(default=20, ge=1, le=100)
    offset: int = Field(default=0, ge=0)

    def filters(self) -> dict:
        """Only the filters that were actually supplied."""
        return self.model_dump(exclude={"sort", "limit", "offset"}, exclude_none=True)


class InquiryCreateDTO(BaseModel):
    """DTO for a buyer inquiry."""
    name: str = Field(..., min_length=1, max_length=120)
    email: str = Field(..., min_length=3, max_length=254, pattern=r"^[^@\s]+@[^@\s]+$")
    phone: Optional[str] = Field(None, max_length=40)
    message: str = Field(..., min_length=1, max_length=5000)


# ========== Response DTOs ==========

class ListingResponse(BaseModel):
    """Response model for a listing."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    slug: str
    title: str
    description: str
    price: float
    currency: str
    property_type: PropertyTypeStr
    status: ListingStatusStr
    address: str
    city: str
    bedrooms: int
    bathrooms: int
    area_sqm: Optional[float] = None
    price_per_sqm: Optional[float] = None
    amenities: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class ListingPageResponse(BaseModel):
    """A page of listing search results."""
    listings: List[ListingResponse]
    total_count: int
    limit: int
    offset: int


class InquiryResponse(BaseModel):
    """Response model for an inquiry."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    listing_id: str
    name: str
    email: str
    phone: Optional[str] = None
    message: str
    created_at: datetime


class OpenGraphDTO(BaseModel):
    title: str
    description: str
    url: str
    site_name: str
    type: str = "website"
    images: List[str] = Field(default_factory=list)


class PageMetadataResponse(BaseModel):
    """Metadata for rendering a listing page's <head>."""
    title: str
    description: str
    canonical_url: str
    metadata_base: str
    open_graph: OpenGraphDTO
