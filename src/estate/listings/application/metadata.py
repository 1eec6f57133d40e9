"""
Listing Page Metadata
=====================

Builds title, description, canonical URL and Open Graph data for listing
pages. The public site URL is display-only configuration: when it is unset
(as it is during the hosting platform's build) the documented fallback is
used, so metadata generation never fails on configuration.
"""

from typing import Optional
from urllib.parse import urljoin, urlsplit

from estate.config import DEFAULT_SITE_URL, get_site_name, get_site_url
from estate.listings.application.dto import OpenGraphDTO, PageMetadataResponse
from estate.listings.domain import Listing


DESCRIPTION_LIMIT = 160


def normalize_base_url(raw: str) -> str:
    """
    Coerce a configured base URL into an absolute ``scheme://host`` form.

    A bare host gets ``https://``; anything still without a host falls back
    to DEFAULT_SITE_URL.
    """
    candidate = raw.strip().rstrip("/")
    if candidate and "://" not in candidate:
        candidate = f"https://{candidate}"

    parts = urlsplit(candidate)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        return DEFAULT_SITE_URL
    return candidate


def absolute_url(base_url: str, path: str) -> str:
    """Join a path or URL onto the base. Absolute URLs pass through."""
    return urljoin(base_url + "/", path.lstrip("/")) if "://" not in path else path


def summarize(text: str, limit: int = DESCRIPTION_LIMIT) -> str:
    collapsed = " ".join(text.split())
    if len(collapsed) <= limit:
        return collapsed
    return collapsed[: limit - 1].rsplit(" ", 1)[0].rstrip(",.;:") + "…"


def build_listing_metadata(
    listing: Listing,
    site_url: Optional[str] = None,
    site_name: Optional[str] = None,
) -> PageMetadataResponse:
    """
    Build page metadata for a listing.

    Args:
        listing: The listing being rendered
        site_url: Override for the public base URL (defaults to PUBLIC_SITE_URL or its fallback)
        site_name: Override for the site name

    Returns:
        PageMetadataResponse with only absolute URLs
    """
    base_url = normalize_base_url(site_url if site_url is not None else get_site_url())
    name = site_name or get_site_name()

    canonical = absolute_url(base_url, f"/listings/{listing.slug}")
    title = f"{listing.title} | {name}"

    facts = [f"{listing.bedrooms} bed", f"{listing.bathrooms} bath"] if listing.bedrooms else []
    if listing.area_sqm:
        facts.append(f"{listing.area_sqm:g} m²")
    lead = f"{listing.property_type.capitalize()} in {listing.city}"
    if facts:
        lead += " · " + ", ".join(facts)
    description = summarize(f"{lead}. {listing.description}")

    return PageMetadataResponse(
        title=title,
        description=description,
        canonical_url=canonical,
        metadata_base=base_url,
        open_graph=OpenGraphDTO(
            title=title,
            description=description,
            url=canonical,
            site_name=name,
            images=[absolute_url(base_url, image) for image in listing.images],
        ),
    )
