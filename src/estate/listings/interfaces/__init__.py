"""
Listing Interfaces Layer
========================

Interface adapters (controllers) for the listings module.

This is the outermost layer - handles HTTP requests/responses and
delegates to application services.
"""

from estate.listings.interfaces.controllers import router as listings_router

__all__ = ["listings_router"]
