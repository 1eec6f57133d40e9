"""
Listings Module
===============

Bounded context for property listings and buyer inquiries.

Responsibilities:
- Create, search, update and delete listings
- Enforce the listing status lifecycle
- Accept buyer inquiries for available listings
- Build page metadata for listing pages
"""
