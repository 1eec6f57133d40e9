"""
Estate Listings
===============

Real-estate listing API. Importing any module in this package is free of
configuration reads and datastore connections; both happen only while a
request is being handled.
"""

__version__ = "1.0.0"
