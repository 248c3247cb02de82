"""
Extractors for store listings.

This subpackage walks the paged REST listings and GraphQL connections of
a Shopify store and hands back plain record dictionaries.
"""

from .pagination import DEFAULT_PAGE_SIZE, connection_pages, records, rest_pages

__all__ = ["DEFAULT_PAGE_SIZE", "connection_pages", "records", "rest_pages"]
