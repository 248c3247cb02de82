"""
Shopify store migrators and transport.

This subpackage provides the Admin API transport (:class:`ShopifyStore`),
the per-entity migration steps and the per-type drivers that decide,
record by record, whether to create, skip or replace.
"""

from .drivers import MigrationSummary, ShopifyMigrator
from .entities import EntityMigrator
from .shopify_client import RateLimiter, ShopifyStore

__all__ = ["MigrationSummary", "ShopifyMigrator", "EntityMigrator", "RateLimiter", "ShopifyStore"]
