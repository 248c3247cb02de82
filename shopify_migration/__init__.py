"""
Top-level package for the Shopify store-to-store migration utility.

This package copies products, collections, pages, blogs, articles, shop
metafields, menus and files from one Shopify store to another.  Platform
ids differ between stores, so entities are matched by handle (or URL, or
namespace and key) and every internal reference is rewritten before the
entity is re-created.  Modules are split into subpackages:

* :mod:`shopify_migration.extractors` – paged REST and GraphQL traversal
* :mod:`shopify_migration.transforms` – per-kind payload builders
* :mod:`shopify_migration.migrators` – Admin API transport and drivers
* :mod:`shopify_migration.models` – pydantic views for files and menus
* :mod:`shopify_migration.utils` – identity index, conflict policy,
  errors, reports and pre-flight checks

Orchestration is handled in :mod:`shopify_migration.migration_tool`.
"""
