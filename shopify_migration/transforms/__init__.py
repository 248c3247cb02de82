"""
Per-kind transforms turning a source record into a destination payload.

Every function here is pure: it receives records (and the id maps it
needs) and returns new dictionaries, leaving its inputs untouched.
"""

from .collections import collects_for, custom_collection_payload, smart_collection_payload
from .content import article_payload, blog_payload, page_payload
from .media import file_create_input, file_url, menu_create_input
from .metafields import (
    is_app_reserved,
    portable_metafields,
    portable_product_metafields,
    references_global_id,
    rehome_metafield,
    shop_metafield_payload,
)
from .products import image_payloads, product_payload, variant_id_map

__all__ = [
    "collects_for",
    "custom_collection_payload",
    "smart_collection_payload",
    "article_payload",
    "blog_payload",
    "page_payload",
    "file_create_input",
    "file_url",
    "menu_create_input",
    "is_app_reserved",
    "portable_metafields",
    "portable_product_metafields",
    "references_global_id",
    "rehome_metafield",
    "shop_metafield_payload",
    "image_payloads",
    "product_payload",
    "variant_id_map",
]
