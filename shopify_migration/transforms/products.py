"""
Product payloads and image re-homing.

Images are left out of the product payload and attached once the product
exists, because their ``variant_ids`` must point at the destination
variants, which are only known after creation.  Variants are matched by
title between the two stores.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, Iterable, List, Optional

DEFAULT_FULFILLMENT_SERVICE = "manual"
DEFAULT_INVENTORY_MANAGEMENT = "shopify"

Record = Dict[str, Any]


def _as_number(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def is_genuine_discount(variant: Record) -> bool:
    """True when ``compare_at_price`` is strictly above ``price``."""
    compare_at = _as_number(variant.get("compare_at_price"))
    price = _as_number(variant.get("price"))
    if compare_at is None or price is None:
        return True
    return compare_at > price


def variant_payload(variant: Record) -> Record:
    payload = copy.deepcopy(variant)
    if payload.get("compare_at_price") and not is_genuine_discount(payload):
        payload.pop("compare_at_price")
    payload["fulfillment_service"] = DEFAULT_FULFILLMENT_SERVICE
    payload["inventory_management"] = DEFAULT_INVENTORY_MANAGEMENT
    payload.pop("image_id", None)
    return payload


def product_payload(product: Record) -> Record:
    """
    Build the creation payload of ``product``.

    The source record is left untouched: its variants still carry the
    source ids needed to remap the image associations afterwards.
    """
    payload = copy.deepcopy(product)
    payload.pop("images", None)
    payload["variants"] = [variant_payload(v) for v in product.get("variants") or []]
    return payload


def variant_id_map(source_variants: Iterable[Record], destination_variants: Iterable[Record]) -> Dict[Any, Any]:
    """Map source variant ids to destination variant ids by variant title."""
    destination_by_title = {}
    for variant in destination_variants or []:
        destination_by_title[variant.get("title")] = variant.get("id")
    id_map = {}
    for variant in source_variants or []:
        destination_id = destination_by_title.get(variant.get("title"))
        if destination_id is not None:
            id_map[variant.get("id")] = destination_id
    return id_map


def image_payload(image: Record, product_id: Any, id_map: Dict[Any, Any]) -> Record:
    """
    Re-home ``image`` on the destination product.

    Variant ids without a destination counterpart are dropped.
    """
    payload = copy.deepcopy(image)
    payload.pop("id", None)
    payload.pop("admin_graphql_api_id", None)
    payload["product_id"] = product_id
    payload["variant_ids"] = [id_map[v] for v in image.get("variant_ids") or [] if v in id_map]
    return payload


def image_payloads(images: Iterable[Record], product_id: Any, id_map: Dict[Any, Any]) -> List[Record]:
    return [image_payload(image, product_id, id_map) for image in images or []]
