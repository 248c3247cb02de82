"""
Natural-key identity helpers.

Platform ids are local to one store, so entities are matched across
stores by a key both stores share: the handle for most resources, the
resolved URL for files and the ``(namespace, key)`` pair for shop
metafields.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Hashable, Iterable, Optional, Tuple

Record = Dict[str, Any]
KeyFn = Callable[[Record], Optional[Hashable]]


def handle_key(record: Record) -> Optional[str]:
    return record.get("handle") or None


def namespace_key(record: Record) -> Tuple[Optional[str], Optional[str]]:
    return (record.get("namespace"), record.get("key"))


def build_identity_index(records: Iterable[Record], key_fn: KeyFn = handle_key) -> Dict[Hashable, Any]:
    """
    Exhaust ``records`` and map ``key_fn(record)`` to ``record["id"]``.

    Later records overwrite earlier ones on a key collision.  Records
    whose key is ``None`` are ignored.
    """
    index: Dict[Hashable, Any] = {}
    for record in records:
        key = key_fn(record)
        if key is None:
            continue
        index[key] = record.get("id")
    return index


def build_product_identity_map(
    source_products: Iterable[Record], destination_products: Iterable[Record]
) -> Dict[Any, Any]:
    """Map source product ids to destination product ids by handle."""
    destination_by_handle = build_identity_index(destination_products)
    product_map: Dict[Any, Any] = {}
    for product in source_products:
        destination_id = destination_by_handle.get(product.get("handle"))
        if destination_id is not None:
            product_map[product.get("id")] = destination_id
    return product_map
