"""
Smart and custom collection payloads.

Publications are tied to the sales channels of the source store and are
never copied.  Custom collection membership is rewritten from source
product ids to destination product ids.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, Iterable, List

Record = Dict[str, Any]


def smart_collection_payload(collection: Record) -> Record:
    payload = copy.deepcopy(collection)
    payload.pop("publications", None)
    return payload


def collects_for(products: Iterable[Record], product_map: Dict[Any, Any]) -> List[Record]:
    """Destination ``collects`` entries; members without a counterpart are dropped."""
    collects = []
    for product in products:
        destination_id = product_map.get(product.get("id"))
        if destination_id:
            collects.append({"product_id": destination_id})
    return collects


def custom_collection_payload(collection: Record, products: Iterable[Record], product_map: Dict[Any, Any]) -> Record:
    payload = copy.deepcopy(collection)
    payload.pop("publications", None)
    payload["collects"] = collects_for(products, product_map)
    return payload
