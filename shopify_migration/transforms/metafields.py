"""
Metafield portability rules.

Metafields follow their owner to the destination store, minus the ones
that cannot mean anything there:

* namespaces starting with ``app--`` belong to an app installation of the
  source store;
* for products, values holding a ``gid://shopify/`` reference point at
  source-store objects.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, Iterable, List

APP_NAMESPACE_PREFIX = "app--"
GLOBAL_ID_MARKER = "gid://shopify/"

Metafield = Dict[str, Any]


def is_app_reserved(metafield: Metafield) -> bool:
    return (metafield.get("namespace") or "").startswith(APP_NAMESPACE_PREFIX)


def references_global_id(metafield: Metafield) -> bool:
    value = metafield.get("value")
    return isinstance(value, str) and GLOBAL_ID_MARKER in value


def portable_metafields(metafields: Iterable[Metafield]) -> List[Metafield]:
    """Drop app-reserved metafields."""
    return [m for m in metafields if m and not is_app_reserved(m)]


def portable_product_metafields(metafields: Iterable[Metafield]) -> List[Metafield]:
    """Drop app-reserved, empty and global-id-valued metafields."""
    return [
        m
        for m in portable_metafields(metafields)
        if m.get("value") not in (None, "") and not references_global_id(m)
    ]


def rehome_metafield(metafield: Metafield, owner_resource: str, owner_id: Any) -> Metafield:
    """Return a creation payload bound to the new owner."""
    payload = copy.deepcopy(metafield)
    payload.pop("id", None)
    payload["owner_resource"] = owner_resource
    payload["owner_id"] = owner_id
    return payload


def shop_metafield_payload(metafield: Metafield) -> Metafield:
    """Shop metafields have no owner; strip what the listing added."""
    payload = copy.deepcopy(metafield)
    for field in ("id", "owner_id", "owner_resource"):
        payload.pop(field, None)
    return payload
