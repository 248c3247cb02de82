"""
Paged traversal of store collections.

Two encodings are supported and they are not interchangeable:

* REST listings hand back the params of the next page alongside the
  records; walking stops when there are none (:func:`rest_pages`).
* GraphQL connections expose ``pageInfo.hasNextPage`` and
  ``pageInfo.endCursor``; walking stops when ``hasNextPage`` is false
  (:func:`connection_pages`).

Both are generators: lazy, finite and usable once.  Anything that needs
a complete view of a store (an identity index for instance) must consume
them to the end first.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, List, Optional

import requests

from shopify_migration.utils.errors import ListingError

DEFAULT_PAGE_SIZE = 250

Record = Dict[str, Any]


def rest_pages(
    store,
    path: str,
    params: Optional[Dict[str, Any]] = None,
    *,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> Iterator[List[Record]]:
    """
    Yield every page of the REST listing at ``path``.

    :param store: Anything exposing ``list(path, params) -> (items, next_params)``.
    :param params: Extra query params of the first request (filters).
    :raises ListingError: on transport errors or a non-list page.
    """
    page_params: Optional[Dict[str, Any]] = {"limit": page_size, **(params or {})}
    while page_params:
        try:
            items, page_params = store.list(path, page_params)
        except requests.RequestException as e:
            raise ListingError(f"Listing {path} failed on {store}: {e}") from e
        if not isinstance(items, list):
            raise ListingError(f"Listing {path} returned an unexpected shape: {items!r}")
        yield items


def connection_pages(
    store,
    query: str,
    connection: str,
    variables: Optional[Dict[str, Any]] = None,
    *,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> Iterator[List[Record]]:
    """
    Yield the nodes of a GraphQL connection, one page at a time.

    ``query`` must declare ``$first: Int!`` and ``$after: String`` and
    select ``edges { node }`` and ``pageInfo { hasNextPage endCursor }``
    on the top-level field named ``connection``.

    :raises ListingError: on transport errors, GraphQL errors, a
        response without the connection or a next page without a cursor.
    """
    cursor: Optional[str] = None
    has_next_page = True
    while has_next_page:
        page_variables = {**(variables or {}), "first": page_size, "after": cursor}
        try:
            response = store.graphql(query, page_variables)
        except requests.RequestException as e:
            raise ListingError(f"Listing {connection} failed on {store}: {e}") from e
        if (response or {}).get("errors"):
            raise ListingError(f"GraphQL errors while listing {connection}: {response['errors']}")
        conn = ((response or {}).get("data") or {}).get(connection)
        if not conn:
            raise ListingError(f"Invalid GraphQL response structure for {connection}: {response!r}")
        yield [edge.get("node") or {} for edge in conn.get("edges") or []]
        page_info = conn.get("pageInfo") or {}
        has_next_page = bool(page_info.get("hasNextPage"))
        cursor = page_info.get("endCursor")
        if has_next_page and not cursor:
            raise ListingError(f"Missing endCursor while listing {connection}: {page_info!r}")


def records(pages: Iterable[List[Record]]) -> Iterator[Record]:
    """Flatten an iterator of pages into an iterator of records."""
    for page in pages:
        yield from page
