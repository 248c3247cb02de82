"""
Shopify Admin API transport.

This module implements low-level interactions with the Shopify Admin
REST and GraphQL APIs for one store.  A :class:`ShopifyStore` exposes the
small capability the migration engine relies on:

* ``list(path, params)`` returning a page of records plus the params of
  the next page (derived from the REST ``Link`` header) or ``None``;
* ``get``, ``create`` and ``delete`` for single REST resources;
* ``graphql(query, variables)`` returning the raw ``{data, errors}`` body.

A rate limiter keeps a steady request pace and backs off when the
store's call-limit header shows the REST bucket filling up; a retry
wrapper re-sends a request when Shopify answers 429 (throttled).  Every other
failure is raised to the caller on the first attempt.

Usage example::

    store = ShopifyStore({"store": "my-shop", "access_token": "shpat_..."})
    products, next_params = store.list("products", {"limit": 250})
    store.create("pages", "page", {"title": "About", "handle": "about"})
"""

from __future__ import annotations

import time
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import parse_qs, urlparse

import requests

DEFAULT_API_VERSION = "2023-10"

###############################################################################
# Rate limiting and retry utilities
###############################################################################

CALL_LIMIT_HEADER = "X-Shopify-Shop-Api-Call-Limit"


class RateLimiter:
    """
    Paces the requests sent to one store.

    Requests are spaced so that no more than ``rpm`` go out per minute.
    On top of that, the REST bucket fill reported by Shopify in the
    ``X-Shopify-Shop-Api-Call-Limit`` header (``"used/size"``) is fed back
    through :meth:`observe`: once fewer than ``headroom`` slots are left,
    the next request waits for the bucket to leak enough slots at
    ``leak_rate`` requests per second (two on standard plans).
    """

    def __init__(self, rpm: int = 120, *, leak_rate: float = 2.0, headroom: int = 2) -> None:
        self.rpm = max(1, rpm)
        self.interval = 60.0 / float(self.rpm)
        self.leak_rate = leak_rate
        self.headroom = headroom
        self._next_at = 0.0
        self._used = 0
        self._size: Optional[int] = None

    def observe(self, resp: requests.Response) -> None:
        """Record the bucket fill reported by ``resp``, if any."""
        header = (getattr(resp, "headers", None) or {}).get(CALL_LIMIT_HEADER)
        if not header:
            return
        try:
            used, size = (int(part) for part in header.split("/", 1))
        except ValueError:
            return
        self._used, self._size = used, size

    def bucket_delay(self) -> float:
        """Seconds to wait until the bucket has ``headroom`` free slots again."""
        if not self._size:
            return 0.0
        excess = self._used - (self._size - self.headroom)
        if excess < 0:
            return 0.0
        return (excess + 1) / self.leak_rate

    def wait(self, time_fn: Callable[[], float] = time.time, sleep_fn: Callable[[float], None] = time.sleep) -> None:
        pause = max(self._next_at - time_fn(), self.bucket_delay())
        if pause > 0:
            sleep_fn(pause)
        # The next response reports the fill again.
        self._used, self._size = 0, None
        self._next_at = time_fn() + self.interval


def shopify_headers(access_token: str) -> Dict[str, str]:
    """
    Construct the default headers required for Admin API requests.

    :param access_token: The Admin API access token of the store.
    :return: A dictionary of headers including the access token.
    """
    return {
        "Content-Type": "application/json",
        "X-Shopify-Access-Token": access_token,
    }


def with_retries(
    fn: Callable[[], requests.Response],
    *,
    max_attempts: int = 3,
    base_delay: float = 2.0,
    sleep_fn: Callable[[float], None] = time.sleep,
) -> requests.Response:
    """
    Execute a function returning a ``requests.Response``, retrying only
    when the store throttles the request (HTTP 429).  The ``Retry-After``
    header is honoured when present.

    :param fn: A zero-argument callable that performs the HTTP request.
    :param max_attempts: Maximum number of attempts before giving up.
    :param base_delay: Delay in seconds when no ``Retry-After`` is sent.
    :return: The successful ``requests.Response``.
    :raises requests.HTTPError: for any other status, or once attempts run out.
    """
    attempt = 0
    while True:
        resp = fn()
        try:
            resp.raise_for_status()
            return resp
        except requests.HTTPError as e:
            if e.response is None or e.response.status_code != 429 or attempt >= max_attempts - 1:
                raise
            retry_after = e.response.headers.get("Retry-After")
            sleep_fn(float(retry_after) if retry_after else base_delay)
            attempt += 1


def normalize_store_domain(domain: Optional[str]) -> str:
    """
    Normalize a store name to its ``.myshopify.com`` domain.

    - "my-store" -> "my-store.myshopify.com"
    - "https://my-store.myshopify.com/" -> "my-store.myshopify.com"
    """
    if not domain:
        return ""
    domain = domain.replace("https://", "").replace("http://", "").rstrip("/")
    if "." not in domain:
        domain = f"{domain}.myshopify.com"
    return domain


def next_page_params(resp: requests.Response, params: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """
    Build the params of the next page from the ``Link`` header.

    Shopify's cursor pagination only accepts ``limit`` (and ``fields``)
    alongside ``page_info``; any filter of the first request is already
    encoded in the cursor.
    """
    link = (resp.links or {}).get("next")
    if not link or not link.get("url"):
        return None
    query = parse_qs(urlparse(link["url"]).query)
    page_info = (query.get("page_info") or [None])[0]
    if not page_info:
        return None
    next_params: Dict[str, Any] = {"page_info": page_info}
    if params and params.get("limit"):
        next_params["limit"] = params["limit"]
    return next_params


###############################################################################
# Store
###############################################################################

class ShopifyStore:
    """Admin API client bound to one store and one access token."""

    def __init__(
        self,
        cfg: Dict[str, Any],
        *,
        session: Optional[requests.Session] = None,
        limiter: Optional[RateLimiter] = None,
    ) -> None:
        self.domain = normalize_store_domain(cfg.get("store"))
        self.access_token = cfg.get("access_token") or ""
        self.api_version = cfg.get("api_version") or DEFAULT_API_VERSION
        self.timeout = cfg.get("timeout", 60)
        self.base_url = f"https://{self.domain}/admin/api/{self.api_version}"
        self.session = session or requests.Session()
        self.limiter = limiter or RateLimiter(cfg.get("rate_limit_rpm", 120))

    def __repr__(self) -> str:
        return f"ShopifyStore({self.domain!r})"

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.strip('/')}.json"

    def _request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        self.limiter.wait()
        def do_request() -> requests.Response:
            resp = self.session.request(
                method,
                url,
                headers=shopify_headers(self.access_token),
                params=params,
                json=json_body,
                timeout=self.timeout,
            )
            self.limiter.observe(resp)
            return resp
        return with_retries(do_request)

    def list(self, path: str, params: Optional[Dict[str, Any]] = None) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        """
        Fetch one page of ``path`` (e.g. ``products`` or ``blogs/1/articles``).

        :return: The records of the page, and the params of the next page
                 or ``None`` on the last page.
        """
        resp = self._request("GET", self._url(path), params=params)
        key = path.strip("/").rsplit("/", 1)[-1]
        items = resp.json().get(key)
        return items, next_page_params(resp, params)

    def get(self, path: str, key: str) -> Dict[str, Any]:
        resp = self._request("GET", self._url(path))
        return resp.json().get(key)

    def create(self, path: str, key: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a resource by posting ``{key: payload}`` to ``path``.

        :return: The created resource as returned by the store.
        :raises requests.HTTPError: on failure (422 carries the validation errors).
        """
        resp = self._request("POST", self._url(path), json_body={key: payload})
        return resp.json().get(key)

    def delete(self, path: str) -> None:
        self._request("DELETE", self._url(path))

    def graphql(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        resp = self._request(
            "POST",
            f"{self.base_url}/graphql.json",
            json_body={"query": query, "variables": variables or {}},
        )
        return resp.json()
