from typing import Callable, Dict, List

import requests

from .errors import ConnectivityError

SHOP_QUERY = """
query {
  shop {
    name
  }
}
"""

ACCESS_SCOPES_QUERY = """
query {
  currentAppInstallation {
    accessScopes {
      handle
    }
  }
}
"""

# Each inner list is a set of alternatives; one of them must be granted.
REQUIRED_SCOPES: Dict[str, List[List[str]]] = {
    "source": [
        ["read_content", "write_content"],
        ["read_products", "write_products"],
        ["read_files", "write_files"],
        ["read_themes", "write_themes"],
    ],
    "destination": [
        ["write_content"],
        ["write_products"],
        ["write_files"],
        ["write_themes"],
    ],
}


class PreFlightCheckError(ConnectivityError):
    """Custom exception for pre-flight check failures."""
    pass


def check_store_connection(store, side: str) -> str:
    """
    Verifies that ``store`` answers a ``shop { name }`` query.

    Args:
        store: A :class:`ShopifyStore` (or anything exposing ``graphql``).
        side: ``"source"`` or ``"destination"``, used in messages.

    Returns:
        The shop name.

    Raises:
        PreFlightCheckError: If the store cannot be reached or returns no shop.
    """
    try:
        response = store.graphql(SHOP_QUERY)
    except requests.HTTPError as e:
        if e.response is not None and e.response.status_code in (401, 403):
            raise PreFlightCheckError(f"The {side} access token is invalid or lacks permissions.") from e
        raise PreFlightCheckError(f"Unexpected error while querying the {side} store: {e}") from e
    except requests.RequestException as e:
        raise PreFlightCheckError(f"Network error while connecting to the {side} store: {e}") from e

    shop = ((response or {}).get("data") or {}).get("shop")
    if not shop:
        raise PreFlightCheckError(f"Could not connect to {side} store")
    return shop.get("name", "")


def missing_scopes(store, side: str) -> List[List[str]]:
    """Return the required scope groups of which ``store`` grants none."""
    response = store.graphql(ACCESS_SCOPES_QUERY)
    installation = ((response or {}).get("data") or {}).get("currentAppInstallation") or {}
    granted = {scope.get("handle") for scope in installation.get("accessScopes") or []}
    return [group for group in REQUIRED_SCOPES[side] if not granted.intersection(group)]


def run_pre_flight_checks(source, destination, log: Callable[..., None]) -> None:
    """
    Verifies that both stores are reachable before anything is migrated.

    Missing access scopes are only reported as warnings: the platform will
    reject the affected calls later on, one entity type at a time.

    Raises:
        PreFlightCheckError: If either store fails the connection check.
    """
    log("Running pre-flight checks...", level="DEBUG")
    for side, store in (("source", source), ("destination", destination)):
        name = check_store_connection(store, side)
        log(f"Successfully connected to {side} store: {name}", level="DEBUG")
        try:
            groups = missing_scopes(store, side)
        except requests.RequestException as e:
            log(f"Could not read access scopes of the {side} store: {e}", level="WARNING")
            continue
        for group in groups:
            log(f"The {side} store is missing access scope {' or '.join(group)}", level="WARNING")
    log("Pre-flight checks passed successfully.", level="DEBUG")
