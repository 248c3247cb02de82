"""
File and menu inputs for the GraphQL mutations.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from shopify_migration.models import Menu, parse_file


def file_url(node: Dict[str, Any]) -> Optional[str]:
    """Resolved URL of a file node, or ``None`` when it has none."""
    store_file = parse_file(node)
    if store_file is None:
        return None
    return store_file.source_url() or None


def file_create_input(node: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    ``FileCreateInput`` side-loading the file from its current URL, so the
    bytes never transit through this process.
    """
    url = file_url(node)
    if not url:
        return None
    return {"originalSource": url, "alt": node.get("alt")}


def menu_create_input(node: Dict[str, Any]) -> Dict[str, Any]:
    return Menu.model_validate(node).to_create_input()
