from __future__ import annotations

from enum import Enum
from typing import Any, Hashable, Mapping


class Decision(str, Enum):
    CREATE = "create"
    SKIP = "skip"
    REPLACE = "replace"


def decide(
    key: Hashable,
    index: Mapping[Hashable, Any],
    delete_first: bool = False,
    skip_existing: bool = True,
) -> Decision:
    """
    Choose what to do with a source record whose natural key is ``key``.

    ``delete_first`` wins over ``skip_existing``.  When the key exists and
    neither flag is set the creation is still attempted and the platform's
    duplicate-handle error is left to surface as an item failure.
    """
    if key not in index:
        return Decision.CREATE
    if delete_first:
        return Decision.REPLACE
    if skip_existing:
        return Decision.SKIP
    return Decision.CREATE
