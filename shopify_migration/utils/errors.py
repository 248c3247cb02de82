"""
Error types and structured reporting for the store migration.

The exception hierarchy mirrors the failure modes of a run:

``ConnectivityError``
    A store could not be reached or authenticated before anything was
    written.  Fatal for the whole run.
``ListingError``
    Enumerating a collection on either store failed (transport error,
    GraphQL errors or an unexpected response shape).  Fatal for the
    entity type being migrated.
``ItemTransformError``
    Creating one entity or one of its dependent resources failed.
    Recoverable; the driver moves on to the next record.
``UserError``
    A GraphQL mutation answered with ``userErrors``.

Besides the exceptions, two helpers append JSON Lines entries under
``reports/migration`` so that a run can be audited afterwards:

``report_error``
    Record a failed entity, optionally with the exception that caused it.
``report_ok``
    Record a successfully created entity.
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict, Optional


class MigrationError(Exception):
    """Base class for every error raised by the migration engine."""


class ConnectivityError(MigrationError):
    """A store failed the connection check."""


class ListingError(MigrationError):
    """A paged listing could not be walked to the end."""


class ItemTransformError(MigrationError):
    """A single entity or sub-resource could not be migrated."""


class UserError(ItemTransformError):
    """Validation errors returned inside a successful GraphQL payload."""

    def __init__(self, message: str, user_errors: Optional[list] = None) -> None:
        super().__init__(message)
        self.user_errors = user_errors or []


# Mapping of event codes used throughout the migration to descriptive messages.
ERRORS: Dict[str, str] = {
    "CREATE_FAILED": "Entity could not be created on the destination store",
    "DELETE_FAILED": "Existing destination entity could not be deleted",
    "METAFIELD_FAILED": "Metafield could not be re-homed",
    "CREATED": "Entity created successfully",
}

_REPORT_DIR = os.path.join("reports", "migration")
_ERROR_LOG = "errors.jsonl"
_OK_LOG = "success.jsonl"


def _write_jsonl(path: str, data: Dict[str, Any]) -> None:
    """Append ``data`` as a JSON object followed by a newline to ``path``."""
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "a", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, default=str)
        f.write("\n")


def _entry(code: str, kind: str, record: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "code": code,
        "message": ERRORS.get(code, code),
        "kind": kind,
        "source_id": record.get("id"),
        "handle": record.get("handle"),
    }


def report_error(
    code: str,
    kind: str,
    record: Dict[str, Any],
    exc: Optional[BaseException] = None,
    *,
    report_dir: str = _REPORT_DIR,
) -> Dict[str, Any]:
    """Log a failure event for ``record``.

    Parameters
    ----------
    code:
        A key identifying the type of error.  If ``code`` is present in
        :data:`ERRORS` its value will be used as the message.
    kind:
        Entity kind (``product``, ``page``...).
    record:
        The source record.  Only ``id`` and ``handle`` are referenced.
    exc:
        Optional exception instance that triggered the error.
    """
    entry = _entry(code, kind, record)
    if exc is not None:
        entry["error"] = str(exc)
    _write_jsonl(os.path.join(report_dir, _ERROR_LOG), entry)
    return entry


def report_ok(
    code: str,
    kind: str,
    record: Dict[str, Any],
    extra: Optional[Dict[str, Any]] = None,
    *,
    report_dir: str = _REPORT_DIR,
) -> Dict[str, Any]:
    """Log a successful event for ``record``, merging ``extra`` into the entry."""
    entry = _entry(code, kind, record)
    if extra:
        entry.update(extra)
    _write_jsonl(os.path.join(report_dir, _OK_LOG), entry)
    return entry
