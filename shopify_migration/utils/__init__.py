"""
Utility helpers used by the migration tool.

This subpackage exposes the error taxonomy and report writers, natural-key
identity helpers, the conflict policy and the raw record sink.
"""

from .conflicts import Decision, decide
from .errors import (
    ERRORS,
    ConnectivityError,
    ItemTransformError,
    ListingError,
    MigrationError,
    UserError,
    report_error,
    report_ok,
)
from .id_map import generate_id_map_csv
from .identity import build_identity_index, build_product_identity_map, handle_key, namespace_key
from .records import RecordSink

__all__ = [
    "Decision",
    "decide",
    "ERRORS",
    "ConnectivityError",
    "ItemTransformError",
    "ListingError",
    "MigrationError",
    "UserError",
    "report_error",
    "report_ok",
    "generate_id_map_csv",
    "build_identity_index",
    "build_product_identity_map",
    "handle_key",
    "namespace_key",
    "RecordSink",
]
