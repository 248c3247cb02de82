"""
Generation of id mapping CSV files.

The :func:`generate_id_map_csv` helper writes a CSV file listing every
entity created during a run together with its source and destination
ids.  The natural key column is what the two stores have in common, the
id columns are what they do not.
"""

from __future__ import annotations

import csv
import os
from typing import Any, Dict, Iterable


def generate_id_map_csv(
    entries: Iterable[Dict[str, Any]], *, out_path: str = "reports/id_map.csv"
) -> str:
    """Generate a CSV mapping source ids to destination ids.

    Parameters
    ----------
    entries:
        Iterable of dictionaries with ``kind``, ``key``, ``source_id`` and
        ``destination_id`` keys.  Tuple keys (shop metafields) are written
        as ``namespace.key``.
    out_path:
        Location of the CSV file to be written.  The parent directory is
        created automatically.

    Returns
    -------
    str
        The path of the generated CSV file.
    """
    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    with open(out_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["Kind", "Key", "SourceId", "DestinationId"])
        for entry in entries:
            key = entry.get("key")
            if isinstance(key, tuple):
                key = ".".join(str(part) for part in key)
            writer.writerow([entry.get("kind"), key, entry.get("source_id"), entry.get("destination_id")])
    return out_path
