"""
Raw record dumps.

When ``save_data`` is enabled every source record seen by a driver is
written to ``{base_dir}/{kind}/{id}.json``.  Files are never read back.
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict, Optional


def record_filename(record_id: Any) -> str:
    """Return a filesystem-safe name for a REST id or a GraphQL global id."""
    text = str(record_id)
    if text.startswith("gid://"):
        text = text.rstrip("/").rsplit("/", 1)[-1]
    return f"{text.replace('/', '_')}.json"


class RecordSink:
    def __init__(self, base_dir: str = "data", enabled: bool = False) -> None:
        self.base_dir = base_dir
        self.enabled = enabled

    def save(self, kind: str, record: Dict[str, Any]) -> Optional[str]:
        if not self.enabled:
            return None
        folder = os.path.join(self.base_dir, kind)
        os.makedirs(folder, exist_ok=True)
        path = os.path.join(folder, record_filename(record.get("id")))
        with open(path, "w", encoding="utf-8") as f:
            json.dump(record, f, ensure_ascii=False)
        return path
