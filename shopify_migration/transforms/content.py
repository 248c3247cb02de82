"""
Payloads for online-store content: pages, blogs and articles.
"""

from __future__ import annotations

import copy
from typing import Any, Dict

Record = Dict[str, Any]

ARTICLE_DROPPED_FIELDS = ("user_id", "created_at", "deleted_at")


def page_payload(page: Record) -> Record:
    return copy.deepcopy(page)


def blog_payload(blog: Record) -> Record:
    return copy.deepcopy(blog)


def article_payload(article: Record, blog_id: Any) -> Record:
    """
    Build the creation payload of ``article`` inside destination blog ``blog_id``.

    The destination stamps its own creation date, so the source creation
    date is carried over as ``published_at``.
    """
    payload = copy.deepcopy(article)
    created_at = payload.get("created_at")
    for field in ARTICLE_DROPPED_FIELDS:
        payload.pop(field, None)
    payload["published_at"] = created_at
    payload["blog_id"] = blog_id
    return payload
