import os
import sys

# Ensure project root is on sys.path for imports when running tests directly
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from shopify_migration.transforms import file_url
from shopify_migration.utils.conflicts import Decision, decide
from shopify_migration.utils.identity import (
    build_identity_index,
    build_product_identity_map,
    handle_key,
    namespace_key,
)


def test_index_maps_handle_to_destination_id():
    index = build_identity_index([{"id": 1, "handle": "about"}, {"id": 2, "handle": "contact"}])
    assert index == {"about": 1, "contact": 2}


def test_index_last_record_wins_on_collision():
    index = build_identity_index([{"id": 1, "handle": "about"}, {"id": 9, "handle": "about"}])
    assert index == {"about": 9}


def test_index_ignores_records_without_key():
    index = build_identity_index([{"id": 1}, {"id": 2, "handle": ""}, {"id": 3, "handle": "x"}])
    assert index == {"x": 3}


def test_index_consumes_a_generator():
    index = build_identity_index(r for r in [{"id": 1, "handle": "a"}])
    assert index == {"a": 1}


def test_metafields_are_keyed_by_namespace_and_key():
    index = build_identity_index(
        [{"id": 5, "namespace": "custom", "key": "banner"}, {"id": 6, "namespace": "other", "key": "banner"}],
        namespace_key,
    )
    assert index[("custom", "banner")] == 5
    assert index[("other", "banner")] == 6


def test_files_are_keyed_by_resolved_url():
    nodes = [
        {"id": "gid://shopify/MediaImage/1", "__typename": "MediaImage", "image": {"originalSrc": "https://cdn/a.png"}},
        {"id": "gid://shopify/GenericFile/2", "__typename": "GenericFile", "url": "https://cdn/b.pdf"},
        {"id": "gid://shopify/Video/3", "__typename": "Video"},
    ]
    index = build_identity_index(nodes, file_url)
    assert index == {"https://cdn/a.png": "gid://shopify/MediaImage/1", "https://cdn/b.pdf": "gid://shopify/GenericFile/2"}


def test_handle_key_treats_empty_handle_as_missing():
    assert handle_key({"handle": ""}) is None
    assert handle_key({"handle": "shoes"}) == "shoes"


def test_product_identity_map_matches_by_handle():
    source = [{"id": 5, "handle": "hat"}, {"id": 6, "handle": "scarf"}]
    destination = [{"id": 50, "handle": "hat"}]
    assert build_product_identity_map(source, destination) == {5: 50}


def test_decide_creates_unknown_keys():
    assert decide("new", {"old": 1}) is Decision.CREATE
    assert decide("new", {"old": 1}, delete_first=True) is Decision.CREATE


def test_decide_skips_existing_by_default():
    assert decide("old", {"old": 1}) is Decision.SKIP


def test_decide_delete_first_wins_over_skip():
    assert decide("old", {"old": 1}, delete_first=True, skip_existing=True) is Decision.REPLACE


def test_decide_without_flags_attempts_creation():
    assert decide("old", {"old": 1}, delete_first=False, skip_existing=False) is Decision.CREATE
