import os
import sys

# Ensure project root is on sys.path for imports when running tests directly
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from shopify_migration.transforms import (
    article_payload,
    custom_collection_payload,
    file_create_input,
    image_payloads,
    menu_create_input,
    portable_metafields,
    portable_product_metafields,
    product_payload,
    rehome_metafield,
    shop_metafield_payload,
    smart_collection_payload,
    variant_id_map,
)


# Products ---------------------------------------------------------------------

def test_compare_at_price_kept_only_for_genuine_discount():
    product = {
        "handle": "tee",
        "variants": [
            {"id": 1, "title": "S", "price": "10.00", "compare_at_price": "10.00"},
            {"id": 2, "title": "M", "price": "10.00", "compare_at_price": "12.50"},
            {"id": 3, "title": "L", "price": "10.00", "compare_at_price": None},
        ],
    }
    variants = product_payload(product)["variants"]
    assert "compare_at_price" not in variants[0]
    assert variants[1]["compare_at_price"] == "12.50"
    assert variants[2]["compare_at_price"] is None


def test_compare_at_price_below_price_is_dropped():
    product = {
        "variants": [
            {"title": "A", "price": 10, "compare_at_price": 8},
            {"title": "B", "price": 10, "compare_at_price": 12},
        ]
    }
    variants = product_payload(product)["variants"]
    assert "compare_at_price" not in variants[0]
    assert variants[1]["compare_at_price"] == 12


def test_variant_defaults_and_image_link_removed():
    product = {"variants": [{"id": 1, "title": "Default", "image_id": 77, "fulfillment_service": "gift_card"}]}
    variant = product_payload(product)["variants"][0]
    assert variant["fulfillment_service"] == "manual"
    assert variant["inventory_management"] == "shopify"
    assert "image_id" not in variant


def test_product_payload_leaves_source_untouched():
    product = {"handle": "tee", "images": [{"id": 9}], "variants": [{"id": 1, "image_id": 9}]}
    payload = product_payload(product)
    assert "images" not in payload
    assert product["images"] == [{"id": 9}]
    assert product["variants"][0]["image_id"] == 9


def test_image_variants_remapped_by_title():
    source_variants = [{"id": 101, "title": "A"}, {"id": 102, "title": "B"}]
    destination_variants = [{"id": 901, "title": "A"}, {"id": 902, "title": "B"}]
    id_map = variant_id_map(source_variants, destination_variants)
    assert id_map == {101: 901, 102: 902}

    images = [{"id": 5, "admin_graphql_api_id": "gid://shopify/ProductImage/5", "src": "x.png", "variant_ids": [102]}]
    payload = image_payloads(images, 555, id_map)[0]
    assert payload == {"src": "x.png", "product_id": 555, "variant_ids": [902]}


def test_unmatched_image_variants_are_dropped():
    payload = image_payloads([{"id": 5, "variant_ids": [101, 404]}], 1, {101: 901})[0]
    assert payload["variant_ids"] == [901]


# Content ----------------------------------------------------------------------

def test_article_carries_creation_date_as_published_at():
    article = {
        "id": 3,
        "handle": "hello",
        "user_id": 42,
        "created_at": "2021-05-01T10:00:00Z",
        "deleted_at": None,
        "published_at": "2021-06-01T10:00:00Z",
    }
    payload = article_payload(article, 777)
    assert payload["published_at"] == "2021-05-01T10:00:00Z"
    assert payload["blog_id"] == 777
    for field in ("user_id", "created_at", "deleted_at"):
        assert field not in payload
    assert article["user_id"] == 42


def test_custom_collection_membership_rewritten():
    collection = {"id": 1, "handle": "summer", "publications": [{"channel_id": 1}]}
    payload = custom_collection_payload(collection, [{"id": 5}, {"id": 6}], {5: 50})
    assert payload["collects"] == [{"product_id": 50}]
    assert "publications" not in payload


def test_smart_collection_publications_removed():
    payload = smart_collection_payload({"handle": "sale", "rules": [{"column": "tag"}], "publications": []})
    assert payload == {"handle": "sale", "rules": [{"column": "tag"}]}


# Metafields -------------------------------------------------------------------

def test_app_namespaces_are_not_portable():
    metafields = [{"namespace": "app--123--x", "key": "a"}, {"namespace": "custom", "key": "b"}]
    assert portable_metafields(metafields) == [{"namespace": "custom", "key": "b"}]


def test_product_metafields_drop_empty_and_global_id_values():
    metafields = [
        {"namespace": "custom", "key": "a", "value": "plain"},
        {"namespace": "custom", "key": "b", "value": ""},
        {"namespace": "custom", "key": "c", "value": None},
        {"namespace": "custom", "key": "d", "value": "gid://shopify/Product/1"},
        {"namespace": "custom", "key": "e", "value": 12},
    ]
    assert [m["key"] for m in portable_product_metafields(metafields)] == ["a", "e"]


def test_rehome_metafield_binds_new_owner():
    metafield = {"id": 1, "namespace": "custom", "key": "a", "value": "v", "owner_id": 7, "owner_resource": "page"}
    payload = rehome_metafield(metafield, "page", 70)
    assert payload == {"namespace": "custom", "key": "a", "value": "v", "owner_id": 70, "owner_resource": "page"}
    assert metafield["id"] == 1


def test_shop_metafield_payload_strips_ids():
    payload = shop_metafield_payload({"id": 1, "namespace": "n", "key": "k", "value": "v", "owner_id": 3, "owner_resource": "shop"})
    assert payload == {"namespace": "n", "key": "k", "value": "v"}


# Files and menus --------------------------------------------------------------

def test_media_image_side_loaded_from_original_src():
    node = {"id": "gid://shopify/MediaImage/1", "__typename": "MediaImage", "alt": "Logo", "image": {"originalSrc": "https://cdn/logo.png"}}
    assert file_create_input(node) == {"originalSource": "https://cdn/logo.png", "alt": "Logo"}


def test_file_without_url_has_no_input():
    assert file_create_input({"id": "gid://shopify/MediaImage/1", "__typename": "MediaImage", "image": None}) is None
    assert file_create_input({"id": "gid://shopify/Video/2", "__typename": "Video"}) is None


def test_menu_input_drops_ids_and_keeps_nesting():
    node = {
        "id": "gid://shopify/Menu/1",
        "handle": "main-menu",
        "title": "Main menu",
        "items": [
            {
                "id": "gid://shopify/MenuItem/1",
                "title": "Shop",
                "url": "/collections/all",
                "type": "HTTP",
                "items": [{"id": "gid://shopify/MenuItem/2", "title": "Hats", "url": "/collections/hats", "type": "HTTP", "items": []}],
            },
            {"id": "gid://shopify/MenuItem/3", "title": "Home", "url": None, "type": "FRONTPAGE", "items": None},
        ],
    }
    assert menu_create_input(node) == {
        "handle": "main-menu",
        "title": "Main menu",
        "items": [
            {
                "title": "Shop",
                "type": "HTTP",
                "url": "/collections/all",
                "items": [{"title": "Hats", "type": "HTTP", "url": "/collections/hats"}],
            },
            {"title": "Home", "type": "FRONTPAGE"},
        ],
    }
