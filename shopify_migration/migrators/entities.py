"""
Per-entity migration: transform, create, then re-home dependents.

Each ``_migrate_*`` method takes one source record, creates its
counterpart on the destination store and attaches whatever depends on
the new id (metafields, product images).  It returns the created
destination record and raises on failure; deciding whether a failure
stops anything is left to the drivers.
"""

from __future__ import annotations

import os
from typing import Any, Callable, Dict, List, Optional

import requests

from shopify_migration.extractors import DEFAULT_PAGE_SIZE, records, rest_pages
from shopify_migration.migrators.queries import (
    FILE_CREATE_MUTATION,
    FILE_DELETE_MUTATION,
    MENU_CREATE_MUTATION,
    MENU_DELETE_MUTATION,
)
from shopify_migration.transforms import (
    article_payload,
    blog_payload,
    custom_collection_payload,
    file_create_input,
    image_payloads,
    menu_create_input,
    page_payload,
    portable_metafields,
    portable_product_metafields,
    product_payload,
    rehome_metafield,
    shop_metafield_payload,
    smart_collection_payload,
    variant_id_map,
)
from shopify_migration.utils.errors import ItemTransformError, UserError, report_error
from shopify_migration.utils.records import RecordSink

Record = Dict[str, Any]
LogFn = Callable[..., None]


def print_log(message: str, level: str = "INFO") -> None:
    print(f"[{level}] {message}")


def error_details(exc: BaseException) -> str:
    """Response body of an HTTP error when there is one, else the message."""
    response = getattr(exc, "response", None)
    text = getattr(response, "text", None)
    return text or str(exc)


def mutation_payload(response: Dict[str, Any], name: str) -> Dict[str, Any]:
    """
    Return ``data[name]`` of a mutation response.

    :raises ItemTransformError: on top-level GraphQL errors or a missing payload.
    :raises UserError: when the payload carries ``userErrors``.
    """
    if (response or {}).get("errors"):
        raise ItemTransformError(f"GraphQL errors in {name}: {response['errors']}")
    payload = ((response or {}).get("data") or {}).get(name)
    if payload is None:
        raise ItemTransformError(f"Invalid GraphQL response for {name}: {response!r}")
    user_errors = payload.get("userErrors") or []
    if user_errors:
        raise UserError(user_errors[0].get("message", "unknown error"), user_errors)
    return payload


class EntityMigrator:
    """
    Holds the two stores and migrates single records between them.

    :param source: Store the records are read from.
    :param destination: Store the records are created in.
    :param log: ``log(message, level=...)`` callable; defaults to printing.
    :param sink: Optional :class:`RecordSink` receiving raw source records.
    """

    def __init__(
        self,
        source,
        destination,
        *,
        log: Optional[LogFn] = None,
        sink: Optional[RecordSink] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        report_dir: str = os.path.join("reports", "migration"),
    ) -> None:
        self.source = source
        self.destination = destination
        self._log = log or print_log
        self.sink = sink or RecordSink()
        self.page_size = page_size
        self.report_dir = report_dir

    def log_message(self, message: str, level: str = "INFO") -> None:
        self._log(message, level=level)

    ###########################################################################
    # Metafields
    ###########################################################################

    def _get_metafields(self, resource: Optional[str] = None, owner_id: Any = None) -> List[Record]:
        """All source metafields of one owner, or of the shop when no owner is given."""
        params: Dict[str, Any] = {}
        if resource and owner_id:
            params = {"metafield[owner_resource]": resource, "metafield[owner_id]": owner_id}
        return list(records(rest_pages(self.source, "metafields", params, page_size=self.page_size)))

    def _rehome_metafields(self, label: str, metafields: List[Record], owner_resource: str, owner_id: Any) -> int:
        """Create every metafield under the new owner; one failure never stops the others."""
        created = 0
        for metafield in metafields:
            name = f"{metafield.get('namespace')}.{metafield.get('key')}"
            self.log_message(f"{label} Metafield {name} started", level="INFO")
            try:
                self.destination.create("metafields", "metafield", rehome_metafield(metafield, owner_resource, owner_id))
            except requests.RequestException as e:
                self.log_message(f"{label} Metafield {name} FAILED: {error_details(e)}", level="ERROR")
                report_error("METAFIELD_FAILED", "metafield", metafield, e, report_dir=self.report_dir)
                continue
            created += 1
            self.log_message(f"{label} Metafield {name} done!", level="INFO")
        return created

    def _create_with_metafields(
        self,
        label: str,
        owner_resource: str,
        path: str,
        key: str,
        record: Record,
        payload: Record,
        *,
        metafields: Optional[List[Record]] = None,
    ) -> Record:
        if metafields is None:
            metafields = portable_metafields(self._get_metafields(owner_resource, record.get("id")))
        self.log_message(f"{label} has {len(metafields)} metafields...", level="INFO")
        created = self.destination.create(path, key, payload)
        if not created or created.get("id") is None:
            raise ItemTransformError(f"{label} Creation returned no id")
        self.log_message(f"{label} duplicated. New id is {created['id']}.", level="INFO")
        self._rehome_metafields(label, metafields, owner_resource, created["id"])
        return created

    ###########################################################################
    # REST resources
    ###########################################################################

    def _migrate_page(self, page: Record) -> Record:
        label = f"[PAGE {page.get('id')}]"
        self.log_message(f"{label} {page.get('handle')} started...", level="INFO")
        return self._create_with_metafields(label, "page", "pages", "page", page, page_payload(page))

    def _migrate_blog(self, blog: Record) -> Record:
        label = f"[BLOG {blog.get('id')}]"
        self.log_message(f"{label} {blog.get('handle')} started...", level="INFO")
        return self._create_with_metafields(label, "blog", "blogs", "blog", blog, blog_payload(blog))

    def _migrate_article(self, blog_id: Any, article: Record) -> Record:
        label = f"[ARTICLE {article.get('id')}]"
        self.log_message(f"{label} {article.get('handle')} started...", level="INFO")
        return self._create_with_metafields(
            label, "article", f"blogs/{blog_id}/articles", "article", article, article_payload(article, blog_id)
        )

    def _migrate_smart_collection(self, collection: Record) -> Record:
        label = f"[SMART COLLECTION {collection.get('id')}]"
        self.log_message(f"{label} {collection.get('handle')} started...", level="INFO")
        return self._create_with_metafields(
            label,
            "smart_collection",
            "smart_collections",
            "smart_collection",
            collection,
            smart_collection_payload(collection),
        )

    def _migrate_custom_collection(self, collection: Record, product_map: Optional[Dict[Any, Any]] = None) -> Record:
        label = f"[CUSTOM COLLECTION {collection.get('id')}]"
        self.log_message(f"{label} {collection.get('handle')} started...", level="INFO")
        products = list(
            records(rest_pages(self.source, f"collections/{collection.get('id')}/products", page_size=self.page_size))
        )
        self.log_message(f"{label} has {len(products)} products...", level="INFO")
        payload = custom_collection_payload(collection, products, product_map or {})
        if len(payload["collects"]) < len(products):
            self.log_message(
                f"{label} {len(products) - len(payload['collects'])} products have no destination counterpart",
                level="WARNING",
            )
        return self._create_with_metafields(
            label, "custom_collection", "custom_collections", "custom_collection", collection, payload
        )

    def _migrate_product(self, product: Record) -> Record:
        label = f"[PRODUCT {product.get('id')}]"
        self.log_message(f"{label} {product.get('handle')} started...", level="INFO")
        metafields = portable_product_metafields(self._get_metafields("product", product.get("id")))
        new_product = self._create_with_metafields(
            label, "product", "products", "product", product, product_payload(product), metafields=metafields
        )
        images = product.get("images") or []
        self.log_message(f"{label} Creating {len(images)} images...", level="INFO")
        id_map = variant_id_map(product.get("variants"), new_product.get("variants"))
        for image in image_payloads(images, new_product["id"], id_map):
            self._create_product_image(label, new_product["id"], image)
        return new_product

    def _create_product_image(self, label: str, product_id: Any, image: Record) -> Record:
        """Attach one image, retrying exactly once; the second failure propagates."""
        path = f"products/{product_id}/images"
        try:
            return self.destination.create(path, "image", image)
        except requests.RequestException as e:
            self.log_message(f"{label} {error_details(e)} Retrying.", level="WARNING")
            return self.destination.create(path, "image", image)

    def _migrate_shop_metafield(self, metafield: Record) -> Record:
        name = f"{metafield.get('namespace')}.{metafield.get('key')}"
        self.log_message(f"[METAFIELD {metafield.get('id')}] {name} started...", level="INFO")
        created = self.destination.create("metafields", "metafield", shop_metafield_payload(metafield))
        if not created or created.get("id") is None:
            raise ItemTransformError(f"[METAFIELD {metafield.get('id')}] Creation returned no id")
        return created

    ###########################################################################
    # GraphQL resources
    ###########################################################################

    def _migrate_file(self, node: Record) -> Record:
        file_input = file_create_input(node)
        if file_input is None:
            raise ItemTransformError(f"[FILE {node.get('id')}] No URL available for file")
        self.log_message(f"[FILE {node.get('id')}] {file_input['originalSource']} started...", level="INFO")
        response = self.destination.graphql(FILE_CREATE_MUTATION, {"files": [file_input]})
        files = mutation_payload(response, "fileCreate").get("files") or []
        if not files:
            raise ItemTransformError(f"[FILE {node.get('id')}] fileCreate returned no file")
        self.log_message(f"[FILE {node.get('id')}] duplicated. New id is {files[0].get('id')}.", level="INFO")
        return files[0]

    def _delete_file(self, file_id: Any) -> None:
        response = self.destination.graphql(FILE_DELETE_MUTATION, {"fileIds": [file_id]})
        try:
            mutation_payload(response, "fileDelete")
        except ItemTransformError as e:
            self.log_message(f"Failed to delete file {file_id}: {e}", level="ERROR")

    def _migrate_menu(self, node: Record) -> Record:
        self.log_message(f"[MENU {node.get('id')}] {node.get('handle')} started...", level="INFO")
        response = self.destination.graphql(MENU_CREATE_MUTATION, menu_create_input(node))
        menu = mutation_payload(response, "menuCreate").get("menu") or {}
        if menu.get("id") is None:
            raise ItemTransformError(f"[MENU {node.get('id')}] menuCreate returned no menu")
        self.log_message(f"[MENU {node.get('id')}] duplicated. New id is {menu.get('id')}.", level="INFO")
        return menu

    def _delete_menu(self, menu_id: Any) -> None:
        response = self.destination.graphql(MENU_DELETE_MUTATION, {"id": menu_id})
        try:
            mutation_payload(response, "menuDelete")
        except ItemTransformError as e:
            self.log_message(f"Failed to delete menu {menu_id}: {e}", level="ERROR")
