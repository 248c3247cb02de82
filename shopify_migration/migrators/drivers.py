"""
Per-type migration drivers.

Every driver follows the same steps:

1. enumerate the destination collection completely;
2. build the identity index (natural key -> destination id);
3. walk the source pages and, per record, decide CREATE, SKIP or
   REPLACE, delete the match on REPLACE, then create the record;
4. return a :class:`MigrationSummary`.

A failing destination listing aborts the driver (the exception leaves
it).  A failing record is logged, reported and skipped; the driver then
moves on to the next record.  Records are processed one at a time,
sub-resources included.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import partial
from itertools import chain
from typing import Any, Callable, Dict, Hashable, Iterable, Iterator, List, Optional

from shopify_migration.extractors import connection_pages, records, rest_pages
from shopify_migration.migrators.entities import EntityMigrator, Record, error_details
from shopify_migration.migrators.queries import FILES_QUERY, MENUS_QUERY
from shopify_migration.transforms import file_url, is_app_reserved
from shopify_migration.utils.conflicts import Decision, decide
from shopify_migration.utils.errors import report_error, report_ok
from shopify_migration.utils.identity import (
    build_identity_index,
    build_product_identity_map,
    handle_key,
    namespace_key,
)


@dataclass
class MigrationSummary:
    kind: str
    created: int = 0
    skipped: int = 0
    replaced: int = 0
    failed: int = 0
    ignored: int = 0
    # source id -> destination id of every record created or matched
    id_map: Dict[Any, Any] = field(default_factory=dict)

    def merge(self, other: "MigrationSummary") -> "MigrationSummary":
        self.created += other.created
        self.skipped += other.skipped
        self.replaced += other.replaced
        self.failed += other.failed
        self.ignored += other.ignored
        self.id_map.update(other.id_map)
        return self

    def __str__(self) -> str:
        return (
            f"created={self.created} skipped={self.skipped} replaced={self.replaced} "
            f"failed={self.failed} ignored={self.ignored}"
        )


def display_key(key: Hashable) -> str:
    if isinstance(key, tuple):
        return ".".join(str(part) for part in key)
    return str(key)


class ShopifyMigrator(EntityMigrator):
    """Runs the per-type drivers between a source and a destination store."""

    def __init__(self, source, destination, **kwargs) -> None:
        super().__init__(source, destination, **kwargs)
        self.created_entries: List[Dict[str, Any]] = []

    ###########################################################################
    # Shared driver loop
    ###########################################################################

    def _drive(
        self,
        kind: str,
        index: Dict[Hashable, Any],
        source_pages: Iterable[List[Record]],
        key_fn: Callable[[Record], Optional[Hashable]],
        migrate_fn: Callable[[Record], Record],
        delete_fn: Callable[[Any], None],
        *,
        delete_first: bool,
        skip_existing: bool,
        sink_kind: str,
    ) -> MigrationSummary:
        label = kind.upper()
        summary = MigrationSummary(kind)
        for page in source_pages:
            for record in page:
                self.sink.save(sink_kind, record)
                key = key_fn(record)
                if key is None:
                    self.log_message(f"[{label} {record.get('id')}] Skipping {kind} with no natural key", level="WARNING")
                    self.log_message(f"{label} details: {record}", level="DEBUG")
                    summary.ignored += 1
                    continue

                decision = decide(key, index, delete_first, skip_existing)
                if decision is Decision.SKIP:
                    self.log_message(f"[EXISTING {label}] Skipping {display_key(key)}", level="DEBUG")
                    summary.skipped += 1
                    summary.id_map[record.get("id")] = index[key]
                    continue

                if decision is Decision.REPLACE:
                    self.log_message(f"[DUPLICATE {label}] Deleting destination {kind} {display_key(key)}", level="DEBUG")
                    try:
                        delete_fn(index[key])
                    except Exception as e:
                        summary.failed += 1
                        self.log_message(f"[{label}] {display_key(key)} could not be deleted: {error_details(e)}", level="ERROR")
                        report_error("DELETE_FAILED", kind, record, e, report_dir=self.report_dir)
                        continue
                    index.pop(key, None)
                    summary.replaced += 1

                try:
                    created = migrate_fn(record)
                except Exception as e:
                    summary.failed += 1
                    self.log_message(
                        f"[{label}] {display_key(key)} FAILED TO BE CREATED PROPERLY. {error_details(e)}", level="ERROR"
                    )
                    report_error("CREATE_FAILED", kind, record, e, report_dir=self.report_dir)
                    continue

                destination_id = created.get("id")
                index[key] = destination_id
                summary.created += 1
                summary.id_map[record.get("id")] = destination_id
                self.created_entries.append(
                    {"kind": kind, "key": key, "source_id": record.get("id"), "destination_id": destination_id}
                )
                report_ok("CREATED", kind, record, {"destination_id": destination_id}, report_dir=self.report_dir)
        return summary

    def _rest_index(self, path: str, key_fn=handle_key) -> Dict[Hashable, Any]:
        return build_identity_index(records(rest_pages(self.destination, path, page_size=self.page_size)), key_fn)

    def _source_pages(self, path: str) -> Iterator[List[Record]]:
        return rest_pages(self.source, path, page_size=self.page_size)

    ###########################################################################
    # Drivers
    ###########################################################################

    def migrate_pages(self, delete_first: bool = False, skip_existing: bool = True) -> MigrationSummary:
        self.log_message("Page migration started...", level="DEBUG")
        summary = self._drive(
            "page",
            self._rest_index("pages"),
            self._source_pages("pages"),
            handle_key,
            self._migrate_page,
            lambda page_id: self.destination.delete(f"pages/{page_id}"),
            delete_first=delete_first,
            skip_existing=skip_existing,
            sink_kind="pages",
        )
        self.log_message(f"Page migration finished! {summary}", level="DEBUG")
        return summary

    def migrate_files(self, delete_first: bool = False, skip_existing: bool = True) -> MigrationSummary:
        self.log_message("File migration started...", level="DEBUG")
        index = build_identity_index(
            records(connection_pages(self.destination, FILES_QUERY, "files", page_size=self.page_size)), file_url
        )
        summary = self._drive(
            "file",
            index,
            connection_pages(self.source, FILES_QUERY, "files", page_size=self.page_size),
            file_url,
            self._migrate_file,
            self._delete_file,
            delete_first=delete_first,
            skip_existing=skip_existing,
            sink_kind="files",
        )
        self.log_message(f"File migration finished! {summary}", level="DEBUG")
        return summary

    def migrate_blogs(self, delete_first: bool = False, skip_existing: bool = True) -> MigrationSummary:
        self.log_message("Blog migration started...", level="DEBUG")
        summary = self._drive(
            "blog",
            self._rest_index("blogs"),
            self._source_pages("blogs"),
            handle_key,
            self._migrate_blog,
            lambda blog_id: self.destination.delete(f"blogs/{blog_id}"),
            delete_first=delete_first,
            skip_existing=skip_existing,
            sink_kind="blogs",
        )
        self.log_message(f"Blog migration finished! {summary}", level="DEBUG")
        return summary

    def migrate_articles(self, delete_first: bool = False, skip_existing: bool = True) -> MigrationSummary:
        """Migrate the articles of every source blog that exists, by handle, on the destination."""
        self.log_message("Article migration started...", level="DEBUG")
        destination_blogs = self._rest_index("blogs")
        source_blogs = list(records(self._source_pages("blogs")))
        matching = [blog for blog in source_blogs if blog.get("handle") in destination_blogs]
        self.log_message(
            f"Migrating articles for {len(matching)} matching blog(s): {', '.join(b['handle'] for b in matching)}",
            level="DEBUG",
        )
        summary = MigrationSummary("article")
        for blog in matching:
            destination_blog_id = destination_blogs[blog["handle"]]
            blog_summary = self._drive(
                "article",
                self._rest_index(f"blogs/{destination_blog_id}/articles"),
                self._source_pages(f"blogs/{blog.get('id')}/articles"),
                handle_key,
                partial(self._migrate_article, destination_blog_id),
                partial(self._delete_article, destination_blog_id),
                delete_first=delete_first,
                skip_existing=skip_existing,
                sink_kind="articles",
            )
            self.log_message(f"Articles of blog {blog['handle']} finished! {blog_summary}", level="DEBUG")
            summary.merge(blog_summary)
        self.log_message(f"Article migration finished! {summary}", level="DEBUG")
        return summary

    def _delete_article(self, blog_id: Any, article_id: Any) -> None:
        self.destination.delete(f"blogs/{blog_id}/articles/{article_id}")

    def migrate_products(self, delete_first: bool = False, skip_existing: bool = True) -> MigrationSummary:
        """
        Migrate products.  The summary's ``id_map`` (source product id ->
        destination product id) feeds the custom collection driver.
        """
        self.log_message("Product migration started...", level="DEBUG")
        summary = self._drive(
            "product",
            self._rest_index("products"),
            self._source_pages("products"),
            handle_key,
            self._migrate_product,
            lambda product_id: self.destination.delete(f"products/{product_id}"),
            delete_first=delete_first,
            skip_existing=skip_existing,
            sink_kind="products",
        )
        self.log_message(f"Product migration finished! {summary}", level="DEBUG")
        return summary

    def migrate_smart_collections(self, delete_first: bool = False, skip_existing: bool = True) -> MigrationSummary:
        self.log_message("Smart Collections migration started...", level="DEBUG")
        summary = self._drive(
            "smart_collection",
            self._rest_index("smart_collections"),
            self._source_pages("smart_collections"),
            handle_key,
            self._migrate_smart_collection,
            lambda collection_id: self.destination.delete(f"smart_collections/{collection_id}"),
            delete_first=delete_first,
            skip_existing=skip_existing,
            sink_kind="collections",
        )
        self.log_message(f"Smart Collection migration finished! {summary}", level="DEBUG")
        return summary

    def migrate_custom_collections(
        self,
        delete_first: bool = False,
        skip_existing: bool = True,
        product_map: Optional[Dict[Any, Any]] = None,
    ) -> MigrationSummary:
        """
        Migrate custom collections, rewriting their product membership.

        :param product_map: Source -> destination product ids already known
            (from :meth:`migrate_products`).  It is merged over the map built
            here by matching both stores' products by handle.
        """
        self.log_message("Custom Collections migration started...", level="DEBUG")
        merged_map = build_product_identity_map(
            records(self._source_pages("products")),
            records(rest_pages(self.destination, "products", page_size=self.page_size)),
        )
        merged_map.update(product_map or {})

        # Smart and custom collections share one handle namespace.
        smart = list(records(rest_pages(self.destination, "smart_collections", page_size=self.page_size)))
        custom = records(rest_pages(self.destination, "custom_collections", page_size=self.page_size))
        smart_ids = {collection.get("id") for collection in smart}
        index = build_identity_index(chain(smart, custom))

        def delete_collection(collection_id: Any) -> None:
            path = "smart_collections" if collection_id in smart_ids else "custom_collections"
            self.destination.delete(f"{path}/{collection_id}")

        summary = self._drive(
            "custom_collection",
            index,
            self._source_pages("custom_collections"),
            handle_key,
            partial(self._migrate_custom_collection, product_map=merged_map),
            delete_collection,
            delete_first=delete_first,
            skip_existing=skip_existing,
            sink_kind="collections",
        )
        self.log_message(f"Custom Collection migration finished! {summary}", level="DEBUG")
        return summary

    def migrate_metafields(self, delete_first: bool = False, skip_existing: bool = True) -> MigrationSummary:
        """Migrate shop-level metafields, matched by namespace and key."""
        self.log_message("Shop Metafields migration started...", level="DEBUG")
        summary = self._drive(
            "metafield",
            self._rest_index("metafields", namespace_key),
            self._portable_pages(self._source_pages("metafields")),
            namespace_key,
            self._migrate_shop_metafield,
            lambda metafield_id: self.destination.delete(f"metafields/{metafield_id}"),
            delete_first=delete_first,
            skip_existing=skip_existing,
            sink_kind="metafields",
        )
        self.log_message(f"Shop Metafields migration finished! {summary}", level="DEBUG")
        return summary

    def _portable_pages(self, pages: Iterable[List[Record]]) -> Iterator[List[Record]]:
        for page in pages:
            for metafield in page:
                if is_app_reserved(metafield):
                    self.log_message(
                        f"[METAFIELD {metafield.get('id')}] Ignoring app namespace {metafield.get('namespace')}",
                        level="DEBUG",
                    )
            yield [metafield for metafield in page if not is_app_reserved(metafield)]

    def migrate_menus(self, delete_first: bool = False, skip_existing: bool = True) -> MigrationSummary:
        self.log_message("Menu migration started...", level="DEBUG")
        index = build_identity_index(
            records(connection_pages(self.destination, MENUS_QUERY, "menus", page_size=self.page_size))
        )
        summary = self._drive(
            "menu",
            index,
            connection_pages(self.source, MENUS_QUERY, "menus", page_size=self.page_size),
            handle_key,
            self._migrate_menu,
            self._delete_menu,
            delete_first=delete_first,
            skip_existing=skip_existing,
            sink_kind="menus",
        )
        self.log_message(f"Menu migration finished! {summary}", level="DEBUG")
        return summary
