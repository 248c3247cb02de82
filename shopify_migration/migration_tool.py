"""
High-level orchestration of the Shopify store-to-store migration.

This module defines a :class:`ShopifyMigrationTool` class that ties
together the transport, the drivers and the reporting utilities into a
complete run.  Entity types run one after another in a fixed order so
that dependent types find their dependencies already migrated:
pages, files, blogs, articles, products, collections, shop metafields,
menus.

Configuration is supplied via a JSON file path or directly as a
dictionary.  The ``source`` and ``destination`` sections hold ``store``,
``access_token`` and ``api_version``; missing values are read from the
environment.  Run settings (verbosity, raw data dumps, page size...) live
under the ``migration`` key.
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict, Iterable, Optional

from shopify_migration.migrators.drivers import MigrationSummary, ShopifyMigrator
from shopify_migration.migrators.entities import error_details
from shopify_migration.migrators.shopify_client import DEFAULT_API_VERSION, ShopifyStore
from shopify_migration.utils.id_map import generate_id_map_csv
from shopify_migration.utils.pre_flight_checks import run_pre_flight_checks
from shopify_migration.utils.records import RecordSink

MIGRATION_TYPES = ("pages", "files", "blogs", "articles", "products", "collections", "metafields", "menus")

# Verbosity threshold at which each level starts being printed.
LOG_LEVELS: Dict[str, int] = {
    "ERROR": 1,
    "WARNING": 2,
    "INFO": 3,
    "DEBUG": 4,
}


def _store_defaults(section: Dict[str, Any], prefix: str) -> None:
    section.setdefault("store", os.getenv(f"{prefix}_SHOPIFY_STORE", ""))
    section.setdefault("access_token", os.getenv(f"{prefix}_SHOPIFY_API_PASSWORD", ""))
    section.setdefault("api_version", os.getenv("SHOPIFY_API_VERSION", DEFAULT_API_VERSION))


class ShopifyMigrationTool:
    """
    Encapsulates all state required to migrate one store into another.
    This class is responsible for reading configuration, checking both
    stores, running the selected drivers and writing the run reports.
    A failure inside one entity type is logged and the run continues
    with the next type.
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        *,
        config_file: Optional[str] = None,
        source=None,
        destination=None,
    ) -> None:
        if config_file and os.path.exists(config_file):
            with open(config_file, "r", encoding="utf-8") as f:
                config = json.load(f)
        elif config is None:
            config = {}

        # Ensure essential keys exist to prevent KeyErrors
        config.setdefault("source", {})
        _store_defaults(config["source"], "SOURCE")
        config.setdefault("destination", {})
        _store_defaults(config["destination"], "DESTINATION")

        config.setdefault("migration", {})
        config["migration"].setdefault("verbosity", 4)
        config["migration"].setdefault("save_data", False)
        config["migration"].setdefault("data_dir", "data")
        config["migration"].setdefault("page_size", 250)
        config["migration"].setdefault("rate_limit_rpm", 120)
        config["migration"].setdefault("timeout", 60)
        config["migration"].setdefault("report_dir", os.path.join("reports", "migration"))
        config["migration"].setdefault("id_map_path", os.path.join("reports", "id_map.csv"))

        self.config = config
        settings = config["migration"]
        self.verbosity = int(settings["verbosity"])
        self.report_dir = settings["report_dir"]

        transport = {"rate_limit_rpm": settings["rate_limit_rpm"], "timeout": settings["timeout"]}
        self.source = source or ShopifyStore({**transport, **config["source"]})
        self.destination = destination or ShopifyStore({**transport, **config["destination"]})
        self.migrator = ShopifyMigrator(
            self.source,
            self.destination,
            log=self.log_message,
            sink=RecordSink(settings["data_dir"], bool(settings["save_data"])),
            page_size=int(settings["page_size"]),
            report_dir=self.report_dir,
        )

    def log_message(self, message: str, level: str = "INFO") -> None:
        if LOG_LEVELS.get(level, LOG_LEVELS["INFO"]) > self.verbosity:
            return
        print(f"[{level}] {message}")
        # Append to log file
        os.makedirs(self.report_dir, exist_ok=True)
        with open(os.path.join(self.report_dir, "migration.log"), "a", encoding="utf-8") as f:
            f.write(f"{level}: {message}\n")

    def test_connection(self) -> None:
        """
        Check both stores before anything is written.

        :raises PreFlightCheckError: if either store cannot be reached.
        """
        run_pre_flight_checks(self.source, self.destination, self.log_message)

    def run(self, selected: Iterable[str], replace: Optional[Iterable[str]] = None) -> Dict[str, MigrationSummary]:
        """
        Run the selected entity types in the fixed migration order.

        :param selected: Names from :data:`MIGRATION_TYPES` to migrate.
        :param replace: Names for which existing destination entities are
            deleted and re-created instead of skipped.
        :return: The summary of every driver that ran to completion.
        """
        selected = set(selected)
        replace = set(replace or ())
        unknown = selected.union(replace) - set(MIGRATION_TYPES)
        if unknown:
            raise ValueError(f"Unknown migration types: {', '.join(sorted(unknown))}")

        summaries: Dict[str, MigrationSummary] = {}
        product_map: Dict[Any, Any] = {}
        for name in MIGRATION_TYPES:
            if name not in selected:
                continue
            delete_first = name in replace
            try:
                if name == "products":
                    summaries[name] = self.migrator.migrate_products(delete_first)
                    product_map.update(summaries[name].id_map)
                elif name == "collections":
                    summaries["smart_collections"] = self.migrator.migrate_smart_collections(delete_first)
                    summaries["custom_collections"] = self.migrator.migrate_custom_collections(
                        delete_first, product_map=product_map
                    )
                else:
                    summaries[name] = getattr(self.migrator, f"migrate_{name}")(delete_first)
            except Exception as e:
                self.log_message(f"Migration of {name} stopped: {error_details(e)}", level="ERROR")

        if self.migrator.created_entries:
            try:
                path = generate_id_map_csv(self.migrator.created_entries, out_path=self.config["migration"]["id_map_path"])
                self.log_message(f"Id map CSV generated with {len(self.migrator.created_entries)} entries at {path}")
            except OSError as e:
                self.log_message(f"Failed to generate id map: {e}", level="ERROR")
        return summaries
