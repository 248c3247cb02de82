"""
Entry point for the Shopify store-to-store migration tool.
"""

import argparse
import sys
from typing import List, Optional

from dotenv import load_dotenv

from shopify_migration.migration_tool import MIGRATION_TYPES, ShopifyMigrationTool
from shopify_migration.utils.pre_flight_checks import PreFlightCheckError

CONFIG_FILE = "config/migration_config.json"

TYPE_HELP = {
    "pages": ("Run the migration for pages", "Delete(replace) pages with the same handles"),
    "files": ("Run the migration for files", "Delete(replace) files with the same URLs"),
    "blogs": ("Run the migration for blogs", "Delete(replace) blogs with the same handles"),
    "articles": ("Run the migration for articles", "Delete(replace) articles with the same handles"),
    "products": ("Run the migration for products", "Delete(replace) products with the same handles"),
    "collections": ("Run the migration for collections", "Delete(replace) collections with the same handles"),
    "metafields": (
        "Run the migration for shop's metafields",
        "Delete(replace) shop metafields with the same namespace and key",
    ),
    "menus": ("Run the migration for menus", "Delete(replace) menus with the same handles"),
}


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Copy content from one Shopify store to another.")
    parser.add_argument("--config", default=CONFIG_FILE, help="Path of the JSON configuration file")
    parser.add_argument("--all", action="store_true", help="Migrate everything")
    for name in MIGRATION_TYPES:
        run_help, delete_help = TYPE_HELP[name]
        parser.add_argument(f"--{name}", action="store_true", help=run_help)
        parser.add_argument(f"--delete-{name}", action="store_true", help=delete_help)
    parser.add_argument(
        "--save-data",
        action="store_true",
        help="Save every source record as a json file under data/{type}, e.g. data/products/123456.json",
    )
    parser.add_argument(
        "-v",
        "--verbosity",
        type=int,
        choices=range(1, 5),
        default=None,
        help="Verbosity level, 1 (errors only) to 4 (everything). Defaults to 4.",
    )
    args = parser.parse_args(argv)
    if not args.all and not any(getattr(args, name) for name in MIGRATION_TYPES):
        parser.error("select at least one type to migrate, or --all")
    return args


def selected_types(args: argparse.Namespace) -> List[str]:
    return [name for name in MIGRATION_TYPES if args.all or getattr(args, name)]


def replaced_types(args: argparse.Namespace) -> List[str]:
    return [name for name in MIGRATION_TYPES if getattr(args, f"delete_{name}")]


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function to run the Shopify migration tool.
    """
    load_dotenv()
    args = parse_args(argv)

    tool = ShopifyMigrationTool(config_file=args.config)
    if args.verbosity is not None:
        tool.verbosity = args.verbosity
    if args.save_data:
        tool.migrator.sink.enabled = True

    try:
        tool.test_connection()
        tool.log_message("Store configuration looks correct.", level="DEBUG")
    except PreFlightCheckError as e:
        tool.log_message(f"Could not validate proper store setup: {e}", level="ERROR")
        return 1

    summaries = tool.run(selected_types(args), replaced_types(args))
    for name, summary in summaries.items():
        tool.log_message(f"{name}: {summary}")
    tool.log_message("Migration process finished.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
