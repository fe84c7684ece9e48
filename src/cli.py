#!/usr/bin/env python3
"""
Catalog Dedup Command Line
==========================

Removes duplicate product images from the catalog: gallery images whose
content is byte-identical to the base image or to an earlier gallery image
of the same product.

Usage:
    catalog-dedup duplicate:remove [-u [BOOL]] [-d [BOOL]] [products ...]

Options:
    -u, --unlink [BOOL]   Delete the duplicate files from disk (default: false)
    -d, --dryrun [BOOL]   Report only, change nothing (default: true)
    products              SKUs to restrict the run to

Example:
    catalog-dedup duplicate:remove
    catalog-dedup duplicate:remove SKU-1 SKU-2 --dryrun false --unlink
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from src.core import config
from src.core.catalog_client import CatalogAPIError
from src.core.dedup import ContentHashCalculator
from src.core.processing import DuplicateRemovalManager
from src.core.session import Session
from src.utils.config_manager import CONFIG_PATH, apply_environment, load_config, save_config
from src.utils.logger import log_config, setup_logging, shutdown_logging

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2

TRUE_VALUES = {"1", "true", "yes", "y", "on"}
FALSE_VALUES = {"0", "false", "no", "n", "off"}


def str_to_bool(value: str) -> bool:
    """Parse an explicit boolean option value."""
    normalized = str(value).strip().lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in FALSE_VALUES:
        return False
    raise argparse.ArgumentTypeError(f"expected a boolean value, got '{value}'")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="catalog-dedup",
        description=config.APP_NAME
    )
    parser.add_argument("--config", type=Path, default=CONFIG_PATH,
                        help=f"Configuration file (default: {CONFIG_PATH})")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    subparsers = parser.add_subparsers(dest="command", metavar="command")
    subparsers.required = True

    remove = subparsers.add_parser(config.COMMAND_NAME, help="Remove duplicate product images")
    remove.add_argument("-u", "--unlink", type=str_to_bool, nargs="?", const=True, default=False,
                        metavar="BOOL", help="Unlink the duplicate files from the system")
    remove.add_argument("-d", "--dryrun", type=str_to_bool, nargs="?", const=True, default=True,
                        metavar="BOOL", help="Dry-run does not delete any values or files")
    remove.add_argument("products", nargs="*", metavar="products",
                        help="Product entity SKUs to filter on")

    remove.add_argument("--base-url", help="Shop base URL (overrides config / MAGENTO_BASE_URL)")
    remove.add_argument("--token", help="Integration access token (overrides MAGENTO_ACCESS_TOKEN)")
    remove.add_argument("--store-code", help=f"REST store scope (default: {config.DEFAULT_STORE_CODE})")
    remove.add_argument("--media-root", help="Path of the shop's pub/media directory")
    remove.add_argument("--algorithm", choices=sorted(ContentHashCalculator.SUPPORTED_CRYPTO_ALGOS),
                        default=config.DEFAULT_HASH_ALGORITHM, help="Content hash algorithm")
    remove.add_argument("--save-config", action="store_true",
                        help="Store the connection settings in the configuration file")
    return parser


def build_session(args: argparse.Namespace) -> Session:
    """Resolve settings: defaults < config file < environment < command line."""
    session = Session()
    load_config(session, args.config)
    apply_environment(session)

    overrides = {
        "base_url": args.base_url,
        "access_token": args.token,
        "store_code": args.store_code,
        "media_root": args.media_root,
    }
    for attr, value in overrides.items():
        if value:
            setattr(session.catalog, attr, value)

    session.run.dry_run = args.dryrun
    session.run.unlink = args.unlink
    session.run.algorithm = args.algorithm
    return session


def run_remove_duplicates(args: argparse.Namespace) -> int:
    session = build_session(args)

    log_config("Catalog", vars(session.catalog), logger)

    missing = session.validate()
    if missing:
        print(f"Missing configuration: {', '.join(missing)}", file=sys.stderr)
        return EXIT_USAGE

    if args.save_config:
        save_config(session, args.config)

    session.connect_catalog()
    try:
        manager = DuplicateRemovalManager(session, output=print)
        manager.run(args.products or None)
    except CatalogAPIError as e:
        logger.error(f"Could not select products: {e}", exc_info=True)
        print(f"Could not select products: {e}", file=sys.stderr)
        return EXIT_FAILURE
    finally:
        session.close()

    return EXIT_SUCCESS


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(console_level=logging.DEBUG if args.verbose else logging.WARNING)
    try:
        return run_remove_duplicates(args)
    finally:
        shutdown_logging()


if __name__ == "__main__":
    sys.exit(main())
