"""Command line entry points.

Usage:
    servicetree -e /var/tmp/tree.json        Export the service tree to a file
    servicetree -i /var/tmp/tree.json        Import a service tree from a file
    servicetree -i tree.json --via-api       Create services through the management API
    servicetree-propagate                    Propagate statuses up the tree once

Import is not transactional: a failure triggers compensating deletes, and a
failed or interrupted rollback leaves rows that need manual cleanup.
"""
import argparse
import logging
import sys

from servicetree.config import settings
from servicetree.database import get_session
from servicetree.errors import ServiceTreeError
from servicetree.store import NodeStore
from servicetree.tree import (
    ApiNodeStrategy,
    StoreNodeStrategy,
    export_tree,
    import_tree,
    load_document,
    propagate_all,
    write_document,
)
from servicetree.utils.zabbix_api import connect_management_api

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(level=level, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    logging.getLogger("sqlalchemy").setLevel(logging.ERROR)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def _fail(message: str) -> int:
    logger.error(message)
    print(f"ERROR: {message}", file=sys.stderr)
    return 1


# ── Commands ──────────────────────────────────────────────────


def cmd_export(args) -> int:
    print(f"Exporting tree to {args.export_path} ...")
    with get_session() as session:
        store = NodeStore(session)
        store.check_connection()
        documents = export_tree(store)
    write_document(documents, args.export_path)
    return 0


def cmd_import(args) -> int:
    print(f"Importing tree from {args.import_path} ...")
    documents = load_document(args.import_path)

    via_api = args.via_api or settings.IMPORT_STRATEGY == "api"
    with get_session() as session:
        store = NodeStore(session)
        store.check_connection()
        if via_api:
            with connect_management_api() as api:
                log = import_tree(documents, store, ApiNodeStrategy(api), prefix=settings.NODE_PREFIX)
        else:
            log = import_tree(documents, store, StoreNodeStrategy(), prefix=settings.NODE_PREFIX)

    print(f"Created {len(log)} service(s).")
    return 0


def cmd_propagate(args) -> int:
    with get_session() as session:
        store = NodeStore(session)
        store.check_connection()
        report = propagate_all(store)

    print(f"Updated {len(report.changes)} of {report.visited} service(s).")
    return 0


# ── Argument Parsers ──────────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="servicetree",
        description="Export or import the monitoring service tree",
    )
    action = parser.add_mutually_exclusive_group(required=True)
    action.add_argument("-e", "--export", dest="export_path", metavar="PATH",
                        help="Export tree structure to a file")
    action.add_argument("-i", "--import", dest="import_path", metavar="PATH",
                        help="Import tree from a file")
    parser.add_argument("--via-api", action="store_true",
                        help="Create services through the management API instead of the database")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug messages")
    return parser


def build_propagate_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="servicetree-propagate",
        description="Propagate service statuses from the leaves up to the roots",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug messages")
    return parser


def _run(handler, args) -> int:
    configure_logging(args.verbose or settings.DEBUG)
    try:
        status = handler(args)
    except ServiceTreeError as e:
        return _fail(str(e))
    print("Finished.")
    return status


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    handler = cmd_export if args.export_path else cmd_import
    return _run(handler, args)


def propagate_main(argv=None) -> int:
    args = build_propagate_parser().parse_args(argv)
    return _run(cmd_propagate, args)


if __name__ == "__main__":
    sys.exit(main())
