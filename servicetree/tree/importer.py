"""Write documents back into the store as a new service tree."""
from typing import List, Optional, Sequence
import logging

from servicetree.errors import ImportFailed
from servicetree.store import NodeStore
from servicetree.tree.document import ServiceDocument
from servicetree.tree.rollback import CreationLog, rollback
from servicetree.tree.strategies import NodeStrategy

logger = logging.getLogger(__name__)

_CREATE = "create"
_LINK = "link"


def ensure_tables(store: NodeStore, strategy: NodeStrategy) -> None:
    """Create the tables the import writes to when they don't exist yet."""
    for table in strategy.required_tables:
        if not store.table_exists(table.name):
            store.create_table(table)
            logger.info(f"Table {table.name} created.")
        else:
            logger.debug(f"Table {table.name} already exists.")


def import_tree(
    documents: Sequence[ServiceDocument],
    store: NodeStore,
    strategy: NodeStrategy,
    log: Optional[CreationLog] = None,
    prefix: Optional[int] = None,
) -> CreationLog:
    """
    Create every service of ``documents``, parents before children.

    Each service gets its weight and threshold rows right after creation;
    the link to its parent is created once its own subtree is complete.

    This is not atomic. On failure the services recorded so far are deleted
    again by compensating steps, which can themselves fail or be interrupted.

    Args:
        documents: Root services, validated
        store: Store the tree is written to
        strategy: How service rows are created and removed
        log: Creation log to append to; a new one by default
        prefix: Distributed node id for new ids; looked up in the store when None

    Returns:
        The creation log, with every created id in creation order

    Raises:
        ImportFailed: a step failed and the rollback succeeded
        RollbackFailed: a step failed and so did the rollback
    """
    log = log if log is not None else CreationLog()
    ensure_tables(store, strategy)

    try:
        if prefix is None:
            prefix = store.partition_prefix()
        for document in documents:
            _import_root(document, store, strategy, log, prefix)
    except Exception as e:
        logger.error(f"Import failed: {e}")
        rollback(log, store, strategy)
        raise ImportFailed(f"Import aborted, {len(log)} service(s) rolled back: {e}", log.service_ids) from e

    logger.info(f"Imported {len(log)} service(s) under {len(log.root_ids)} root(s).")
    return log


def _import_root(
    root: ServiceDocument,
    store: NodeStore,
    strategy: NodeStrategy,
    log: CreationLog,
    prefix: int,
) -> str:
    # Entries are (action, document or child id, parent id, depth); a link
    # entry sits below its child's subtree so it runs once that subtree is done.
    stack: List[tuple] = [(_CREATE, root, None, 0)]
    root_id = None

    while stack:
        action, item, parent_id, depth = stack.pop()

        if action == _LINK:
            logger.debug(f"{'  ' * depth}Making {parent_id} parent of {item}.")
            store.create_link(prefix, parent_id, item, soft=False)
            continue

        logger.debug(f"{'  ' * depth}{item.name} on ImportNode.")
        service_id = strategy.create_node(store, prefix, item)
        log.record(service_id, is_root=parent_id is None)
        logger.debug(f"{'  ' * depth}Node {item.name} created as {service_id}.")

        store.upsert_threshold(service_id, item.threshold.as_list())
        store.upsert_weight(service_id, item.weight.as_list())

        if parent_id is None:
            root_id = service_id
        else:
            stack.append((_LINK, service_id, parent_id, depth - 1))
        for child in reversed(item.children):
            stack.append((_CREATE, child, service_id, depth + 1))

    return root_id
