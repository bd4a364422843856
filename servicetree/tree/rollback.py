"""Compensating deletes for a failed import.

This is a saga, not a database transaction: every step is committed on its
own, and a crash halfway through leaves the rows created so far in place.
"""
from typing import Iterator, List
import logging

from servicetree.errors import RollbackFailed
from servicetree.store import NodeStore
from servicetree.tree.strategies import NodeStrategy

logger = logging.getLogger(__name__)


class CreationLog:
    """Services created by one import attempt, in creation order."""

    def __init__(self):
        self.service_ids: List[str] = []
        self.root_ids: List[str] = []

    def record(self, service_id: str, is_root: bool = False) -> None:
        self.service_ids.append(service_id)
        if is_root:
            self.root_ids.append(service_id)

    def __iter__(self) -> Iterator[str]:
        return iter(self.service_ids)

    def __len__(self) -> int:
        return len(self.service_ids)


def rollback(log: CreationLog, store: NodeStore, strategy: NodeStrategy) -> None:
    """Undo every service recorded in ``log``.

    Raises:
        RollbackFailed: a compensating step failed; some rows were left behind
    """
    if not log:
        logger.info("Nothing to roll back.")
        return

    logger.warning(f"Something went wrong, rolling back {len(log)} service(s)...")
    try:
        for service_id in log:
            store.delete_threshold(service_id)
            store.delete_weight(service_id)
            store.delete_links(service_id)
            store.delete_times(service_id)
            strategy.remove_node(store, service_id)
            logger.debug(f"Service {service_id} deleted.")
        strategy.remove_nodes(log.service_ids)
    except Exception as e:
        logger.error(
            f"Rollback failed, services created by this import: {', '.join(log.service_ids)}"
        )
        raise RollbackFailed(f"Rollback failed: {e}", log.service_ids) from e

    logger.info(f"Rolled back {len(log)} service(s).")
