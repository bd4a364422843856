"""How imported services are created and, on rollback, removed.

The import traversal is the same whether services are inserted directly in
the store or created through the management API; only these few steps
differ.
"""
from typing import List, Sequence
import logging

from sqlalchemy import Table

from servicetree.models import ServiceIcon, ServiceThreshold, ServiceWeight
from servicetree.store import NodeStore
from servicetree.tree.document import ServiceDocument
from servicetree.utils.zabbix_api import ZabbixApi

logger = logging.getLogger(__name__)


class NodeStrategy:
    """Capabilities the importer and the rollback saga need per variant."""

    name = "abstract"

    @property
    def required_tables(self) -> List[Table]:
        """Tables import creates when missing."""
        return [ServiceThreshold.__table__, ServiceWeight.__table__]

    def create_node(self, store: NodeStore, prefix: int, document: ServiceDocument) -> str:
        """Create the service row for ``document`` and return its id."""
        raise NotImplementedError

    def remove_node(self, store: NodeStore, service_id: str) -> None:
        """Compensate ``create_node`` for one service, inside the rollback loop."""
        raise NotImplementedError

    def remove_nodes(self, service_ids: Sequence[str]) -> None:
        """Compensate ``create_node`` for all services, after the rollback loop."""
        raise NotImplementedError


class StoreNodeStrategy(NodeStrategy):
    """Services are inserted in the store under ids from the ``ids`` allocator."""

    name = "store"

    @property
    def required_tables(self) -> List[Table]:
        return super().required_tables + [ServiceIcon.__table__]

    def create_node(self, store: NodeStore, prefix: int, document: ServiceDocument) -> str:
        return store.create_node(prefix, document.node_fields())

    def remove_node(self, store: NodeStore, service_id: str) -> None:
        store.delete_node(service_id)

    def remove_nodes(self, service_ids: Sequence[str]) -> None:
        pass


class ApiNodeStrategy(NodeStrategy):
    """Services are created by the platform through ``service.create``.

    The service rows are owned by the platform: they are never deleted
    locally, a single ``service.delete`` call removes them all on rollback.
    """

    name = "api"

    def __init__(self, api: ZabbixApi):
        self.api = api

    def create_node(self, store: NodeStore, prefix: int, document: ServiceDocument) -> str:
        return self.api.create_service(document.node_fields())

    def remove_node(self, store: NodeStore, service_id: str) -> None:
        pass

    def remove_nodes(self, service_ids: Sequence[str]) -> None:
        logger.info(f"Deleting {len(service_ids)} service(s) through the management API")
        self.api.delete_services(service_ids)
