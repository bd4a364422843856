"""Relational store holding the service tree."""
from contextlib import contextmanager
from typing import Iterator, List, NamedTuple, Optional, Sequence
import logging

from sqlalchemy import Table, delete, func, inspect, or_, select, text, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from servicetree.errors import ConnectivityError, IdAllocationError, QueryError
from servicetree.models import (
    IdSequence,
    Service,
    ServiceLink,
    ServiceThreshold,
    ServiceTime,
    ServiceWeight,
)

logger = logging.getLogger(__name__)


class NodeRef(NamedTuple):
    """Minimal view of a service, as returned by root and children queries."""
    serviceid: str
    name: str
    status: int


class NodeStore:
    """Service tree access on top of a SQLAlchemy session.

    Every write is committed on its own: callers composing several writes
    (the importer) get a sequence of committed steps, not one transaction.
    Any SQLAlchemy failure is rolled back and re-raised as ``QueryError``.
    """

    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def _query(self, what: str, commit: bool = False) -> Iterator[None]:
        try:
            yield
            if commit:
                self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise QueryError(f"SQL ERROR on {what}: {e}") from e

    def check_connection(self) -> None:
        """Fail early when the database cannot be reached."""
        try:
            self.session.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            self.session.rollback()
            raise ConnectivityError(f"Cannot reach the database: {e}") from e

    # Schema

    def table_exists(self, name: str) -> bool:
        with self._query(f"table check of {name}"):
            return inspect(self.session.connection()).has_table(name)

    def create_table(self, table: Table) -> None:
        with self._query(f"creation of table {table.name}", commit=True):
            table.create(bind=self.session.connection())

    # Reads

    def get_roots(self) -> List[NodeRef]:
        """Services no link points down to, ordered by id."""
        has_parent = select(ServiceLink.linkid).where(ServiceLink.servicedownid == Service.serviceid)
        stmt = (
            select(Service.serviceid, Service.name, Service.status)
            .where(~has_parent.exists())
            .order_by(Service.serviceid)
        )
        with self._query("root services"):
            return [NodeRef(*row) for row in self.session.execute(stmt)]

    def get_children(self, service_id: str) -> List[NodeRef]:
        """Children of a service, in link order."""
        stmt = (
            select(Service.serviceid, Service.name, Service.status)
            .join(ServiceLink, ServiceLink.servicedownid == Service.serviceid)
            .where(ServiceLink.serviceupid == service_id)
            .order_by(ServiceLink.linkid)
        )
        with self._query(f"children of {service_id}"):
            return [NodeRef(*row) for row in self.session.execute(stmt)]

    def get_node(self, service_id: str) -> Optional[Service]:
        with self._query(f"service {service_id}"):
            return self.session.get(Service, service_id)

    def get_weight(self, service_id: str) -> Optional[ServiceWeight]:
        with self._query(f"weight of {service_id}"):
            return self.session.get(ServiceWeight, service_id)

    def get_threshold(self, service_id: str) -> Optional[ServiceThreshold]:
        with self._query(f"threshold of {service_id}"):
            return self.session.get(ServiceThreshold, service_id)

    def get_links(self, service_id: str) -> List[ServiceLink]:
        """Links where the service is either parent or child."""
        stmt = select(ServiceLink).where(
            or_(ServiceLink.serviceupid == service_id, ServiceLink.servicedownid == service_id)
        )
        with self._query(f"links of {service_id}"):
            return list(self.session.scalars(stmt))

    # ID allocation

    def partition_prefix(self) -> int:
        """Distributed node id new services are allocated under."""
        stmt = select(func.min(IdSequence.nodeid)).where(
            IdSequence.table_name == "services",
            IdSequence.field_name == "serviceid",
        )
        with self._query("distributed node prefix"):
            prefix = self.session.scalar(stmt)
        if prefix is None:
            raise IdAllocationError("Failed to retrieve distributed node prefix.")
        return prefix

    def allocate_id(self, prefix: int, table_name: str, field_name: str) -> str:
        """Increment the ``ids`` row of (prefix, table, field) and return the new value."""
        stmt = (
            select(IdSequence)
            .where(
                IdSequence.nodeid == prefix,
                IdSequence.table_name == table_name,
                IdSequence.field_name == field_name,
            )
            .with_for_update()
        )
        with self._query(f"next id of {table_name}.{field_name}", commit=True):
            sequence = self.session.scalars(stmt).one_or_none()
            if sequence is None:
                self.session.rollback()
                raise IdAllocationError(
                    f"Failed to fetch next ID of {table_name}.{field_name} ({prefix})."
                )
            sequence.nextid += 1
            next_id = str(sequence.nextid)
        logger.debug(f"Allocated {table_name}.{field_name} = {next_id} on node {prefix}")
        return next_id

    # Writes

    def create_node(self, prefix: int, fields: dict) -> str:
        """Insert a service under a freshly allocated id."""
        service_id = self.allocate_id(prefix, "services", "serviceid")
        with self._query(f"insert of service {fields.get('name')!r}", commit=True):
            self.session.add(Service(serviceid=service_id, **fields))
        return service_id

    def create_link(self, prefix: int, parent_id: str, child_id: str, soft: bool = False) -> str:
        link_id = self.allocate_id(prefix, "services_links", "linkid")
        with self._query(f"link {parent_id} -> {child_id}", commit=True):
            self.session.add(
                ServiceLink(linkid=link_id, serviceupid=parent_id, servicedownid=child_id, soft=int(soft))
            )
        return link_id

    def upsert_weight(self, service_id: str, values: Sequence[float]) -> None:
        with self._query(f"weight of {service_id}", commit=True):
            self.session.merge(ServiceWeight.from_values(service_id, values))

    def upsert_threshold(self, service_id: str, values: Sequence[float]) -> None:
        with self._query(f"threshold of {service_id}", commit=True):
            self.session.merge(ServiceThreshold.from_values(service_id, values))

    def update_status(self, service_id: str, status: int) -> None:
        stmt = update(Service).where(Service.serviceid == service_id).values(status=status)
        with self._query(f"status of {service_id}", commit=True):
            self.session.execute(stmt)

    # Deletes, used by the rollback saga

    def delete_threshold(self, service_id: str) -> None:
        stmt = delete(ServiceThreshold).where(ServiceThreshold.idservice == service_id)
        with self._query(f"delete threshold of {service_id}", commit=True):
            self.session.execute(stmt)

    def delete_weight(self, service_id: str) -> None:
        stmt = delete(ServiceWeight).where(ServiceWeight.idservice == service_id)
        with self._query(f"delete weight of {service_id}", commit=True):
            self.session.execute(stmt)

    def delete_links(self, service_id: str) -> None:
        stmt = delete(ServiceLink).where(
            or_(ServiceLink.serviceupid == service_id, ServiceLink.servicedownid == service_id)
        )
        with self._query(f"delete links of {service_id}", commit=True):
            self.session.execute(stmt)

    def delete_times(self, service_id: str) -> None:
        stmt = delete(ServiceTime).where(ServiceTime.serviceid == service_id)
        with self._query(f"delete times of {service_id}", commit=True):
            self.session.execute(stmt)

    def delete_node(self, service_id: str) -> None:
        stmt = delete(Service).where(Service.serviceid == service_id)
        with self._query(f"delete service {service_id}", commit=True):
            self.session.execute(stmt)
