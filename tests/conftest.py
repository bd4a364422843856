"""Pytest configuration for servicetree: an in-memory platform database."""
import itertools

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import servicetree.models  # noqa: F401
from servicetree.database import Base
from servicetree.models import IdSequence, Service, ServiceLink, ServiceThreshold, ServiceWeight
from servicetree.store import NodeStore

NODE_PREFIX = 0

DEFAULT_WEIGHTS = [0, 1, 2, 3, 4, 5]
DEFAULT_THRESHOLDS = [0, 1, 2, 3, 4, 5]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    SessionLocal = sessionmaker(engine, class_=Session, expire_on_commit=False)
    with SessionLocal() as session:
        session.add_all([
            IdSequence(nodeid=NODE_PREFIX, table_name="services", field_name="serviceid", nextid=0),
            IdSequence(nodeid=NODE_PREFIX, table_name="services_links", field_name="linkid", nextid=0),
        ])
        session.commit()
        yield session


@pytest.fixture
def store(session):
    return NodeStore(session)


class TreeBuilder:
    """Writes services straight into the store, bypassing import."""

    def __init__(self, session):
        self.session = session
        self._ids = itertools.count(1000)

    def node(self, name, status=0, weights=DEFAULT_WEIGHTS, thresholds=DEFAULT_THRESHOLDS,
             parent=None, algorithm=1, showsla=1, goodsla=99.5, sortorder=0):
        service_id = str(next(self._ids))
        self.session.add(Service(
            serviceid=service_id, name=name, status=status, algorithm=algorithm,
            showsla=showsla, goodsla=goodsla, sortorder=sortorder,
        ))
        if weights is not None:
            self.session.add(ServiceWeight.from_values(service_id, weights))
        if thresholds is not None:
            self.session.add(ServiceThreshold.from_values(service_id, thresholds))
        if parent is not None:
            self.link(parent, service_id)
        self.session.commit()
        return service_id

    def link(self, parent_id, child_id):
        self.session.add(ServiceLink(
            linkid=str(next(self._ids)), serviceupid=parent_id, servicedownid=child_id, soft=0,
        ))
        self.session.commit()


@pytest.fixture
def tree(session):
    return TreeBuilder(session)
