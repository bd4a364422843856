"""Maintenance windows attached to a service."""
from sqlalchemy import Column, Integer, String

from servicetree.database import Base
from servicetree.models.types import ServiceId


class ServiceTime(Base):
    """Service time period, owned by the platform; only cleaned up on rollback."""

    __tablename__ = "services_times"

    timeid = Column(ServiceId, primary_key=True, autoincrement=False)
    serviceid = Column(ServiceId, nullable=False, index=True)
    type = Column(Integer, nullable=False, default=0)
    ts_from = Column(Integer, nullable=False, default=0)
    ts_to = Column(Integer, nullable=False, default=0)
    note = Column(String(255), nullable=False, default="")
