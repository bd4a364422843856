"""Service model for nodes of the service tree."""
from sqlalchemy import Column, Float, Integer, String

from servicetree.database import Base
from servicetree.models.types import ServiceId


class Service(Base):
    """A node of the monitoring platform's service tree."""

    __tablename__ = "services"

    serviceid = Column(ServiceId, primary_key=True, autoincrement=False)
    name = Column(String(128), nullable=False, default="")
    status = Column(Integer, nullable=False, default=0)  # 0 (normal) to 5 (critical)
    algorithm = Column(Integer, nullable=False, default=0)  # Passed through untouched
    triggerid = Column(ServiceId, nullable=True)
    showsla = Column(Integer, nullable=False, default=0)
    goodsla = Column(Float, nullable=False, default=99.9)
    sortorder = Column(Integer, nullable=False, default=0)
