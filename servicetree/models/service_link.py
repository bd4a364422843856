"""Parent to child links between services."""
from sqlalchemy import Column, Integer

from servicetree.database import Base
from servicetree.models.types import ServiceId


class ServiceLink(Base):
    """Link from a parent service (up) to a child service (down)."""

    __tablename__ = "services_links"

    linkid = Column(ServiceId, primary_key=True, autoincrement=False)
    serviceupid = Column(ServiceId, nullable=False, index=True)
    servicedownid = Column(ServiceId, nullable=False, index=True)
    soft = Column(Integer, nullable=False, default=0)  # Preserved, never interpreted
