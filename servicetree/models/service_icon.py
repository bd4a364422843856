"""Service icon model."""
from sqlalchemy import BigInteger, Column

from servicetree.database import Base
from servicetree.models.types import ServiceId


class ServiceIcon(Base):
    """Icon shown by the frontend for a service."""

    __tablename__ = "service_icon"

    idservice = Column(ServiceId, primary_key=True, autoincrement=False)
    idicon = Column(BigInteger, nullable=False)
