"""Per-service weight and threshold tables."""
from typing import List, Sequence

from sqlalchemy import Column, Float

from servicetree.database import Base
from servicetree.models.types import SEVERITY_NAMES, ServiceId


class _SeverityTable:
    """Six nullable values, one per severity, in ``<prefix>_<severity>`` columns."""

    column_prefix = ""

    @classmethod
    def columns(cls) -> List[str]:
        return [f"{cls.column_prefix}_{name}" for name in SEVERITY_NAMES]

    @property
    def values(self) -> List[float]:
        # NULL columns count as zero
        return [float(getattr(self, column) or 0.0) for column in self.columns()]

    @classmethod
    def from_values(cls, service_id: str, values: Sequence[float]):
        if len(values) != len(SEVERITY_NAMES):
            raise ValueError(f"Expected {len(SEVERITY_NAMES)} values, got {len(values)}")
        return cls(idservice=service_id, **dict(zip(cls.columns(), values)))


class ServiceWeight(_SeverityTable, Base):
    """What a service weighs on its parent, indexed by the service's own status."""

    __tablename__ = "service_weight"
    column_prefix = "weight"

    idservice = Column(ServiceId, primary_key=True, autoincrement=False)
    weight_normal = Column(Float, nullable=True)
    weight_information = Column(Float, nullable=True)
    weight_alert = Column(Float, nullable=True)
    weight_average = Column(Float, nullable=True)
    weight_major = Column(Float, nullable=True)
    weight_critical = Column(Float, nullable=True)


class ServiceThreshold(_SeverityTable, Base):
    """Minimum sum of children weights to reach each severity slot (1 to 6)."""

    __tablename__ = "service_threshold"
    column_prefix = "threshold"

    idservice = Column(ServiceId, primary_key=True, autoincrement=False)
    threshold_normal = Column(Float, nullable=True)
    threshold_information = Column(Float, nullable=True)
    threshold_alert = Column(Float, nullable=True)
    threshold_average = Column(Float, nullable=True)
    threshold_major = Column(Float, nullable=True)
    threshold_critical = Column(Float, nullable=True)
