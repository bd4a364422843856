"""Database models."""
from servicetree.models.service import Service
from servicetree.models.service_link import ServiceLink
from servicetree.models.service_time import ServiceTime
from servicetree.models.service_weight import ServiceWeight, ServiceThreshold
from servicetree.models.service_icon import ServiceIcon
from servicetree.models.id_sequence import IdSequence
from servicetree.models.types import SEVERITY_NAMES

__all__ = [
    "Service",
    "ServiceLink",
    "ServiceTime",
    "ServiceWeight",
    "ServiceThreshold",
    "ServiceIcon",
    "IdSequence",
    "SEVERITY_NAMES",
]
