"""Service tree export/import and status propagation for the monitoring platform."""

__version__ = "1.0.0"
