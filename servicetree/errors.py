"""Exception hierarchy for service tree operations.

Every failure is fatal to the current invocation; the CLI turns any
``ServiceTreeError`` into a single error message and a non-zero exit code.
"""
from typing import List, Optional


class ServiceTreeError(Exception):
    """Base class for all service tree failures."""


class ConnectivityError(ServiceTreeError):
    """The store or the management API cannot be reached."""


class ConfigurationError(ConnectivityError):
    """Settings are missing or invalid (bad database URL, undecryptable secret...)."""


class DataIntegrityError(ServiceTreeError):
    """Stored tree data violates an invariant (missing weight/threshold row, no roots...)."""

    def __init__(self, message: str, service_id: Optional[str] = None):
        super().__init__(message)
        self.service_id = service_id


class DocumentError(ServiceTreeError):
    """The import/export document cannot be read, written or validated."""


class QueryError(ServiceTreeError):
    """A store query failed."""


class IdAllocationError(QueryError):
    """No ID sequence or partition prefix is available for allocation."""


class ManagementApiError(ServiceTreeError):
    """A management API call failed at transport or JSON-RPC level."""

    def __init__(self, message: str, code: Optional[int] = None, data: Optional[str] = None):
        super().__init__(message)
        self.code = code
        self.data = data


class ImportFailed(ServiceTreeError):
    """An import step failed; every node created by the attempt was rolled back."""

    def __init__(self, message: str, created_ids: Optional[List[str]] = None):
        super().__init__(message)
        self.created_ids = list(created_ids or [])


class RollbackFailed(ServiceTreeError):
    """A compensating delete failed; the store needs manual intervention."""

    def __init__(self, message: str, created_ids: Optional[List[str]] = None):
        super().__init__(f"{message} - manual intervention required")
        self.created_ids = list(created_ids or [])
