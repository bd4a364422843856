"""Monitoring platform (Zabbix) JSON-RPC API client."""
import httpx
import logging
from typing import Any, Iterable, Optional

from servicetree.config import settings
from servicetree.errors import ConnectivityError, ManagementApiError

logger = logging.getLogger(__name__)


class ZabbixApi:
    """Authenticated client for the platform's ``api_jsonrpc.php`` endpoint."""

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.url = url
        self._client = httpx.Client(timeout=timeout, transport=transport)
        self._auth: Optional[str] = None
        self._request_id = 0

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def close(self) -> None:
        self._client.close()

    def authenticate(self, user: str, password: str) -> str:
        """Log in and keep the session token for subsequent calls."""
        self._auth = None
        self._auth = self.invoke("user.login", {"user": user, "password": password})
        logger.debug(f"Authenticated on {self.url} as {user}")
        return self._auth

    def invoke(self, method: str, params: Any) -> Any:
        """
        Call a JSON-RPC method and return its ``result`` member.

        Args:
            method: API method name, e.g. ``service.create``
            params: Method parameters (object or array)

        Returns:
            The decoded ``result`` of the call

        Raises:
            ManagementApiError: on transport failure, non-200 response or JSON-RPC error
        """
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": self._request_id,
        }
        if self._auth is not None:
            payload["auth"] = self._auth

        try:
            response = self._client.post(
                self.url,
                json=payload,
                headers={"Content-Type": "application/json-rpc"},
            )
        except httpx.HTTPError as e:
            raise ManagementApiError(f"{method} failed: {type(e).__name__}: {e}") from e

        if response.status_code != 200:
            raise ManagementApiError(f"{method} failed with HTTP {response.status_code}: {response.text}")

        try:
            body = response.json()
        except ValueError as e:
            raise ManagementApiError(f"{method} returned invalid JSON: {e}") from e

        if "error" in body:
            error = body["error"]
            raise ManagementApiError(
                f"{method} failed: {error.get('message')} {error.get('data', '')}".strip(),
                code=error.get("code"),
                data=error.get("data"),
            )
        if "result" not in body:
            raise ManagementApiError(f"{method} returned no result")
        return body["result"]

    def create_service(self, fields: dict) -> str:
        """Create a service and return its new id."""
        result = self.invoke("service.create", fields)
        service_ids = result.get("serviceids") if isinstance(result, dict) else None
        if not service_ids:
            raise ManagementApiError(f"service.create returned no id for {fields.get('name')!r}")
        return str(service_ids[0])

    def delete_services(self, service_ids: Iterable[str]) -> None:
        """Delete several services in a single call."""
        self.invoke("service.delete", [str(service_id) for service_id in service_ids])


def connect_management_api(transport: Optional[httpx.BaseTransport] = None) -> ZabbixApi:
    """Build a client from settings and authenticate it.

    Failures are reported as connectivity errors since nothing has been
    written yet when this is called.
    """
    password = settings.ZABBIX_API_PASSWORD
    if settings.ZABBIX_API_PASSWORD_ENCRYPTED:
        from servicetree.utils.crypto import get_crypto_service
        password = get_crypto_service().decrypt(password)

    api = ZabbixApi(settings.ZABBIX_API_URL, timeout=settings.API_TIMEOUT, transport=transport)
    try:
        api.authenticate(settings.ZABBIX_API_USER, password)
    except ManagementApiError as e:
        api.close()
        raise ConnectivityError(f"Cannot log in to {settings.ZABBIX_API_URL}: {e}") from e
    return api
