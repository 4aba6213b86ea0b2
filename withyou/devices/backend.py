"""
WithYou backend client - device registration endpoint.

    POST {base_url}/v1/devices/register
    X-API-Key: <key>            (only when configured)

    {"install_id": ..., "device_token": ..., "timezone": "Europe/Dublin",
     "push_enabled": true, "apns_environment": "production"}

Any 2xx is success and the body is ignored. Anything else raises
BackendHTTPError carrying the status and the response text.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any

import httpx

from withyou.config import BackendConfig

logger = logging.getLogger(__name__)

REGISTER_PATH = "/v1/devices/register"

# Connectivity-class failures: timeouts, DNS, refused/unreachable, dropped.
TRANSIENT_TRANSPORT_ERRORS = (
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.RemoteProtocolError,
)


@dataclass(frozen=True)
class DeviceRegisterPayload:
    install_id: str
    device_token: str
    timezone: str
    push_enabled: bool
    apns_environment: str | None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class BackendHTTPError(Exception):
    """Non-2xx response from the backend."""

    def __init__(self, status_code: int, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(f"HTTP {status_code}: {body or '<empty>'}")


def is_transient_error(error: BaseException) -> bool:
    """True for failures worth retrying: 429, 5xx, and connectivity errors."""
    if isinstance(error, BackendHTTPError):
        return error.status_code == 429 or error.status_code >= 500
    return isinstance(error, TRANSIENT_TRANSPORT_ERRORS)


class BackendClient:
    """Async client for the WithYou backend."""

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_config(
        cls,
        config: BackendConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> BackendClient:
        return cls(
            base_url=config.base_url,
            api_key=config.api_key,
            timeout=config.timeout_seconds,
            transport=transport,
        )

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["X-API-Key"] = self.api_key
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._headers(),
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def register_device(self, payload: DeviceRegisterPayload) -> None:
        """POST the payload. Raises BackendHTTPError or an httpx error."""
        client = await self._get_client()
        response = await client.post(REGISTER_PATH, json=payload.to_dict())

        if not response.is_success:
            body = response.text
            logger.debug(f"Register device returned {response.status_code}: {body}")
            raise BackendHTTPError(response.status_code, body)

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> BackendClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()


__all__ = [
    "REGISTER_PATH",
    "BackendClient",
    "BackendHTTPError",
    "DeviceRegisterPayload",
    "is_transient_error",
]
