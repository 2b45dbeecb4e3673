"""PeeringDB REST backend.

:class:`Backend` is the seam the dispatcher talks to; :class:`PeeringDBClient`
implements it over ``httpx.AsyncClient``.  Reads are anonymous.  Writes carry
``Authorization: Api-Key <key>`` and fail with
:class:`~peering_spine.core.errors.MissingCredentialError` before any request
is made when no key is configured.

Examples:
    >>> async with PeeringDBClient.from_settings(get_settings()) as client:
    ...     await client.get("net", {"asn": 694})
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable
from urllib.parse import quote

import httpx

from peering_spine import __version__
from peering_spine.core.errors import BackendError, MissingCredentialError
from peering_spine.core.logging import get_logger
from peering_spine.core.settings import PeeringSettings

logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://www.peeringdb.com/api"
DEFAULT_TIMEOUT = 30.0

_STATUS_MESSAGES = {
    401: "Authentication failed. Please check your API key.",
    403: "Access forbidden. Insufficient permissions.",
    404: "Resource not found.",
    429: "Rate limit exceeded. Please try again later.",
}


@runtime_checkable
class Backend(Protocol):
    """Asynchronous REST backend with type-named collections."""

    async def get(self, endpoint: str, params: dict[str, Any] | None = None) -> Any: ...

    async def get_by_id(
        self, endpoint: str, instance_id: str | int, params: dict[str, Any] | None = None
    ) -> Any: ...

    async def create(self, endpoint: str, payload: dict[str, Any]) -> Any: ...

    async def full_update(self, endpoint: str, instance_id: str | int, payload: dict[str, Any]) -> Any: ...

    async def partial_update(self, endpoint: str, instance_id: str | int, payload: dict[str, Any]) -> Any: ...

    async def delete(self, endpoint: str, instance_id: str | int) -> Any: ...


def _instance_path(endpoint: str, instance_id: str | int) -> str:
    # The id is always one opaque path segment, never a dot segment.
    segment = quote(str(instance_id), safe="")
    if segment in (".", ".."):
        segment = segment.replace(".", "%2E")
    return f"/{endpoint}/{segment}"


def _query_params(params: dict[str, Any] | None) -> dict[str, Any] | None:
    if not params:
        return None
    # httpx would repeat list values as separate keys; PeeringDB wants "a,b".
    return {k: ",".join(str(v) for v in value) if isinstance(value, list) else value for k, value in params.items()}


class PeeringDBClient:
    """``httpx``-backed :class:`Backend` for the PeeringDB API."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._api_key = api_key or None
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout,
            headers={
                "Accept": "application/json",
                "Content-Type": "application/json",
                "User-Agent": user_agent or f"peering-spine/{__version__}",
            },
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: PeeringSettings, **kwargs: Any) -> PeeringDBClient:
        api_key = settings.api_key.get_secret_value() if settings.api_key else None
        return cls(
            api_key,
            base_url=settings.base_url,
            timeout=settings.timeout_seconds,
            user_agent=settings.user_agent,
            **kwargs,
        )

    @property
    def has_api_key(self) -> bool:
        return self._api_key is not None

    @property
    def base_url(self) -> str:
        return self._base_url

    # ── Reads ────────────────────────────────────────────────────────

    async def get(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        return await self._request("GET", f"/{endpoint}", params=_query_params(params))

    async def get_by_id(
        self, endpoint: str, instance_id: str | int, params: dict[str, Any] | None = None
    ) -> Any:
        return await self._request("GET", _instance_path(endpoint, instance_id), params=_query_params(params))

    # ── Writes ───────────────────────────────────────────────────────

    async def create(self, endpoint: str, payload: dict[str, Any]) -> Any:
        return await self._request("POST", f"/{endpoint}", json=payload, auth=True)

    async def full_update(self, endpoint: str, instance_id: str | int, payload: dict[str, Any]) -> Any:
        return await self._request("PUT", _instance_path(endpoint, instance_id), json=payload, auth=True)

    async def partial_update(self, endpoint: str, instance_id: str | int, payload: dict[str, Any]) -> Any:
        return await self._request("PATCH", _instance_path(endpoint, instance_id), json=payload, auth=True)

    async def delete(self, endpoint: str, instance_id: str | int) -> Any:
        return await self._request("DELETE", _instance_path(endpoint, instance_id), auth=True)

    # ── Plumbing ─────────────────────────────────────────────────────

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        auth: bool = False,
    ) -> Any:
        headers: dict[str, str] = {}
        if auth:
            if self._api_key is None:
                raise MissingCredentialError()
            headers["Authorization"] = f"Api-Key {self._api_key}"

        url = f"{self._base_url}{path}"
        try:
            response = await self._client.request(method, path, params=params, json=json, headers=headers)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("client.transport_error", method=method, url=url, error=str(e))
            raise BackendError(str(e) or e.__class__.__name__, url=url, cause=e) from e

        if response.is_error:
            body = _decode(response)
            message = _STATUS_MESSAGES.get(
                response.status_code,
                f"Request failed with status code {response.status_code}",
            )
            logger.warning("client.http_error", method=method, url=url, status=response.status_code)
            raise BackendError(message, status=response.status_code, body=body, url=url)

        logger.debug("client.response", method=method, url=url, status=response.status_code)
        return _decode(response)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> PeeringDBClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()


def _decode(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
