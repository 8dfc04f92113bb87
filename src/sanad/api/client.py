"""Async REST client for the Sanad backend."""

import json
import logging
from typing import Any, Literal

import httpx

from ..core.exceptions import NotFoundError, RemoteError
from .tokens import TokenStore

logger = logging.getLogger(__name__)

HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]

DEFAULT_TIMEOUT = 30.0


def _server_message(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    if isinstance(body, dict) and isinstance(body.get("message"), str):
        return body["message"]
    return None


class ApiClient:
    """Thin wrapper over httpx.AsyncClient.

    Adds the bearer token, decodes JSON bodies and maps every failure to
    RemoteError (or NotFoundError for 404). Requests are single-attempt.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        token_store: TokenStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.token_store = token_store
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self, requires_auth: bool) -> dict[str, str]:
        if not requires_auth or self.token_store is None:
            return {}
        token = self.token_store.get()
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}

    async def request(
        self,
        method: HttpMethod,
        path: str,
        body: Any = None,
        params: dict[str, Any] | None = None,
        requires_auth: bool = True,
    ) -> Any:
        endpoint = path if path.startswith("/") else f"/{path}"
        logger.debug(f"{method} {endpoint}")

        try:
            response = await self._client.request(
                method,
                endpoint,
                json=body,
                params=params,
                headers=self._headers(requires_auth),
            )
        except httpx.TimeoutException as e:
            raise RemoteError(
                f"Request timed out after {self.timeout}s",
                network=True,
                details={"method": method, "path": endpoint},
            ) from e
        except httpx.TransportError as e:
            raise RemoteError(
                f"Unable to connect to server at {self.base_url}{endpoint}: {e}",
                network=True,
                details={"method": method, "path": endpoint},
            ) from e

        return self._handle_response(method, endpoint, response)

    def _handle_response(self, method: str, endpoint: str, response: httpx.Response) -> Any:
        status = response.status_code
        details = {"method": method, "path": endpoint, "status": status}

        if status == 401:
            if self.token_store is not None:
                self.token_store.clear()
            raise RemoteError(
                _server_message(response) or "Session expired, please sign in again",
                status=status,
                details=details,
            )
        if status == 404:
            logger.warning(f"404 from {method} {endpoint}")
            raise NotFoundError(_server_message(response) or "Route not found", details=details)
        if status >= 400:
            raise RemoteError(
                _server_message(response) or f"Request failed with status {status}",
                status=status,
                details=details,
            )

        if status == 204 or not response.content:
            return None
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise RemoteError("Invalid JSON in response", status=status, details=details) from e

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, body: Any = None) -> Any:
        return await self.request("POST", path, body=body)

    async def delete(self, path: str, body: Any = None) -> Any:
        return await self.request("DELETE", path, body=body)
