"""
ApiClient - async HTTP client for the LinguaSpark backend.

The backend wraps every response in an envelope:

    {"success": true, "message": "...", "data": {...}}
    {"success": false, "message": "...", "error": {"type": ..., "retryAfter": 30}}

Every failure leaving this module is a ``RequestFailedError`` carrying a typed
``Failure``, so classification never has to probe arbitrary exceptions.
"""

import uuid
from typing import Any, Callable

import httpx
from loguru import logger

from linguaspark.services.errors import (
    GenericFailure,
    HttpFailure,
    NetworkFailure,
    RequestFailedError,
)


def _parse_retry_after(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return max(0.0, float(value))
    except (TypeError, ValueError):
        return None


class ApiClient:
    """
    Thin envelope-aware wrapper around ``httpx.AsyncClient``.

    Usage:
        async with ApiClient("http://localhost:5000/api", token=token) as api:
            data = await api.post("/pollinations/text", {"prompt": "hola"})
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
        on_request: Callable[[str], None] | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._timeout = timeout
        self._transport = transport
        self._on_request = on_request

        # HTTP client (lazy initialization)
        self._http_client: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str:
        return self._base_url

    def set_token(self, token: str | None) -> None:
        self._token = token

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=httpx.Timeout(self._timeout),
                transport=self._transport,
                follow_redirects=True,
            )
        return self._http_client

    async def get(self, endpoint: str) -> Any:
        return await self.request("GET", endpoint)

    async def post(self, endpoint: str, json_data: dict[str, Any] | None = None) -> Any:
        return await self.request("POST", endpoint, json_data=json_data)

    async def request(
        self,
        method: str,
        endpoint: str,
        json_data: dict[str, Any] | None = None,
    ) -> Any:
        """
        Send a request and unwrap the response envelope.

        Returns:
            The envelope's ``data`` field

        Raises:
            RequestFailedError: For any transport, HTTP or envelope failure
        """
        client = await self._get_http_client()
        request_id = f"req_{uuid.uuid4().hex[:12]}"
        headers = {"Content-Type": "application/json", "X-Request-ID": request_id}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        if self._on_request is not None:
            self._on_request(endpoint)

        try:
            response = await client.request(
                method=method,
                url=endpoint,
                headers=headers,
                json=json_data,
            )
        except httpx.TimeoutException as e:
            raise RequestFailedError(
                GenericFailure(
                    message=str(e) or f"Request timed out after {self._timeout}s",
                    name=type(e).__name__,
                ),
                endpoint=endpoint,
            ) from e
        except httpx.RequestError as e:
            raise RequestFailedError(
                NetworkFailure(message=str(e) or "network error"),
                endpoint=endpoint,
            ) from e

        body = self._decode(response)

        if response.is_error:
            error_info = body.get("error")
            if not isinstance(error_info, dict):
                error_info = {}
            message = (
                error_info.get("message")
                or body.get("message")
                or response.reason_phrase
                or "An error occurred"
            )
            retry_after = _parse_retry_after(
                error_info.get("retryAfter", error_info.get("retryAfterSeconds"))
            )
            if retry_after is None:
                retry_after = _parse_retry_after(response.headers.get("Retry-After"))

            logger.debug(
                f"{method} {endpoint} failed with HTTP {response.status_code} "
                f"[{request_id}]: {message}"
            )
            raise RequestFailedError(
                HttpFailure(
                    status=response.status_code,
                    message=message,
                    retry_after=retry_after,
                ),
                endpoint=endpoint,
            )

        if not body.get("success") or body.get("data") is None:
            raise RequestFailedError(
                GenericFailure(message=body.get("message") or "Empty response"),
                endpoint=endpoint,
            )

        return body["data"]

    @staticmethod
    def _decode(response: httpx.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            return {"message": response.text[:200]}
        return body if isinstance(body, dict) else {"data": body, "success": True}

    async def close(self) -> None:
        """Close the HTTP client and cleanup resources."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None
        logger.debug("ApiClient closed")

    async def __aenter__(self) -> "ApiClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
