"""HTTP transport for the forum API.

Thin wrapper around httpx that attaches the bearer token, maps non-2xx
responses to ``TransportError`` and decodes bodies the way the forum backend
sends them (JSON, plain text or empty).
"""

from typing import Any

import httpx
import logfire

from threadsync.adapter.error import TransportError


class HttpTransport:
    """Authenticated request capability used by the forum client."""

    def __init__(
        self,
        base_url: str,
        auth_token: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize transport.

        Args:
            base_url: Forum backend base URL
            auth_token: Bearer token, omitted from requests when None
            timeout: Request timeout in seconds
            transport: httpx transport override (e.g. ``httpx.MockTransport``)
        """
        self.base_url = base_url.rstrip("/")
        self.auth_token = auth_token
        self.timeout = timeout
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.auth_token:
            headers["Authorization"] = f"Bearer {self.auth_token}"
        return headers

    async def call(
        self,
        method: str,
        path: str,
        body: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Perform a request and return the decoded body.

        Args:
            method: HTTP method
            path: Path relative to the base URL
            body: JSON-serializable request body
            params: Query parameters

        Returns:
            Parsed JSON, the raw text if the body is not JSON, or None if empty

        Raises:
            TransportError: On network failure or a non-2xx status
        """
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(
                    method,
                    path,
                    json=body,
                    params=params,
                    headers=self._headers(),
                )
        except httpx.HTTPError as e:
            logfire.error(
                "Forum API HTTP error", method=method, path=path, error=str(e)
            )
            raise TransportError(None, f"HTTP error calling {method} {path}: {e}")

        if not response.is_success:
            error_detail = response.text
            logfire.error(
                "Forum API request failed",
                method=method,
                path=path,
                status_code=response.status_code,
                error=error_detail[:200],
            )
            raise TransportError(response.status_code, error_detail)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            # Some acknowledgements come back as bare text
            return response.text
