"""
infrastructure.http.client - requests-based implementation of ApiClient.

Builds requests against the GreenHero backend origin (or an absolute URL for
the external AI service), injects the bearer token when one is given, and
decodes JSON whatever the status code: the backend reports error details in
JSON bodies, so callers decide success from the status, not from an
exception.

requests is blocking; each call runs in the default thread pool via
run_in_executor so services can await it.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from typing import Any, Mapping, Optional, Sequence

import requests

from greenhero.domain.exceptions import RequestTimeoutError, TransportError
from greenhero.domain.models import ApiResponse
from greenhero.domain.ports import FilePart

logger = logging.getLogger(__name__)

_TUNNEL_HEADER = "ngrok-skip-browser-warning"


class RequestsApiClient:
    """Issue HTTP requests and return ApiResponse objects.

    Implements ApiClient (structural typing, no explicit inheritance).

    Raises TransportError only when no response arrived (connection refused,
    DNS failure, timeout). Any response, including 4xx/5xx, is returned.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        skip_tunnel_warning: bool = True,
        session: Optional[requests.Session] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()
        self._default_headers = {"Accept": "application/json"}
        if skip_tunnel_warning:
            self._default_headers[_TUNNEL_HEADER] = "true"

    @property
    def base_url(self) -> str:
        return self._base_url

    def url_for(self, path: str) -> str:
        """Resolve ``path`` against the backend origin; absolute URLs pass through."""
        if path.startswith(("http://", "https://")):
            return path
        return f"{self._base_url}/{path.lstrip('/')}"

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Any] = None,
        token: Optional[str] = None,
        data: Optional[Mapping[str, str]] = None,
        files: Optional[Sequence[FilePart]] = None,
    ) -> ApiResponse:
        """Send one request and return the decoded response.

        Args:
            method: HTTP verb.
            path:   Path relative to the backend origin, or an absolute URL.
            json:   Body to serialize as JSON (sets Content-Type).
            token:  Bearer token; adds an Authorization header when given.
            data:   Multipart form fields (used together with ``files``).
            files:  Multipart file parts.

        Raises:
            RequestTimeoutError: The server did not answer in time.
            TransportError:      No response was received.
        """
        loop = asyncio.get_running_loop()
        call = functools.partial(
            self._send, method.upper(), self.url_for(path),
            json=json, token=token, data=data, files=files,
        )
        return await loop.run_in_executor(None, call)

    def close(self) -> None:
        self._session.close()

    def _send(
        self,
        method: str,
        url: str,
        *,
        json: Optional[Any],
        token: Optional[str],
        data: Optional[Mapping[str, str]],
        files: Optional[Sequence[FilePart]],
    ) -> ApiResponse:
        """Synchronous HTTP call (runs in thread pool)."""
        headers = dict(self._default_headers)
        if token:
            headers["Authorization"] = f"Bearer {token}"

        logger.info("%s %s", method, url)
        try:
            response = self._session.request(
                method,
                url,
                headers=headers,
                json=json,
                data=dict(data) if data is not None else None,
                files=list(files) if files is not None else None,
                timeout=self._timeout,
            )
        except requests.exceptions.Timeout as e:
            raise RequestTimeoutError(
                f"Server did not respond within {self._timeout:g}s",
                url=url, cause=e,
            ) from e
        except requests.exceptions.RequestException as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise TransportError(url=url, cause=e) from e

        logger.info("%s %s -> %d", method, url, response.status_code)
        return ApiResponse(
            status=response.status_code,
            body=_decode(response, url),
            text=response.text,
        )


def _decode(response: requests.Response, url: str) -> Any:
    if not response.content:
        return {}
    try:
        return response.json()
    except ValueError:
        logger.warning(
            "Non-JSON body from %s (HTTP %d): %s",
            url, response.status_code, response.text[:200],
        )
        return {}
