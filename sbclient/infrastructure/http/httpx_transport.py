"""Concrete implementation of the HttpTransport interface using httpx.

Builds the query string with the same bracketed serializer used for cache
keys and reports how many redirects were followed, so the orchestrator can
read the 'redirected once' signal without touching connection internals.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from sbclient.domain.interfaces.http_transport import HttpTransport
from sbclient.domain.models.common import RequestPath, TransportResponse
from sbclient.domain.errors import RateLimitedError, TransportError
from sbclient.utils.query import encode_params

logger = logging.getLogger(__name__)


class HttpxTransport(HttpTransport):
    """httpx.AsyncClient based transport."""

    def __init__(
        self,
        base_url: str,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
        proxy: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initializes the transport.

        Args:
            base_url: API root, e.g. 'https://api.storyblok.com/v2'.
            headers: Headers sent with every request.
            timeout: Seconds before giving up; None or 0 waits forever.
            proxy: Optional proxy URL.
            transport: Optional httpx transport (e.g. httpx.MockTransport in tests).
        """
        client_kwargs: Dict[str, Any] = {
            "base_url": base_url,
            "headers": headers or {},
            "timeout": timeout or None,
            "follow_redirects": True,
        }
        if proxy:
            client_kwargs["proxy"] = proxy
        if transport is not None:
            client_kwargs["transport"] = transport
        self.client = httpx.AsyncClient(**client_kwargs)
        logger.info(f"HttpxTransport initialized for {base_url}")

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    async def request(
        self,
        method: str,
        path: RequestPath,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
    ) -> TransportResponse:
        url = path
        query = encode_params(params)
        if query:
            url = f"{path}?{query}"

        logger.debug(f"{method.upper()} {url}")
        try:
            response = await self.client.request(method.upper(), url, json=json)
        except httpx.HTTPError as e:
            logger.error(f"Network error on {method.upper()} {path}: {e}")
            raise TransportError(f"Network error: {e}") from e

        body = self._parse_body(response)
        headers = dict(response.headers)

        if response.status_code == 429:
            logger.warning(f"Rate limited on {method.upper()} {path}")
            raise RateLimitedError(body=body, headers=headers)
        if not response.is_success:
            logger.warning(f"{method.upper()} {path} failed with status {response.status_code}")
            raise TransportError(
                f"Request failed with status code {response.status_code}",
                status_code=response.status_code,
                body=body,
                headers=headers,
            )

        return TransportResponse(
            status=response.status_code,
            headers=headers,
            body=body,
            redirect_count=len(response.history),
        )

    async def aclose(self) -> None:
        await self.client.aclose()
