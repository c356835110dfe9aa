"""Pooled async HTTP executor shared by every provider adapter"""

import logging

import httpx

from sgpt.util.logsafe import redact_headers, redact_url

logger = logging.getLogger(__name__)


class TransportClient:
    """Thin wrapper around one httpx.AsyncClient.

    Issues one request at a time and hands the raw response back to the caller.
    There is no retry: a failed attempt is final. Cancelling the awaiting task
    aborts the in-flight request.
    """

    TIMEOUT = 10.0
    LIMITS = httpx.Limits(
        max_connections=100,
        max_keepalive_connections=20,
        keepalive_expiry=90.0,
    )

    def __init__(
        self,
        timeout: float = TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout = timeout
        self._client = httpx.AsyncClient(
            timeout=timeout,
            limits=self.LIMITS,
            transport=transport,
        )

    def build_request(
        self,
        method: str,
        url: str,
        *,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
        stream: bool = False,
    ) -> httpx.Request:
        """Build a request; streaming requests get no read timeout"""
        timeout = httpx.Timeout(self.timeout, read=None) if stream else self.timeout
        return self._client.build_request(
            method,
            url,
            content=content,
            headers=headers,
            params=params,
            timeout=timeout,
        )

    async def send(self, request: httpx.Request, stream: bool = False) -> httpx.Response:
        """Send a request. With stream=True the body is left unread"""
        logger.debug(f"Sending HTTP request: {request.method} {redact_url(str(request.url))}")
        logger.debug(f"Request headers: {redact_headers(dict(request.headers))}")
        try:
            response = await self._client.send(request, stream=stream)
        except httpx.HTTPError as e:
            logger.error(f"HTTP request failed: {e}")
            raise
        logger.debug(
            f"Received HTTP response: {response.status_code} "
            f"content_type={response.headers.get('content-type', '')}"
        )
        return response

    async def read_all(self, response: httpx.Response) -> bytes:
        """Read the whole body and close the response"""
        try:
            return await response.aread()
        except httpx.HTTPError as e:
            logger.error(f"Failed to read response body: {e}")
            raise
        finally:
            await response.aclose()

    async def aclose(self):
        await self._client.aclose()

    async def __aenter__(self) -> "TransportClient":
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()
