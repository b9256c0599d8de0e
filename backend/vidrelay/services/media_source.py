"""Upstream byte stream for a resolved direct source"""
import logging
from typing import AsyncIterator, Optional

import httpx

from .. import config
from ..errors import UpstreamUnavailableError
from ..models.domain import DirectSource

logger = logging.getLogger(__name__)


class MediaSource:
    """Owns one HTTP client and one streaming response for a single request.

    ``open()`` checks the upstream status before any byte is handed out, so a
    dead link still surfaces as a normal error response.
    """

    def __init__(
        self,
        source: DirectSource,
        chunk_size: int = config.STREAM_CHUNK_SIZE,
        timeout: float = config.RESOLVE_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.source = source
        self.chunk_size = chunk_size
        # Connect/read timeouts only; a long download must not be cut off
        self._client = httpx.AsyncClient(
            transport=transport,
            timeout=httpx.Timeout(timeout, pool=None),
            follow_redirects=True,
            headers=source.http_headers,
        )
        self._response: Optional[httpx.Response] = None
        self.closed = False

    async def open(self) -> "MediaSource":
        request = self._client.build_request("GET", self.source.url)
        try:
            self._response = await self._client.send(request, stream=True)
        except httpx.HTTPError as e:
            await self.aclose()
            logger.warning("Could not open upstream media stream: %s", e)
            raise UpstreamUnavailableError()

        if self._response.status_code >= 400:
            status = self._response.status_code
            await self.aclose()
            logger.warning("Upstream media returned HTTP %s", status)
            raise UpstreamUnavailableError()
        return self

    async def iter_bytes(self) -> AsyncIterator[bytes]:
        if self._response is None:
            raise RuntimeError("MediaSource.open() must be awaited first")
        try:
            async for chunk in self._response.aiter_bytes(self.chunk_size):
                yield chunk
        finally:
            await self.aclose()

    async def aclose(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self._response is not None:
            await self._response.aclose()
        await self._client.aclose()
