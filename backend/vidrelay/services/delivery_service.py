"""Delivery pipeline: validate, re-resolve, then stream or redirect"""
import asyncio
import logging
from typing import AsyncIterator, Callable, Optional

import httpx

from ..errors import (
    CapabilityNotImplementedError,
    InvalidDownloadTypeError,
    UpstreamUnavailableError,
)
from ..models.domain import Delivery, DirectSource, DownloadRequest
from ..utils.file_utils import safe_filename
from .inspection_service import InspectionService
from .media_source import MediaSource
from .transcoder import Transcoder

logger = logging.getLogger(__name__)

MEDIA_TYPES = {
    "mp4": "video/mp4",
    "mp3": "audio/mpeg",
}


async def _first_chunk(stream: AsyncIterator[bytes]) -> bytes:
    try:
        return await stream.__anext__()
    except StopAsyncIteration:
        return b""
    except httpx.HTTPError as e:
        logger.warning("Upstream stream failed before the first byte: %s", e)
        raise UpstreamUnavailableError()


class DeliveryService:
    """Streams the selected rendition of a link to the client.

    The first output chunk is pulled before the response is built, so any
    failure up to that point becomes a regular JSON error. After that the
    status line is already on the wire and failures abort the connection.
    """

    def __init__(
        self,
        inspection: InspectionService,
        transcoder: Optional[Transcoder] = None,
        source_factory: Callable[[DirectSource], MediaSource] = MediaSource
    ):
        self.inspection = inspection
        self.transcoder = transcoder or Transcoder()
        self.source_factory = source_factory

    async def deliver(self, request: DownloadRequest) -> Delivery:
        validated = self.inspection.validator.validate(request.origin_url)
        resolver = self.inspection.resolver_for(validated)

        container = request.output_container
        if container not in MEDIA_TYPES:
            raise InvalidDownloadTypeError()
        resolver.ensure_output_supported(container)

        source = await resolver.resolve_direct_source(validated, container, request.format_id)

        needs_transcode = source.container != container
        if needs_transcode and container != "mp3":
            raise CapabilityNotImplementedError(
                f"Conversion to {container.upper()} is not available for this "
                f"{validated.platform.display_name} video."
            )

        filename = safe_filename(source.title, container)
        if source.redirect and not needs_transcode:
            logger.info("Redirecting %s to direct source", filename)
            return Delivery(redirect_url=source.url, filename=filename)

        media = self.source_factory(source)
        await media.open()
        stream = media.iter_bytes()
        if needs_transcode:
            logger.info("Converting %s source to %s for %s", source.container, container, filename)
            stream = self.transcoder.transcode(stream, container)

        try:
            first = await _first_chunk(stream)
        except BaseException:
            await stream.aclose()
            await media.aclose()
            raise

        return Delivery(
            body=self._relay(first, stream, media, filename),
            media_type=MEDIA_TYPES[container],
            filename=filename,
        )

    async def _relay(
        self,
        first: bytes,
        stream: AsyncIterator[bytes],
        media: MediaSource,
        filename: str
    ) -> AsyncIterator[bytes]:
        sent = 0
        try:
            if first:
                sent += len(first)
                yield first
            async for chunk in stream:
                sent += len(chunk)
                yield chunk
            logger.info("Completed %s (%d bytes)", filename, sent)
        except asyncio.CancelledError:
            logger.info("Client disconnected from %s after %d bytes", filename, sent)
            raise
        except Exception:
            logger.exception("Stream for %s failed after %d bytes, aborting connection", filename, sent)
            raise
        finally:
            await stream.aclose()
            await media.aclose()
