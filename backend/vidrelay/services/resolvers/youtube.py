"""Manifest-based resolver for YouTube, backed by yt-dlp"""
import asyncio
import logging
from typing import Callable, Dict, List, Optional

import yt_dlp
from yt_dlp.utils import YoutubeDLError

from ... import config
from ...errors import FormatNoLongerAvailableError, UpstreamUnavailableError
from ...models.domain import (
    DirectSource,
    MediaDescriptor,
    Platform,
    RawFormat,
    ValidatedUrl,
)
from ..format_catalog import build_descriptor, split_formats
from .base import BaseResolver

logger = logging.getLogger(__name__)

STREAMABLE_PROTOCOLS = ("http", "https")


def extract_info(url: str) -> Dict:
    """Fetch the format manifest for a video without downloading it"""
    ydl_opts = {
        'quiet': True,
        'no_warnings': True,
        'extract_flat': False,
        'noplaylist': True,
        'http_headers': config.YOUTUBE_HTTP_HEADERS,
        'retries': 3,
    }
    with yt_dlp.YoutubeDL(ydl_opts) as ydl:
        return ydl.extract_info(url, download=False)


def _has_codec(value: Optional[str]) -> bool:
    return bool(value) and value != 'none'


def _to_raw_format(f: Dict) -> RawFormat:
    has_video = _has_codec(f.get('vcodec'))
    has_audio = _has_codec(f.get('acodec'))

    rate = f.get('tbr') or (f.get('abr') if not has_video else None)
    bitrate = int(round(rate * 1000)) if rate else None

    quality_label = f.get('format_note')
    if not quality_label and has_video and f.get('height'):
        quality_label = f"{f['height']}p"

    return RawFormat(
        id=str(f.get('format_id')),
        container=f.get('ext'),
        has_video=has_video,
        has_audio=has_audio,
        quality_label=quality_label,
        bitrate=bitrate,
        frame_rate=f.get('fps'),
        size_bytes=f.get('filesize') or f.get('filesize_approx'),
        url=f.get('url'),
        http_headers=dict(f.get('http_headers') or {}),
    )


class YouTubeResolver(BaseResolver):
    """Reads the yt-dlp manifest and exposes combined mp4 and audio-only renditions"""

    platform = Platform.YOUTUBE

    def __init__(
        self,
        extractor: Callable[[str], Dict] = extract_info,
        timeout: float = config.RESOLVE_TIMEOUT_SECONDS
    ):
        self.extractor = extractor
        self.timeout = timeout

    async def _fetch_info(self, url: str) -> Dict:
        try:
            info = await asyncio.wait_for(
                asyncio.to_thread(self.extractor, url),
                timeout=self.timeout
            )
        except asyncio.TimeoutError:
            logger.warning("yt-dlp timed out after %ss for %s", self.timeout, url)
            raise UpstreamUnavailableError()
        except YoutubeDLError as e:
            logger.warning("yt-dlp could not extract %s: %s", url, e)
            raise UpstreamUnavailableError()

        if not info or not info.get('formats'):
            logger.warning("No formats returned for %s", url)
            raise UpstreamUnavailableError()
        return info

    @staticmethod
    def _raw_formats(info: Dict) -> List[RawFormat]:
        return [
            _to_raw_format(f)
            for f in info.get('formats', [])
            if f.get('url') and f.get('protocol', 'https') in STREAMABLE_PROTOCOLS
        ]

    async def inspect(self, url: ValidatedUrl) -> MediaDescriptor:
        info = await self._fetch_info(url.raw)
        descriptor = build_descriptor(
            title=info.get('title') or 'video',
            origin_url=url.raw,
            raw_formats=self._raw_formats(info),
            container='mp4',
        )
        if not descriptor.video_formats and not descriptor.audio_formats:
            logger.warning("No streamable mp4 or audio formats for %s", url.raw)
            raise UpstreamUnavailableError()
        return descriptor

    async def resolve_direct_source(
        self,
        url: ValidatedUrl,
        output_container: str,
        format_id: Optional[str] = None
    ) -> DirectSource:
        info = await self._fetch_info(url.raw)
        raw_formats = self._raw_formats(info)
        video, audio = split_formats(raw_formats, container='mp4')

        candidates = audio if output_container == 'mp3' else video
        if not candidates:
            logger.warning("No %s candidates for %s", output_container, url.raw)
            raise UpstreamUnavailableError()

        if format_id:
            chosen = next((e for e in candidates if e.id == str(format_id)), None)
            if chosen is None:
                logger.info("Format %s no longer offered for %s", format_id, url.raw)
                raise FormatNoLongerAvailableError()
        else:
            chosen = candidates[0]

        source_format = next(f for f in raw_formats if f.id == chosen.id)
        return DirectSource(
            title=info.get('title') or 'video',
            url=source_format.url,
            container=source_format.container or 'mp4',
            kind=chosen.kind,
            http_headers=source_format.http_headers,
        )
