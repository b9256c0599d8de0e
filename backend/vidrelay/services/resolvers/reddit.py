"""Scraping resolver for Reddit video posts"""
import logging
from typing import Any, Dict, Optional

import httpx

from ... import config
from ...errors import (
    NoVideoFoundError,
    UpstreamUnavailableError,
)
from ...models.domain import (
    DirectSource,
    FormatKind,
    MediaDescriptor,
    Platform,
    RawFormat,
    ValidatedUrl,
)
from ..format_catalog import build_descriptor
from .base import BaseResolver

logger = logging.getLogger(__name__)

NO_VIDEO_MESSAGE = (
    "Could not find video in this Reddit post. "
    "The post may be deleted, private, or not contain a Reddit-hosted video."
)


def post_json_url(raw_url: str) -> str:
    """https://reddit.com/r/x/comments/id/title/?utm=1 -> .../title.json"""
    base = raw_url.split("?", 1)[0].split("#", 1)[0].rstrip("/")
    return f"{base}.json"


def strip_query(url: str) -> str:
    return url.split("?", 1)[0]


def find_reddit_video(payload: Any) -> Optional[Dict]:
    """Locate the reddit_video block of a post listing, if any"""
    try:
        post = payload[0]["data"]["children"][0]["data"]
    except (KeyError, IndexError, TypeError):
        return None

    candidates = [post]
    candidates.extend(post.get("crosspost_parent_list") or [])
    for candidate in candidates:
        for media_key in ("secure_media", "media"):
            media = candidate.get(media_key) or {}
            video = media.get("reddit_video") if isinstance(media, dict) else None
            if isinstance(video, dict) and video.get("fallback_url"):
                return {"title": post.get("title") or "reddit_video", **video}
    return None


class RedditResolver(BaseResolver):
    """Reads the post's public JSON and returns its fallback MP4 URL"""

    platform = Platform.REDDIT
    output_containers = ("mp4",)
    unsupported_output_message = "MP3 conversion is not available for Reddit videos. Please download as MP4."

    def __init__(
        self,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = config.RESOLVE_TIMEOUT_SECONDS,
        user_agent: str = config.REDDIT_USER_AGENT,
        proxy_media: bool = config.REDDIT_PROXY_MEDIA
    ):
        self.transport = transport
        self.timeout = timeout
        self.user_agent = user_agent
        self.proxy_media = proxy_media

    async def _fetch_video(self, url: ValidatedUrl) -> Dict:
        json_url = post_json_url(url.raw)
        async with httpx.AsyncClient(
            transport=self.transport,
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": self.user_agent},
        ) as client:
            try:
                response = await client.get(json_url)
            except httpx.HTTPError as e:
                logger.warning("Reddit request failed for %s: %s", json_url, e)
                raise UpstreamUnavailableError()

        if response.status_code in (403, 404):
            logger.info("Reddit post not accessible (%s): %s", response.status_code, json_url)
            raise NoVideoFoundError(NO_VIDEO_MESSAGE)
        if response.status_code >= 400:
            logger.warning("Reddit returned %s for %s", response.status_code, json_url)
            raise UpstreamUnavailableError()

        try:
            payload = response.json()
        except ValueError:
            logger.warning("Reddit returned non-JSON body for %s", json_url)
            raise NoVideoFoundError(NO_VIDEO_MESSAGE)

        video = find_reddit_video(payload)
        if video is None:
            raise NoVideoFoundError(NO_VIDEO_MESSAGE)
        return video

    async def inspect(self, url: ValidatedUrl) -> MediaDescriptor:
        video = await self._fetch_video(url)
        source_url = strip_query(video["fallback_url"])
        height = video.get("height")
        bitrate_kbps = video.get("bitrate_kbps")

        raw = RawFormat(
            id="reddit-fallback",
            container="mp4",
            has_video=True,
            has_audio=False,
            quality_label=f"{height}p" if height else None,
            bitrate=int(bitrate_kbps) * 1000 if bitrate_kbps else None,
            direct_source_url=source_url,
        )
        return build_descriptor(
            title=video["title"],
            origin_url=url.raw,
            raw_formats=[raw],
            container="mp4",
            require_audio=False,
        )

    async def resolve_direct_source(
        self,
        url: ValidatedUrl,
        output_container: str,
        format_id: Optional[str] = None
    ) -> DirectSource:
        video = await self._fetch_video(url)
        return DirectSource(
            title=video["title"],
            url=strip_query(video["fallback_url"]),
            container="mp4",
            kind=FormatKind.VIDEO,
            http_headers={"User-Agent": self.user_agent},
            redirect=not self.proxy_media,
        )
