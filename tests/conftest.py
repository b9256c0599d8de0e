"""Shared pytest fixtures for vidrelay tests."""

from typing import AsyncIterator, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from vidrelay.main import create_app
from vidrelay.models.domain import DirectSource, Platform
from vidrelay.services.delivery_service import DeliveryService
from vidrelay.services.host_validator import HostValidator
from vidrelay.services.inspection_service import InspectionService
from vidrelay.services.resolvers import RedditResolver, TwitterResolver, YouTubeResolver

YOUTUBE_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
REDDIT_URL = "https://reddit.com/r/videos/comments/abc/title/"
TWITTER_URL = "https://x.com/user/status/123"


def youtube_format(format_id, ext, vcodec, acodec, tbr=None, abr=None, **extra) -> Dict:
    fmt = {
        "format_id": format_id,
        "ext": ext,
        "vcodec": vcodec,
        "acodec": acodec,
        "tbr": tbr,
        "abr": abr,
        "protocol": "https",
        "url": f"https://rr1.googlevideo.test/videoplayback?itag={format_id}",
        "http_headers": {"User-Agent": "test-agent"},
    }
    fmt.update(extra)
    return fmt


@pytest.fixture
def youtube_info() -> Dict:
    """One combined mp4 and one audio-only rendition, plus noise that is filtered out."""
    return {
        "title": "Never Gonna Give You Up!",
        "formats": [
            youtube_format("140", "m4a", "none", "mp4a.40.2", abr=129.5, format_note="medium"),
            youtube_format("137", "mp4", "avc1.640028", "none", tbr=4400.0, height=1080),
            youtube_format("18", "mp4", "avc1.42001E", "mp4a.40.2", tbr=503.2, height=360,
                           fps=25, format_note="360p", filesize=12345678),
            youtube_format("43", "webm", "vp8", "vorbis", tbr=600.0, height=360),
            youtube_format("95", "mp4", "avc1", "mp4a", tbr=900.0, protocol="m3u8_native"),
        ],
    }


class StubExtractor:
    """Stands in for yt-dlp; returns a fixed manifest and counts calls."""

    def __init__(self, info: Optional[Dict] = None, error: Optional[Exception] = None):
        self.info = info
        self.error = error
        self.calls: List[str] = []

    def __call__(self, url: str) -> Dict:
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return self.info


@pytest.fixture
def youtube_extractor(youtube_info) -> StubExtractor:
    return StubExtractor(youtube_info)


def reddit_payload(reddit_video: Optional[Dict] = None, title: str = "Cat does a flip") -> List[Dict]:
    post = {"title": title, "secure_media": None, "media": None}
    if reddit_video is not None:
        post["secure_media"] = {"reddit_video": reddit_video}
    return [
        {"kind": "Listing", "data": {"children": [{"kind": "t3", "data": post}]}},
        {"kind": "Listing", "data": {"children": []}},
    ]


REDDIT_VIDEO = {
    "fallback_url": "https://v.redd.it/xyz/DASH_720.mp4?source=fallback",
    "height": 720,
    "bitrate_kbps": 2400,
}


class FakeMediaSource:
    """In-memory replacement for MediaSource."""

    instances: List["FakeMediaSource"] = []

    def __init__(self, source: DirectSource, chunks=(b"chunk-1", b"chunk-2"), fail_after: Optional[int] = None):
        self.source = source
        self.chunks = list(chunks)
        self.fail_after = fail_after
        self.opened = False
        self.closed = False
        FakeMediaSource.instances.append(self)

    async def open(self):
        self.opened = True
        return self

    async def iter_bytes(self) -> AsyncIterator[bytes]:
        try:
            for index, chunk in enumerate(self.chunks):
                if self.fail_after is not None and index >= self.fail_after:
                    raise ConnectionError("upstream reset")
                yield chunk
        finally:
            await self.aclose()

    async def aclose(self):
        self.closed = True


class FakeTranscoder:
    """Marks every chunk instead of running ffmpeg."""

    def __init__(self):
        self.calls: List[str] = []

    async def transcode(self, source: AsyncIterator[bytes], target_codec: str = "mp3") -> AsyncIterator[bytes]:
        self.calls.append(target_codec)
        async for chunk in source:
            yield b"mp3:" + chunk


@pytest.fixture(autouse=True)
def reset_fake_sources():
    FakeMediaSource.instances.clear()
    yield
    FakeMediaSource.instances.clear()


@pytest.fixture
def fake_transcoder() -> FakeTranscoder:
    return FakeTranscoder()


@pytest.fixture
def resolvers(youtube_extractor) -> Dict:
    return {
        Platform.YOUTUBE: YouTubeResolver(extractor=youtube_extractor, timeout=5),
        Platform.REDDIT: RedditResolver(),
        Platform.TWITTER_X: TwitterResolver(),
    }


@pytest.fixture
def inspection_service(resolvers) -> InspectionService:
    return InspectionService(HostValidator(), resolvers)


@pytest.fixture
def delivery_service(inspection_service, fake_transcoder) -> DeliveryService:
    return DeliveryService(inspection_service, fake_transcoder, source_factory=FakeMediaSource)


@pytest.fixture
def app(resolvers, fake_transcoder):
    app = create_app(validator=HostValidator(), resolvers=resolvers, transcoder=fake_transcoder)
    app.state.delivery_service.source_factory = FakeMediaSource
    return app


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app, follow_redirects=False)
