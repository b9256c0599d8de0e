"""Internal data model for inspection and delivery"""
from dataclasses import dataclass, field
from enum import Enum
from typing import AsyncIterator, Dict, Optional, Tuple


class Platform(Enum):
    YOUTUBE = "youtube"
    REDDIT = "reddit"
    TWITTER_X = "twitter"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    Platform.YOUTUBE: "YouTube",
    Platform.REDDIT: "Reddit",
    Platform.TWITTER_X: "X (Twitter)",
}


class FormatKind(str, Enum):
    VIDEO = "video"
    AUDIO = "audio"


@dataclass(frozen=True)
class ValidatedUrl:
    """A URL accepted by the host validator for exactly one platform"""
    raw: str
    platform: Platform
    host: str
    path: str


@dataclass(frozen=True)
class RawFormat:
    """A rendition as reported by an upstream, before cataloguing"""
    id: str
    container: Optional[str]
    has_video: bool
    has_audio: bool
    quality_label: Optional[str] = None
    bitrate: Optional[int] = None
    frame_rate: Optional[float] = None
    size_bytes: Optional[int] = None
    url: Optional[str] = None
    http_headers: Dict[str, str] = field(default_factory=dict)
    direct_source_url: Optional[str] = None


@dataclass(frozen=True)
class FormatEntry:
    id: str
    kind: FormatKind
    quality_label: Optional[str] = None
    bitrate: Optional[int] = None
    frame_rate: Optional[float] = None
    approximate_size_bytes: Optional[int] = None
    direct_source_url: Optional[str] = None


@dataclass(frozen=True)
class MediaDescriptor:
    title: str
    origin_url: str
    video_formats: Tuple[FormatEntry, ...] = ()
    audio_formats: Tuple[FormatEntry, ...] = ()


@dataclass(frozen=True)
class DownloadRequest:
    origin_url: str
    output_container: str = "mp4"
    format_id: Optional[str] = None


@dataclass(frozen=True)
class DirectSource:
    """Where the bytes of one rendition can be fetched from.

    ``redirect`` sources are handed to the client as an HTTP redirect when
    no transcoding is needed; all others are proxied through the server.
    """
    title: str
    url: str
    container: str
    kind: FormatKind
    http_headers: Dict[str, str] = field(default_factory=dict)
    redirect: bool = False


@dataclass
class Delivery:
    """Outcome of the delivery pipeline, ready to be turned into a response"""
    redirect_url: Optional[str] = None
    body: Optional[AsyncIterator[bytes]] = None
    media_type: Optional[str] = None
    filename: Optional[str] = None

    @property
    def is_redirect(self) -> bool:
        return self.redirect_url is not None
