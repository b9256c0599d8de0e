"""Host validation for incoming media links"""
import re
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Tuple
from urllib.parse import SplitResult, parse_qs, urlsplit

from ..errors import InvalidFormatError, InvalidPlatformPathError, UnsupportedHostError
from ..models.domain import Platform, ValidatedUrl

_YOUTUBE_ID = re.compile(r"^[\w-]{11}$")
_YOUTUBE_PATH = re.compile(r"^/(?:shorts|embed|live|v)/([\w-]{11})/?$")
_REDDIT_PATH = re.compile(r"^(?:/(?:r|u|user)/[\w-]+)?/comments/[a-z0-9]+(?:/.*)?$", re.IGNORECASE)
_TWITTER_PATH = re.compile(r"^/\w{1,15}/status(?:es)?/\d+(?:/.*)?$")


def _youtube_path_ok(parts: SplitResult, host: str) -> bool:
    path = parts.path
    if host == "youtu.be" or host.endswith(".youtu.be"):
        return bool(_YOUTUBE_ID.match(path.strip("/")))
    if path.rstrip("/") == "/watch":
        video_ids = parse_qs(parts.query).get("v", [])
        return bool(video_ids) and bool(_YOUTUBE_ID.match(video_ids[0]))
    return bool(_YOUTUBE_PATH.match(path))


def _reddit_path_ok(parts: SplitResult, host: str) -> bool:
    return bool(_REDDIT_PATH.match(parts.path))


def _twitter_path_ok(parts: SplitResult, host: str) -> bool:
    return bool(_TWITTER_PATH.match(parts.path))


@dataclass(frozen=True)
class PlatformRule:
    """Allow-listed hosts of one platform plus its expected path shape"""
    platform: Platform
    hosts: Tuple[str, ...]
    path_check: Callable[[SplitResult, str], bool]
    path_error: str

    def matches_host(self, host: str) -> bool:
        return any(host == allowed or host.endswith("." + allowed) for allowed in self.hosts)


DEFAULT_RULES = (
    PlatformRule(
        platform=Platform.YOUTUBE,
        hosts=("youtube.com", "youtu.be"),
        path_check=_youtube_path_ok,
        path_error="Invalid YouTube URL.",
    ),
    PlatformRule(
        platform=Platform.REDDIT,
        hosts=("reddit.com",),
        path_check=_reddit_path_ok,
        path_error="Invalid Reddit URL. Please paste a link to a Reddit post.",
    ),
    PlatformRule(
        platform=Platform.TWITTER_X,
        hosts=("x.com", "twitter.com"),
        path_check=_twitter_path_ok,
        path_error="Invalid X (Twitter) URL. Please paste a link to a post (.../status/...).",
    ),
)


def build_rules(enabled: Iterable[str], supported: Optional[Iterable[Platform]] = None) -> Tuple[PlatformRule, ...]:
    """Select the allow-list entries for the enabled platform names.

    Platforms without a resolver (``supported``) are left out so they are
    rejected at validation time rather than mid-pipeline.
    """
    enabled = {name.lower() for name in enabled}
    supported = set(supported) if supported is not None else set(Platform)
    return tuple(
        rule for rule in DEFAULT_RULES
        if rule.platform.value in enabled and rule.platform in supported
    )


class HostValidator:
    """Classifies raw URLs by platform. Pure, no network I/O."""

    def __init__(self, rules: Iterable[PlatformRule] = DEFAULT_RULES):
        self.rules = tuple(rules)

    @property
    def allowed_hosts(self) -> Tuple[str, ...]:
        return tuple(host for rule in self.rules for host in rule.hosts)

    def validate(self, raw_url: str) -> ValidatedUrl:
        """Return a ValidatedUrl or raise the matching ValidationError"""
        candidate = (raw_url or "").strip()
        try:
            parts = urlsplit(candidate)
            host = (parts.hostname or "").lower().rstrip(".")
        except ValueError:
            raise InvalidFormatError()
        if parts.scheme not in ("http", "https") or not host:
            raise InvalidFormatError()

        for rule in self.rules:
            if rule.matches_host(host):
                if not rule.path_check(parts, host):
                    raise InvalidPlatformPathError(rule.path_error)
                return ValidatedUrl(
                    raw=candidate,
                    platform=rule.platform,
                    host=host,
                    path=parts.path,
                )

        raise UnsupportedHostError(self._unsupported_message())

    def _unsupported_message(self) -> str:
        names = ", ".join(rule.platform.display_name for rule in self.rules)
        if not names:
            return "No platforms are currently enabled."
        return f"Unsupported link. Supported platforms: {names}."
