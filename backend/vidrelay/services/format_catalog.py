"""Builds the video/audio format buckets shown to the user"""
from typing import Iterable, List, Tuple

from ..models.domain import FormatEntry, FormatKind, MediaDescriptor, RawFormat


def _classify(raw: RawFormat, container: str, require_audio: bool):
    if raw.has_video:
        if raw.container != container:
            return None
        if require_audio and not raw.has_audio:
            return None
        return FormatKind.VIDEO
    if raw.has_audio:
        return FormatKind.AUDIO
    return None


def _to_entry(raw: RawFormat, kind: FormatKind) -> FormatEntry:
    return FormatEntry(
        id=raw.id,
        kind=kind,
        quality_label=raw.quality_label,
        bitrate=raw.bitrate,
        frame_rate=raw.frame_rate if kind is FormatKind.VIDEO else None,
        approximate_size_bytes=raw.size_bytes,
        direct_source_url=raw.direct_source_url,
    )


def sort_by_bitrate(entries: Iterable[FormatEntry]) -> List[FormatEntry]:
    """Highest bitrate first; entries without a bitrate keep their order at the end"""
    return sorted(
        entries,
        key=lambda e: (e.bitrate is None, -(e.bitrate or 0))
    )


def dedupe(entries: Iterable[FormatEntry]) -> List[FormatEntry]:
    seen = set()
    unique = []
    for entry in entries:
        key = (entry.kind, entry.quality_label, entry.bitrate)
        if key in seen:
            continue
        seen.add(key)
        unique.append(entry)
    return unique


def split_formats(
    raw_formats: Iterable[RawFormat],
    container: str = "mp4",
    require_audio: bool = True
) -> Tuple[List[FormatEntry], List[FormatEntry]]:
    """Return (video, audio) buckets, deduplicated and sorted"""
    video, audio = [], []
    for raw in raw_formats:
        kind = _classify(raw, container, require_audio)
        if kind is FormatKind.VIDEO:
            video.append(_to_entry(raw, kind))
        elif kind is FormatKind.AUDIO:
            audio.append(_to_entry(raw, kind))
    return sort_by_bitrate(dedupe(video)), sort_by_bitrate(dedupe(audio))


def build_descriptor(
    title: str,
    origin_url: str,
    raw_formats: Iterable[RawFormat],
    container: str = "mp4",
    require_audio: bool = True
) -> MediaDescriptor:
    """Turn resolver output into a MediaDescriptor.

    Args:
        title: Media title as reported upstream
        origin_url: The URL the user submitted
        raw_formats: Renditions in upstream manifest order
        container: Container the video bucket is delivered in
        require_audio: Only accept combined audio+video renditions as video
    """
    video, audio = split_formats(raw_formats, container, require_audio)
    return MediaDescriptor(
        title=title,
        origin_url=origin_url,
        video_formats=tuple(video),
        audio_formats=tuple(audio),
    )
