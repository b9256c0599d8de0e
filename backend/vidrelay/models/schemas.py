"""Pydantic models for request/response validation"""
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional

from .domain import FormatEntry, FormatKind, MediaDescriptor


class VideoURL(BaseModel):
    url: Optional[str] = None


class FormatEntryOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    itag: str
    kind: str
    quality_label: Optional[str] = Field(None, alias="qualityLabel")
    audio_quality: Optional[str] = Field(None, alias="audioQuality")
    bitrate: Optional[int] = None
    fps: Optional[float] = None
    size_approx: Optional[int] = Field(None, alias="sizeApprox")
    direct_source_url: Optional[str] = Field(None, alias="directSourceUrl")

    @classmethod
    def from_entry(cls, entry: FormatEntry) -> "FormatEntryOut":
        return cls(
            id=entry.id,
            itag=entry.id,
            kind=entry.kind.value,
            quality_label=entry.quality_label,
            audio_quality=entry.quality_label if entry.kind is FormatKind.AUDIO else None,
            bitrate=entry.bitrate,
            fps=entry.frame_rate,
            size_approx=entry.approximate_size_bytes,
            direct_source_url=entry.direct_source_url,
        )


class InspectResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    url: str
    video_formats: List[FormatEntryOut] = Field(default_factory=list, alias="videoFormats")
    audio_formats: List[FormatEntryOut] = Field(default_factory=list, alias="audioFormats")

    @classmethod
    def from_descriptor(cls, descriptor: MediaDescriptor) -> "InspectResponse":
        return cls(
            title=descriptor.title,
            url=descriptor.origin_url,
            video_formats=[FormatEntryOut.from_entry(f) for f in descriptor.video_formats],
            audio_formats=[FormatEntryOut.from_entry(f) for f in descriptor.audio_formats],
        )


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str = "ok"
