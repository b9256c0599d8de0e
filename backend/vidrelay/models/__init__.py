"""Models package"""
from .domain import (
    Platform,
    FormatKind,
    ValidatedUrl,
    RawFormat,
    FormatEntry,
    MediaDescriptor,
    DownloadRequest,
    DirectSource,
    Delivery
)
from .schemas import (
    VideoURL,
    FormatEntryOut,
    InspectResponse,
    ErrorResponse,
    HealthResponse
)

__all__ = [
    "Platform",
    "FormatKind",
    "ValidatedUrl",
    "RawFormat",
    "FormatEntry",
    "MediaDescriptor",
    "DownloadRequest",
    "DirectSource",
    "Delivery",
    "VideoURL",
    "FormatEntryOut",
    "InspectResponse",
    "ErrorResponse",
    "HealthResponse"
]
