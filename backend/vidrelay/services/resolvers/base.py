"""Resolver contract shared by all platforms"""
from abc import ABC, abstractmethod
from typing import Optional

from ...errors import CapabilityNotImplementedError
from ...models.domain import DirectSource, MediaDescriptor, Platform, ValidatedUrl


class BaseResolver(ABC):
    """Turns a validated URL into format metadata or a direct media source.

    Implementations raise a ResolutionError subclass on failure and never let
    library exceptions escape.
    """

    platform: Platform

    # Output containers this platform can deliver
    output_containers = ("mp4", "mp3")
    unsupported_output_message: Optional[str] = None

    def ensure_output_supported(self, output_container: str) -> None:
        """Refuse a download type this platform cannot deliver"""
        if output_container in self.output_containers:
            return
        raise CapabilityNotImplementedError(
            self.unsupported_output_message
            or f"{output_container.upper()} downloads are not available for "
               f"{self.platform.display_name} links."
        )

    @abstractmethod
    async def inspect(self, url: ValidatedUrl) -> MediaDescriptor:
        """Fetch title and selectable formats"""
        raise NotImplementedError

    @abstractmethod
    async def resolve_direct_source(
        self,
        url: ValidatedUrl,
        output_container: str,
        format_id: Optional[str] = None
    ) -> DirectSource:
        """Re-resolve the rendition to stream for a download"""
        raise NotImplementedError
