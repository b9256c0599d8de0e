"""X (Twitter) links are recognised but cannot be downloaded yet"""
from typing import Optional

from ...errors import CapabilityNotImplementedError
from ...models.domain import DirectSource, MediaDescriptor, Platform, RawFormat, ValidatedUrl
from ..format_catalog import build_descriptor
from .base import BaseResolver

PLACEHOLDER_FORMAT_ID = "unsupported"

NOT_IMPLEMENTED_MESSAGE = (
    "Downloading from X (Twitter) requires additional setup that this service "
    "does not provide. Please use a dedicated X/Twitter downloader for this link."
)


class TwitterResolver(BaseResolver):
    platform = Platform.TWITTER_X
    output_containers = ()
    unsupported_output_message = NOT_IMPLEMENTED_MESSAGE

    async def inspect(self, url: ValidatedUrl) -> MediaDescriptor:
        placeholder = RawFormat(
            id=PLACEHOLDER_FORMAT_ID,
            container="mp4",
            has_video=True,
            has_audio=True,
            quality_label="Requires additional setup",
        )
        return build_descriptor(
            title="X (Twitter) video",
            origin_url=url.raw,
            raw_formats=[placeholder],
        )

    async def resolve_direct_source(
        self,
        url: ValidatedUrl,
        output_container: str,
        format_id: Optional[str] = None
    ) -> DirectSource:
        raise CapabilityNotImplementedError(NOT_IMPLEMENTED_MESSAGE)
