"""Service for inspecting links: validate, resolve, catalogue"""
import logging
from typing import Dict

from ..errors import UnsupportedHostError
from ..models.domain import MediaDescriptor, Platform, ValidatedUrl
from .host_validator import HostValidator
from .resolvers.base import BaseResolver

logger = logging.getLogger(__name__)


class InspectionService:
    """Turns a raw URL into a MediaDescriptor"""

    def __init__(self, validator: HostValidator, resolvers: Dict[Platform, BaseResolver]):
        self.validator = validator
        self.resolvers = resolvers

    def resolver_for(self, url: ValidatedUrl) -> BaseResolver:
        resolver = self.resolvers.get(url.platform)
        if resolver is None:
            # Only reachable when the allow-list and the registry disagree
            raise UnsupportedHostError()
        return resolver

    async def inspect(self, raw_url: str) -> MediaDescriptor:
        validated = self.validator.validate(raw_url)
        resolver = self.resolver_for(validated)
        logger.info("Inspecting %s link: %s", validated.platform.display_name, validated.raw)
        descriptor = await resolver.inspect(validated)
        logger.info(
            "Found %d video and %d audio formats for %r",
            len(descriptor.video_formats),
            len(descriptor.audio_formats),
            descriptor.title,
        )
        return descriptor
