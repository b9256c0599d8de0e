"""Platform resolvers, one strategy per supported platform"""
from typing import Dict

from ...models.domain import Platform
from .base import BaseResolver
from .reddit import RedditResolver
from .twitter import TwitterResolver
from .youtube import YouTubeResolver


def default_resolvers() -> Dict[Platform, BaseResolver]:
    """Registry used by the application: Platform -> resolver"""
    resolvers = (YouTubeResolver(), RedditResolver(), TwitterResolver())
    return {resolver.platform: resolver for resolver in resolvers}


__all__ = [
    "BaseResolver",
    "RedditResolver",
    "TwitterResolver",
    "YouTubeResolver",
    "default_resolvers"
]
