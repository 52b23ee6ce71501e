"""Cached feed generation."""

import logging

from mediathek2rss.core.cache import FeedCache
from mediathek2rss.models.parameters import RequestParameters
from mediathek2rss.providers.base import FeedProvider

logger = logging.getLogger(__name__)


def cache_key(show_identifier: str, parameters: RequestParameters) -> str:
    """Key of a feed in the cache: '<show>#<parameters>'."""
    return f"{show_identifier}#{parameters}"


class FeedService:
    """Serves feeds of one provider, building them only on cache misses.

    Failed builds are neither cached nor retried; the error reaches the
    caller unchanged.
    """

    def __init__(self, provider: FeedProvider, cache: FeedCache):
        self.provider = provider
        self.cache = cache

    async def serve(self, show_identifier: str, parameters: RequestParameters) -> str:
        key = cache_key(show_identifier, parameters)
        content = self.cache.get(key)
        if content is not None:
            logger.info(f"Serving {self.provider.name} feed {key} from cache")
            return content

        logger.info(f"Building {self.provider.name} feed {key}")
        content = await self.provider.build(show_identifier, parameters)
        self.cache.put(key, content)
        return content
