"""Feed providers known to the application."""

from typing import Dict, List

from mediathek2rss.providers.base import FeedProvider


class ProviderRegistry:
    """Feed providers by name, in registration order."""

    _providers: Dict[str, FeedProvider] = {}

    @classmethod
    def register(cls, provider: FeedProvider) -> None:
        cls._providers[provider.name] = provider

    @classmethod
    def all(cls) -> List[FeedProvider]:
        return list(cls._providers.values())

    @classmethod
    def names(cls) -> List[str]:
        return list(cls._providers)


def register_provider(provider: FeedProvider) -> None:
    """Make provider available to the lifespan and the /api/providers route."""
    ProviderRegistry.register(provider)
