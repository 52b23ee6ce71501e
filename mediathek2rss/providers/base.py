"""Provider base classes and interfaces."""

from abc import ABC, abstractmethod

from mediathek2rss.core.config import Settings, get_settings
from mediathek2rss.core.http import HttpClient
from mediathek2rss.models.parameters import RequestParameters


class FeedProvider(ABC):
    """Abstract base class for feed providers.

    A provider turns a show identifier of one media library into a finished
    RSS document. Providers own an HTTP client; pass one in to share or
    replace it (tests hand in a fixture-backed client).
    """

    def __init__(self, http=None, settings: Settings | None = None):
        self._settings = settings or get_settings()
        self._owns_http = http is None
        self.http = http if http is not None else HttpClient(self._settings)

    async def aclose(self) -> None:
        """Close the HTTP client if this provider created it."""
        if self._owns_http and self.http:
            await self.http.aclose()

    @property
    def max_episodes(self) -> int:
        return self._settings.max_episodes

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the unique name of this provider."""
        pass

    @abstractmethod
    async def build(self, show_identifier: str, parameters: RequestParameters) -> str:
        """Build the RSS document of a show.

        Args:
            show_identifier: Provider specific show id or path.
            parameters: Target media width and minimum episode duration.

        Returns:
            The serialized feed.

        Raises:
            FeedError: If any upstream call fails or returns unusable data.
        """
        pass
