import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI

from mediathek2rss.api.routes_api import router as api_router
from mediathek2rss.api.routes_feed import router as feed_router
from mediathek2rss.core.cache import FeedCache
from mediathek2rss.core.config import get_settings
from mediathek2rss.core.logging_config import setup_logging
from mediathek2rss.providers import ProviderRegistry, register_provider
from mediathek2rss.providers.ard_provider import ArdFeedProvider
from mediathek2rss.providers.zdf_provider import ZdfFeedProvider
from mediathek2rss.services.feeds import FeedService

load_dotenv()

settings = get_settings()
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI):
    """Application lifespan context manager."""
    app.state.feed_services = {
        provider.name: FeedService(provider, FeedCache(settings.cache_duration))
        for provider in ProviderRegistry.all()
    }
    try:
        yield
    finally:
        # Teardown providers
        for provider in ProviderRegistry.all():
            try:
                await provider.aclose()
            except Exception as e:
                logger.error(f"Error closing provider {provider.name}: {e}")


app = FastAPI(
    title="mediathek2rss",
    description="Podcast feeds for the ARD and ZDF media libraries",
    version="0.1.0",
    debug=settings.debug,
    lifespan=app_lifespan,
)

# Register providers
register_provider(ArdFeedProvider())
register_provider(ZdfFeedProvider())

# Include routers
app.include_router(feed_router)
app.include_router(api_router, prefix="/api")
