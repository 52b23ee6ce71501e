"""API routes returning JSON for monitoring or external tools."""

from fastapi import APIRouter

from mediathek2rss.providers import ProviderRegistry

router = APIRouter()


@router.get("/providers")
async def list_providers():
    """List all registered providers."""
    return {"providers": ProviderRegistry.names()}


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "service": "mediathek2rss"}
