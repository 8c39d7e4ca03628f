"""FastAPI dependencies for the objects built in the application lifespan"""

from fastapi import Request
from landify_api.agents.orchestrator import ContentPipeline
from landify_api.core.google_fetcher import PlacesGateway
from landify_api.core.page_store import PageStore
from landify_api.core.rate_limit import RateLimiter


def get_pipeline(request: Request) -> ContentPipeline:
    return request.app.state.pipeline


def get_places(request: Request) -> PlacesGateway:
    return request.app.state.places


def get_page_store(request: Request) -> PageStore:
    return request.app.state.page_store


def get_sessions(request: Request) -> dict:
    """In-memory build sessions keyed by session id"""
    return request.app.state.sessions


async def enforce_rate_limit(request: Request):
    """Count the request against the client's window; raises RATE_LIMITED (429)"""
    limiter: RateLimiter = request.app.state.rate_limiter
    limiter.hit(request.client.host if request.client else "unknown")
