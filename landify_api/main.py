"""FastAPI application entry point"""

import sys
import asyncio
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from landify_api.agents.client import OpenAIGateway
from landify_api.agents.orchestrator import ContentPipeline
from landify_api.api import build, generate, pages, places, progress
from landify_api.core.config import settings
from landify_api.core.google_fetcher import PlacesGateway
from landify_api.core.page_store import PageStore
from landify_api.core.rate_limit import RateLimiter
from landify_api.models.errors import ApplicationError, ErrorCode

# Configure logging early with force=True to override any existing config
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    force=True,
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the gateways, pipeline and stores; close them on shutdown"""
    logger.info("=" * 60)
    logger.info("LANDIFY API STARTING")
    logger.info(f"Strategy: {settings.pipeline_strategy} | Policy: {settings.synthesis_policy} | Critique: {settings.enable_critique}")
    logger.info("=" * 60)

    gateway = OpenAIGateway(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        timeout=settings.openai_timeout_seconds,
    )
    app.state.pipeline = ContentPipeline(
        gateway,
        strategy=settings.pipeline_strategy,
        policy=settings.synthesis_policy,
        critique=settings.enable_critique,
    )
    app.state.places = PlacesGateway(settings.google_maps_api_key)
    app.state.page_store = PageStore(settings.page_store_dir)
    app.state.rate_limiter = RateLimiter(settings.rate_limit_max_requests, settings.rate_limit_window_seconds)
    app.state.sessions = {}

    cleanup_task = asyncio.create_task(build.cleanup_old_sessions(app.state.sessions))
    logger.info("✓ Background session cleanup task started")
    try:
        yield
    finally:
        logger.info("Shutting down backend service...")
        cleanup_task.cancel()
        await app.state.places.close()
        logger.info("Backend service shutdown complete")


# Create FastAPI app
app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ApplicationError)
async def application_error_handler(request: Request, exc: ApplicationError):
    """Render ApplicationError as {errorId, code, message, hint, retryable, sessionId}"""
    if exc.http_status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code.value} - {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.code.value} - {exc.message}")
    return JSONResponse(status_code=exc.http_status, content=exc.model_dump())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed input is a 400 INVALID_REQUEST, not FastAPI's default 422"""
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err['loc'] if p != 'body')}: {err['msg']}" for err in exc.errors()
    )
    error = ApplicationError(code=ErrorCode.INVALID_REQUEST, message=f"Invalid request: {problems}")
    return JSONResponse(status_code=400, content=error.model_dump())


@app.get("/")
async def root():
    """Health check endpoint"""
    return {"status": "healthy", "version": settings.api_version}


@app.get("/health")
async def health():
    """Health check for monitoring"""
    return {"status": "healthy"}


# Register API routes
app.include_router(generate.router, prefix="/api/content-generation", tags=["content-generation"])
app.include_router(build.router, prefix="/api", tags=["build"])
app.include_router(progress.router, prefix="/sse", tags=["progress"])
app.include_router(places.router, prefix="/api/google-maps", tags=["google-maps"])
app.include_router(pages.router, prefix="/api", tags=["pages"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("landify_api.main:app", host=settings.backend_host, port=settings.backend_port)
