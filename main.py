from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
import time
import uuid
from contextlib import asynccontextmanager

from app.routers import moderation, analysis
from app.core.logger import logger
from app.core.exceptions import ContentModeratorException, status_code_for
from app.core.config import settings
from app.core.security import CORS_ALLOWED_HEADERS, CORS_HEADERS

# Application lifespan management
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management for startup and shutdown events."""
    logger.info("Starting Content Moderation Gateway", extra={"version": settings.version})

    if not settings.openai_api_key:
        logger.warning("OpenAI API key not configured; every upload will be blocked")

    yield

    logger.info("Shutting down Content Moderation Gateway")

app = FastAPI(
    title=settings.app_name,
    description="""
    Zero-tolerance content moderation gate for user uploads (avatars, post images,
    story images). Every upload is judged by a vision model and either passed or
    blocked, with a structured explanation.

    ## Fail closed

    Configuration problems, upstream outages and unreadable model output all
    resolve to a `failed` result delivered with HTTP 200. Only a missing
    `Authorization` header (401) or a malformed request (400) return error codes.
    """,
    version=settings.version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

# Security middleware
app.add_middleware(
    TrustedHostMiddleware,
    allowed_hosts=["*"]
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=CORS_ALLOWED_HEADERS,
)

# Request ID middleware
@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add unique request ID to all requests for tracing."""
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    logger.info(
        f"Request started",
        extra={
            "request_id": request_id,
            "method": request.method,
            "url": str(request.url.path),
            "client_ip": request.client.host if request.client else "unknown"
        }
    )

    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time

    response.headers["X-Request-ID"] = request_id
    response.headers["X-Process-Time"] = str(process_time)

    logger.info(
        f"Request completed",
        extra={
            "request_id": request_id,
            "status_code": response.status_code,
            "process_time": process_time
        }
    )

    return response

@app.exception_handler(ContentModeratorException)
async def content_moderator_exception_handler(request: Request, exc: ContentModeratorException):
    """Render application exceptions with their own payload and status."""
    status_code = status_code_for(exc)
    logger.warning(
        f"Content Moderator exception: {exc.message}",
        extra={
            "request_id": getattr(request.state, "request_id", "unknown"),
            "error_code": exc.error_code,
            "status_code": status_code,
            "details": exc.details
        }
    )

    return JSONResponse(
        status_code=status_code,
        content=exc.to_payload(),
        headers=CORS_HEADERS
    )

@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies are a 400, matching the gateway's own validation."""
    logger.warning(
        "Request body failed validation",
        extra={
            "request_id": getattr(request.state, "request_id", "unknown"),
            "errors": exc.errors()
        }
    )
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request body"},
        headers=CORS_HEADERS
    )

# Include routers
app.include_router(moderation.router)
app.include_router(analysis.router)

@app.options("/{full_path:path}", include_in_schema=False)
async def preflight(full_path: str):
    """Answer bare OPTIONS requests on any path with the CORS policy."""
    return Response(status_code=204, headers=CORS_HEADERS)

# Health check endpoint
@app.get("/health", tags=["monitoring"])
async def health_check():
    """
    Health check endpoint for monitoring and load balancers.

    Returns:
        Health status and whether the vision model is configured
    """
    return {
        "status": "healthy",
        "timestamp": time.time(),
        "version": settings.version,
        "services": {
            "api": "healthy",
            "llm": "configured" if settings.openai_api_key else "not_configured"
        }
    }

# Root endpoint
@app.get("/", tags=["general"])
async def root():
    """
    Root endpoint with API information.

    Returns:
        Basic API information and links
    """
    return {
        "message": settings.app_name,
        "version": settings.version,
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "moderation": "/moderate",
            "analysis": "/analyze"
        }
    }
