from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from sqlalchemy.exc import OperationalError
from contextlib import asynccontextmanager
import logging

from landchain.core.config import settings
from landchain.core.database import init_db, check_database_connection
from landchain.core.exceptions import LandRegistryError
from landchain.api import api_router


class HTTPSRedirectMiddleware(BaseHTTPMiddleware):
    """Middleware to ensure redirects use HTTPS when behind a proxy."""
    async def dispatch(self, request: Request, call_next):
        # Check if we're behind a proxy using HTTPS
        forwarded_proto = request.headers.get("x-forwarded-proto", "http")
        if forwarded_proto == "https":
            request.scope["scheme"] = "https"
        return await call_next(request)

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.DEBUG else logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle manager."""
    # Startup
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    # Create database tables (in production, use Alembic migrations)
    init_db()
    logger.info("Database tables created/verified")

    if settings.chain_configured:
        logger.info("Blockchain recording enabled")
    elif settings.CHAIN_REQUIRED:
        logger.error("CHAIN_REQUIRED is set but blockchain configuration is incomplete; approvals will fail")
    else:
        logger.warning("Blockchain configuration incomplete; transfers will use placeholder hashes")

    yield

    # Shutdown
    logger.info("Shutting down...")


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Land record registration, verification and ownership transfer",
    lifespan=lifespan,
)

# Add HTTPS redirect middleware (must be added before CORS)
app.add_middleware(HTTPSRedirectMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LandRegistryError)
async def registry_error_handler(request: Request, exc: LandRegistryError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "kind": "validation",
            "detail": "Missing or malformed fields",
            "errors": jsonable_encoder(exc.errors()),
        },
    )


@app.exception_handler(OperationalError)
async def database_unavailable_handler(request: Request, exc: OperationalError):
    logger.error(f"Database operation failed: {exc}")
    return JSONResponse(
        status_code=503,
        content={"success": False, "kind": "upstream_failure", "detail": "Database operation failed"},
    )


# Include API routes
app.include_router(api_router, prefix="/api/v1")


@app.get("/")
def root():
    """Health check endpoint."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "healthy"
    }


@app.get("/health")
def health_check():
    """Detailed health check."""
    database_ok = check_database_connection()
    return {
        "status": "healthy" if database_ok else "degraded",
        "database": "connected" if database_ok else "unreachable",
        "blockchain": "configured" if settings.chain_configured else "disabled",
        "chain_required": settings.CHAIN_REQUIRED,
        "version": settings.APP_VERSION
    }
