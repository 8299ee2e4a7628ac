from fastapi import FastAPI, Request, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from dotenv import load_dotenv
from app.routes import auth, lists, comments
from app.database import engine
from app.middleware.security import SecurityHeadersMiddleware
from app.services.exceptions import ServiceError, InternalError
import os
import logging

# Load environment variables
load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


# ============================================
# Application Lifespan Management
# ============================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup/shutdown. The database engine lives for the whole process."""
    logger.info("=" * 60)
    logger.info("Movie Tracker API starting")
    logger.info(f"   Environment: {os.getenv('ENVIRONMENT', 'development')}")
    logger.info(f"   CORS Origins: {len(allowed_origins)} configured")
    logger.info("=" * 60)

    yield

    logger.info("Movie Tracker API shutting down")
    engine.dispose()


# Create FastAPI app with lifespan handler
app = FastAPI(
    title="Movie Tracker API",
    description="Personal Watching / Will Watch / Already Watched lists and title comments",
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# ============================================
# Security Configuration
# ============================================

# CORS - Whitelist allowed origins
allowed_origins = [
    "http://localhost:3000",
    "http://localhost:3001",
    "http://localhost:5173",
]
if production_url := os.getenv("FRONTEND_URL"):
    allowed_origins.append(production_url)

app.add_middleware(SecurityHeadersMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Trusted Hosts - Production only
if os.getenv("ENVIRONMENT") == "production":
    if trusted_hosts := [h for h in os.getenv("TRUSTED_HOSTS", "").split(",") if h]:
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=trusted_hosts)


# ============================================
# Exception Handlers - every error response keeps CORS headers
# ============================================

def _with_cors(request: Request, response: JSONResponse) -> JSONResponse:
    """Error responses skip CORSMiddleware on some paths; add the headers here"""
    origin = request.headers.get("origin")
    if origin in allowed_origins:
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Credentials"] = "true"
    return response


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    """
    Map service errors (Unauthorized, InvalidRequest, NotFound, Conflict,
    InternalError) to `{"error": message}` with their status code.
    Internal error causes are only logged.
    """
    if isinstance(exc, InternalError):
        logger.error(
            f"{request.method} {request.url.path} failed: {exc.message}",
            exc_info=exc.cause or exc,
        )

    content = {"error": exc.message}
    if exc.details is not None:
        content["details"] = jsonable_encoder(exc.details)
    return _with_cors(request, JSONResponse(status_code=exc.status_code, content=content))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies are reported like any other invalid request"""
    return _with_cors(request, JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())}
    ))


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return _with_cors(request, JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail}
    ))


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Catch-all so unexpected errors still produce a JSON 500"""
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return _with_cors(request, JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    ))


# ============================================
# Routes
# ============================================

@app.get("/", tags=["Health"])
async def root():
    """Basic health check"""
    return {
        "message": "Movie Tracker API",
        "version": API_VERSION,
        "status": "healthy",
        "docs": "/docs"
    }

@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check for monitoring"""
    return {
        "status": "healthy",
        "api_version": API_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

app.include_router(auth.router)
app.include_router(lists.router)
app.include_router(comments.router)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_level="info"
    )
