"""
Storefront Admin API.

Product catalog endpoints plus the two-step bulk CSV import
(preview, then commit).
"""

import uuid
from contextlib import asynccontextmanager
from datetime import datetime

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings, check_connection
from config.logging_config import configure_logging
from exceptions import AppError
from routes import product_import_router, products_router

configure_logging(settings)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log the store this instance serves and probe the database."""
    logger.info(
        "application_starting",
        environment=settings.environment,
        store_id=settings.store_id,
        currency=settings.store_currency,
        max_products=settings.max_products,
    )

    if not settings.store_id:
        logger.warning("store_id_not_configured")

    db_status = check_connection()
    if db_status["status"] == "healthy":
        logger.info("database_connected", products=db_status["products_count"])
    else:
        logger.error("database_connection_failed", error=db_status.get("error"))

    yield

    logger.info("application_shutting_down")


app = FastAPI(
    title="Storefront Admin API",
    description="Product catalog and bulk CSV import for storefronts",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://localhost:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ===================
# MIDDLEWARE
# ===================

@app.middleware("http")
async def request_context(request: Request, call_next):
    """Tag every log line of a request with a short request id."""
    request_id = uuid.uuid4().hex[:12]
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        request_id=request_id,
        method=request.method,
        path=request.url.path,
    )
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# ===================
# ROUTES
# ===================

@app.get("/health")
async def health_check():
    """Service and database status."""
    db_status = check_connection()

    return {
        "status": "healthy" if db_status["status"] == "healthy" else "degraded",
        "timestamp": datetime.utcnow().isoformat(),
        "environment": settings.environment,
        "store_id": settings.store_id,
        "database": db_status,
    }


@app.get("/")
async def root():
    return {
        "name": "Storefront Admin API",
        "version": "0.1.0",
        "docs": "/docs" if settings.debug else "Disabled in production",
        "health": "/health",
        "endpoints": {
            "products": "/api/products",
            "product_import": "/api/products/import",
            "product_import_preview": "/api/products/import/preview",
        },
    }


# ===================
# ERROR HANDLERS
# ===================

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """AppError raised outside a route's own handling keeps its status and code."""
    logger.warning("app_error", code=exc.code, status_code=exc.status_code, message=exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Anything else is a 500 in the standard error format."""
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "details": str(exc) if settings.debug else None,
                "timestamp": datetime.utcnow().isoformat()
            }
        }
    )


# Import routes go first so "import" is never read as a product id
app.include_router(product_import_router, prefix="/api/products/import", tags=["Product Import"])
app.include_router(products_router, prefix="/api/products", tags=["Products"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug
    )
