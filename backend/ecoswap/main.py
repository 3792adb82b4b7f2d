import os

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .core.logging import configure_logging, get_logger, get_trace_id
from .core.middleware import TraceIDMiddleware
from .routes import health, metrics, products, recommend
from .services.ai.llm_client import get_llm_client
from .services.catalog import CatalogLoadError, get_catalog_service

load_dotenv()

# JSON output in production (containerized), console output in development
log_level = os.getenv("LOG_LEVEL", "INFO")
json_output = os.getenv("LOG_JSON", "true").lower() == "true"
configure_logging(log_level=log_level, json_output=json_output)

logger = get_logger(__name__)

app = FastAPI(
    title="EcoSwap Recommendation API",
    description="Sustainable product alternatives with AI comparison copy",
    version="1.0.0",
)

# CORS for local dev; restrict in production
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Must be added after CORS so it wraps the routers
app.add_middleware(TraceIDMiddleware)


@app.on_event("startup")
async def startup_event():
    """Load the catalog and report LLM availability."""
    logger.info("app_startup_started")

    catalog = get_catalog_service()
    try:
        catalog.load()
        logger.info("app_startup_catalog_ready", product_count=len(catalog.products))
    except CatalogLoadError as e:
        logger.warning(
            "app_startup_catalog_unavailable",
            error=str(e),
            message="Catalog endpoints will return 503 until the catalog file is fixed.",
        )

    if get_llm_client().is_configured:
        logger.info("app_startup_llm_ready")
    else:
        logger.info(
            "app_startup_llm_unavailable",
            message="LLM_API_KEY not set. Comparison copy will use the deterministic fallback.",
        )

    logger.info("app_startup_completed")


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions (metrics are recorded by TraceIDMiddleware)."""
    trace_id = get_trace_id()
    logger.warning(
        "http_exception",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
        method=request.method,
    )
    response = JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.detail,
            "status_code": exc.status_code,
            "trace_id": trace_id,
        },
    )
    if trace_id:
        response.headers["X-Trace-ID"] = trace_id
    return response


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions."""
    trace_id = get_trace_id()
    logger.error(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
        exc_info=True,
    )
    response = JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "status_code": 500,
            "trace_id": trace_id,
        },
    )
    if trace_id:
        response.headers["X-Trace-ID"] = trace_id
    return response


app.include_router(health.router, prefix="/health", tags=["Health"])
app.include_router(products.router, prefix="/products", tags=["Products"])
app.include_router(recommend.router, prefix="/recommend", tags=["Recommendations"])
app.include_router(metrics.router, prefix="/metrics", tags=["Metrics"])
