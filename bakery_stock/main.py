from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from bakery_stock.core.config import get_settings
from bakery_stock.core.exceptions import StockError
from bakery_stock.routers.health import router as health_router

settings = get_settings()
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    description="Bakery inventory API - stock reconciliation, production ledger and recipe costing across a production center and retail stores.",
    version="0.1.0",
    debug=settings.DEBUG,
)


@app.exception_handler(StockError)
async def stock_error_handler(request: Request, exc: StockError):
    """Render domain errors as {"error": kind, "message": ...}."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Global exception handler for unhandled errors
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected server errors with structured response."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "message": "An unexpected error occurred. Please try again later.",
            "request_id": request.headers.get("X-Request-ID"),
        }
    )

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
from bakery_stock.routers.stores import router as stores_router
from bakery_stock.routers.catalog import router as catalog_router
from bakery_stock.routers.stock_entries import router as stock_entries_router
from bakery_stock.routers.deliveries import router as deliveries_router
from bakery_stock.routers.inventory import router as inventory_router
from bakery_stock.routers.analytics import router as analytics_router

app.include_router(health_router)
app.include_router(stores_router, prefix="/api")
app.include_router(catalog_router, prefix="/api")
app.include_router(stock_entries_router, prefix="/api")
app.include_router(deliveries_router, prefix="/api")
app.include_router(inventory_router, prefix="/api")
app.include_router(analytics_router, prefix="/api")

@app.get("/")
def read_root():
    return {
        "message": "Welcome to the Bakery Stock API",
        "docs": "/docs",
        "health": "/health"
    }
