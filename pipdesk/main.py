# pipdesk/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import admin
from .config import settings
from .database import Base, engine
from .exceptions import PipDeskError
from .instruments import default_registry, load_extra_instruments
from .routers import accounts, learning, plans, signals, trading

# Configure logging
logging.basicConfig(
    level=getattr(logging, str(settings.LOG_LEVEL).upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Create database tables
Base.metadata.create_all(bind=engine)

# Register configured extra symbols before any request is served
load_extra_instruments(default_registry, settings.EXTRA_INSTRUMENTS)

# Create FastAPI app
app = FastAPI(title=settings.APP_NAME, version=settings.VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PipDeskError)
async def pipdesk_error_handler(request: Request, exc: PipDeskError):
    """Domain errors surface as their own status code with the error class name"""
    logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": type(exc).__name__},
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# Include routers
app.include_router(accounts.router, prefix="/api")
app.include_router(signals.router, prefix="/api")
app.include_router(trading.router, prefix="/api")
app.include_router(learning.router, prefix="/api")
app.include_router(plans.router, prefix="/api")
app.include_router(admin.router)


@app.on_event("startup")
async def startup():
    settings.validate_settings()
    if settings.is_development:
        settings.print_config_summary()
    logger.info(f"{len(default_registry)} instruments registered")


# ==================== HEALTH CHECK ====================

@app.get("/health")
async def health():
    """Health check endpoint"""
    return {"status": "ok", "message": f"{settings.APP_NAME} is running", "version": settings.VERSION}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
