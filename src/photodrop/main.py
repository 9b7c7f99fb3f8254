import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from photodrop.api.public import router as public_router
from photodrop.dependencies import get_download_settings, get_s3_client_instance, set_s3_client_instance
from photodrop.exceptions import PhotodropError
from photodrop.logging_config import configure_logging
from photodrop.metrics import setup_metrics
from photodrop.s3_service import AsyncS3Client

# uvicorn imports this module when starting the app, so logging is configured
# before its own loggers emit anything
configure_logging(level=get_download_settings().log_level)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the shared S3 client on startup and release it on shutdown."""
    logger.info("Starting up application...")
    try:
        set_s3_client_instance(AsyncS3Client())
        logger.info("S3 client initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize S3 client: {e}")
        raise

    yield

    logger.info("Shutting down application...")
    try:
        await get_s3_client_instance().close()
        set_s3_client_instance(None)
        logger.info("S3 client closed successfully")
    except Exception as e:
        logger.error(f"Error during S3 client shutdown: {e}")


app = FastAPI(redoc_url=None, redirect_slashes=False, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)


@app.exception_handler(PhotodropError)
async def photodrop_error_handler(request: Request, exc: PhotodropError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail, "error": exc.code})


app.include_router(public_router)

setup_metrics(app)


@app.get("/health")
def health():
    return {"status": "ok"}
