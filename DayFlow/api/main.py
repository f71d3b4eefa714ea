"""
Local HTTP API for the DayFlow web client.
Binds to localhost by default; storage is the device-local DuckDB file.
Handlers are async so every store access happens on the event-loop thread.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from DayFlow import __version__
from DayFlow.api.deps import close_tracker, get_settings
from DayFlow.api.routes import categories as categories_router
from DayFlow.api.routes import day as day_router
from DayFlow.api.routes import reports as reports_router
from DayFlow.errors import RangeError, StorageUnavailable, ValidationError

API_V1_STR = "/api/v1"

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - [%(name)s] - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting up DayFlow API (storage: {get_settings().db_path})...")
    yield
    close_tracker()
    logger.info("Shutting down DayFlow API...")


app = FastAPI(
    title="DayFlow API",
    description="Local API behind the DayFlow single-page client: hourly logs, categories, stats and reports.",
    version=__version__,
    openapi_url=f"{API_V1_STR}/openapi.json",
    docs_url=f"{API_V1_STR}/docs",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000", "http://localhost:9002"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Error mapping ---
@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


@app.exception_handler(RangeError)
async def range_error_handler(request: Request, exc: RangeError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(StorageUnavailable)
async def storage_error_handler(request: Request, exc: StorageUnavailable):
    logger.error(f"Storage unavailable while handling {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": f"Storage unavailable; changes may not be saved. ({exc})"},
    )


# --- API Router for v1 ---
api_v1_router = APIRouter(prefix=API_V1_STR)
api_v1_router.include_router(categories_router.router, prefix="/categories", tags=["Categories"])
api_v1_router.include_router(day_router.router, prefix="/day", tags=["Daily Data"])
api_v1_router.include_router(reports_router.router, tags=["Reports"])
app.include_router(api_v1_router)


@app.get("/", tags=["Root"])
async def read_root():
    return {"message": f"Welcome to the DayFlow API. See {API_V1_STR}/docs for documentation."}


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    logger.info("Starting Uvicorn server for development...")
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level="info")
