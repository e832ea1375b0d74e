"""FastAPI application entry point."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hazardrisk.api.routes import risk, search
from hazardrisk.config import settings
from hazardrisk.data.cache import TTLCache
from hazardrisk.data.client import GeoDataClient

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    cache = TTLCache(cleanup_interval=settings.cache_cleanup_interval_seconds)
    app.state.geodata = GeoDataClient(cache=cache)
    logger.info("Response cache started")
    try:
        yield
    finally:
        await app.state.geodata.aclose()
        cache.close()
        logger.info("Response cache stopped")


app = FastAPI(
    title="Hazard Risk",
    description="Natural hazard risk assessment for Norwegian addresses",
    version="0.1.0",
    lifespan=lifespan,
    debug=settings.debug,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        response = JSONResponse(status_code=500, content={"detail": "internal server error"})
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info("%s %s %d %.0fms", request.method, request.url.path, response.status_code, elapsed_ms)
    return response


app.include_router(risk.router)
app.include_router(search.router)


@app.get("/health")
async def health():
    return {"status": "ok"}
