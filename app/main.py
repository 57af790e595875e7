from contextlib import asynccontextmanager

import httpx
import redis.asyncio as aioredis
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.v1 import api_v1_router
from app.config import settings
from app.core.exceptions import FlashcardError
from app.core.logging import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.redis = aioredis.from_url(
        settings.REDIS_URL, decode_responses=True,
    )
    app.state.http_client = httpx.AsyncClient(
        timeout=settings.AI_REQUEST_TIMEOUT_SECONDS,
    )
    yield
    await app.state.http_client.aclose()
    await app.state.redis.close()


setup_logging()

app = FastAPI(
    title=settings.APP_NAME,
    docs_url="/api/docs",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Access-Token", "Content-Disposition"],
)

app.include_router(api_v1_router)


@app.exception_handler(FlashcardError)
async def flashcard_error_handler(request: Request, exc: FlashcardError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.__class__.__name__},
    )


@app.get("/api/v1/health")
async def health_check():
    return {"status": "ok", "app": settings.APP_NAME}
