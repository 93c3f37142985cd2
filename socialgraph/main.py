"""
Social Graph API — entry point.

Startup sequence:
  1. Configure OTel tracing (→ Jaeger via OTLP)
  2. Open the storage backend (Redis, or in-memory for tests/demos)
  3. Initialise MinIO client & bucket (optional; media routes degrade)
  4. Expose Prometheus /metrics endpoint
"""
import logging

from contextlib import asynccontextmanager
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import FastAPI
from prometheus_client import make_asgi_app

from socialgraph.clients import minio_client
from socialgraph.config import settings
from socialgraph.errors import register_exception_handlers
from socialgraph.routers import auth, health, media, posts, timeline, users
from socialgraph.storage.factory import create_store
from socialgraph.telemetry import instrument_app, setup_tracing

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)

# Set up tracing before the app is created so all imports are instrumented
setup_tracing()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open and close the storage backend and media client."""
    logger.info("Starting Social Graph API (env=%s)", settings.environment)

    app.state.store = await create_store()

    if settings.minio_enabled:
        try:
            minio_client.init_minio()       # sync, boto3 is not async
        except (BotoCoreError, ClientError) as exc:
            logger.warning("MinIO unavailable: %s — media endpoints disabled", exc)

    logger.info("Storage connected. API ready.")
    yield

    logger.info("Shutting down...")
    await app.state.store.close()
    minio_client.reset()


app = FastAPI(
    title="Social Graph API",
    description=(
        "Follow graph, status fan-out to follower timelines, "
        "and like/love/fav/share toggles over a key-value store."
    ),
    version=settings.version,
    lifespan=lifespan,
)

register_exception_handlers(app)

# ── Routers ────────────────────────────────────────────────────────────────
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(users.router, prefix="/api", tags=["Users"])
app.include_router(posts.router, prefix="/api", tags=["Posts"])
app.include_router(timeline.router, prefix="/api", tags=["Timeline"])
app.include_router(media.router, prefix="/api", tags=["Media"])
app.include_router(health.router, prefix="/api", tags=["Health"])

# ── Prometheus metrics endpoint ────────────────────────────────────────────
metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)

# ── OTel FastAPI instrumentation ──────────────────────────────────────────
instrument_app(app)


@app.get("/health", tags=["Health"])
async def health_check():
    return {"status": "ok", "service": settings.service_name}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("socialgraph.main:app", host="0.0.0.0", port=8000)
