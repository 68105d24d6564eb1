"""FastAPI application entrypoint."""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from specialist.config import get_settings
from specialist.routers import chat, proposals
from specialist.services.prompting import get_system_instruction

logger = logging.getLogger(__name__)


def _warm_prompt_cache() -> None:
    """Load the system instruction once at process start."""

    try:
        get_system_instruction()
    except Exception:
        logger.exception("System prompt warm-up failed; chat turns will report the error.")


@asynccontextmanager
async def lifespan(_: FastAPI):
    _warm_prompt_cache()
    yield


settings = get_settings()
app = FastAPI(title=settings.app_name, version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(chat.router, tags=["chat"])
app.include_router(proposals.router, tags=["proposals"])


@app.get("/health")
def health() -> dict[str, str]:
    """Simple health check endpoint."""

    return {"status": "ok"}
