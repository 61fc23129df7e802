"""FastAPI application for the scripted chat backend."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chatstream.api.demo import router as demo_router
from chatstream.config import get_client_config

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Log the step pipeline the backend will stream."""
    steps = get_client_config().process_steps
    logger.info(f"Demo backend streaming {len(steps)} steps: {', '.join(steps)}")
    yield
    logger.info("Demo backend stopped")


def create_app() -> FastAPI:
    """Create the demo backend with the /chat stream and a health probe."""
    application = FastAPI(title="Chat Demo Backend", version="0.1.0", lifespan=lifespan)

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    application.include_router(demo_router)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy", "service": "chat-demo-backend"}

    return application


app = create_app()
