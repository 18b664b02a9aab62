"""FastAPI application factory for the matterdeploy API."""

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routes import health_router, rendering_router

logger = logging.getLogger(__name__)


def configure_logging() -> int:
    """Configure root logging from MATTERDEPLOY_DEBUG and return the level."""
    debug_mode = os.getenv("MATTERDEPLOY_DEBUG", "false").lower() == "true"
    log_level = logging.DEBUG if debug_mode else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return log_level


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    log_level = configure_logging()

    app = FastAPI(
        title="matterdeploy API",
        description="Validate Matter AI deployment descriptors and render Compose or Helm values files",
        version="0.1.0",
    )

    # The operator UI runs on its own port
    app.add_middleware(
        CORSMiddleware,
        allow_origins=os.getenv("MATTERDEPLOY_CORS_ORIGINS", "*").split(","),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(rendering_router)

    logger.info(f"matterdeploy API starting with log level: {logging.getLevelName(log_level)}")

    return app


# Create the app instance for uvicorn
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
