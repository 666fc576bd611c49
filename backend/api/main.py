"""
FastAPI application entry point.

Run with: uvicorn api.main:app --reload
"""
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI

# Load environment variables from backend/.env (optional) before other imports that read env
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(env_path)

from api.routes import templates
from services.template_loader import ResourceCache
from settings import settings

logger = logging.getLogger(__name__)


def create_app(resources: Optional[ResourceCache] = None) -> FastAPI:
    """
    Build the API app.

    When `resources` is not given, every template under the configured
    templates directory is loaded once at startup.
    """
    app = FastAPI(
        title="Caption Studio API",
        description="API for rendering text onto template images",
        version="0.1.0",
    )
    app.state.resources = resources

    app.include_router(templates.router, prefix="/templates", tags=["templates"])

    @app.on_event("startup")
    def startup_event():
        """Load templates and resources into memory."""
        logging.basicConfig(level=settings.LOG_LEVEL)
        if app.state.resources is None:
            app.state.resources = ResourceCache.load(settings.TEMPLATES_DIR, settings.RESOURCE_ROOT)
        logger.info("[api] serving %s templates", len(app.state.resources))

    @app.get("/")
    async def root():
        """Health check endpoint."""
        return {"status": "ok", "service": "Caption Studio API"}

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
