from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from fastapi.middleware.cors import CORSMiddleware
import logging
import uvicorn

from .api.routes import router as api_router
from .api.websocket import router as ws_router
from .core.config import get_settings
from .services.webhook_client import WellnessClient

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
log = logging.getLogger(__name__)


def create_app(client: Optional[WellnessClient] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.client = client or WellnessClient(settings)
        log.info(f"✅ Client ready, user {app.state.client.get_user_id()}, assistant {app.state.client.get_current_assistant()}")
        yield
        await app.state.client.aclose()

    app = FastAPI(
        title="mediterranean-wellness",
        version="0.1.0",
        description="Chat client for the Mediterranean Wellness assistants",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers BEFORE static files mount
    app.include_router(api_router)
    app.include_router(ws_router)

    @app.get("/api/health")
    async def health_check():
        return {"status": "ok", "message": "mediterranean-wellness client is running", "backend": settings.base_url}

    # Serve the page (this should be LAST)
    if Path(settings.static_dir).is_dir():
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")

    return app


app = create_app()


def run():
    """Serve the page and API with uvicorn."""
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
