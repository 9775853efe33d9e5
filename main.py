import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI

from api import router as api_router
from auth import GitHubOAuthClient
from config import Settings, load_settings
from github_operations import RepositoryService
from manager import RepositoryManager
from routes import router as html_router
from storage import TokenStore

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def build_manager(settings: Settings) -> RepositoryManager:
    return RepositoryManager(
        oauth=GitHubOAuthClient(settings),
        repositories=RepositoryService(settings),
        token_store=TokenStore(settings.token_file),
    )


def create_app(settings: Optional[Settings] = None, manager: Optional[RepositoryManager] = None) -> FastAPI:
    settings = settings or load_settings()
    if not settings.github_client_id or not settings.github_client_secret:
        logger.warning("GITHUB_CLIENT_ID / GITHUB_CLIENT_SECRET are not set; login will fail")

    app = FastAPI(title="GitHub Repository Manager")
    app.state.settings = settings
    app.state.manager = manager or build_manager(settings)

    @app.get("/healthz")
    async def health_check():
        return {"status": "ok"}

    app.include_router(html_router)
    app.include_router(api_router)
    return app


def main() -> None:
    settings = load_settings()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
