import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables
load_dotenv()

# GitHub OAuth configuration
GITHUB_AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"
GITHUB_API_URL = "https://api.github.com"
DEFAULT_SCOPES = ["repo", "user"]

# Local app configuration
DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_TOKEN_FILE = "~/.repo-manager/access_token"


class Settings(BaseModel):
    github_client_id: Optional[str] = None
    github_client_secret: Optional[str] = None
    authorize_url: str = GITHUB_AUTHORIZE_URL
    token_url: str = GITHUB_TOKEN_URL
    api_url: str = GITHUB_API_URL
    scopes: List[str] = Field(default_factory=lambda: list(DEFAULT_SCOPES))
    # OAuth redirect URI: the app's own origin
    base_url: str = DEFAULT_BASE_URL
    token_file: Path = Path(DEFAULT_TOKEN_FILE).expanduser()
    repos_per_page: int = Field(default=100, ge=1, le=100)
    http_timeout: float = 10.0
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=1, le=65535)

    @property
    def user_url(self) -> str:
        return f"{self.api_url.rstrip('/')}/user"

    @property
    def redirect_uri(self) -> str:
        return self.base_url.rstrip("/")


def load_settings() -> Settings:
    """Build settings from the environment (and .env, if present)."""
    scopes = os.getenv("GITHUB_SCOPES")
    return Settings(
        github_client_id=os.getenv("GITHUB_CLIENT_ID"),
        github_client_secret=os.getenv("GITHUB_CLIENT_SECRET"),
        authorize_url=os.getenv("GITHUB_AUTHORIZE_URL", GITHUB_AUTHORIZE_URL),
        token_url=os.getenv("GITHUB_TOKEN_URL", GITHUB_TOKEN_URL),
        api_url=os.getenv("GITHUB_API_URL", GITHUB_API_URL),
        scopes=scopes.split() if scopes else list(DEFAULT_SCOPES),
        base_url=os.getenv("APP_BASE_URL", DEFAULT_BASE_URL),
        token_file=Path(os.getenv("TOKEN_FILE", DEFAULT_TOKEN_FILE)).expanduser(),
        repos_per_page=int(os.getenv("REPOS_PER_PAGE", "100")),
        http_timeout=float(os.getenv("HTTP_TIMEOUT", "10")),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
    )
