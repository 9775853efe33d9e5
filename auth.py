import logging
import secrets
from typing import Optional
from urllib.parse import quote, urlencode

import httpx
from fastapi import Request

from config import Settings
from models import UserProfile

logger = logging.getLogger(__name__)

GITHUB_API_ACCEPT = "application/vnd.github.v3+json"


class GitHubOAuthClient:
    """GitHub OAuth authorization-code flow plus the authenticated profile lookup."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=self.settings.http_timeout)

    @staticmethod
    def new_state() -> str:
        return secrets.token_urlsafe(16)

    def authorize_url(self, state: Optional[str] = None) -> str:
        """Build the GitHub OAuth page URL for a full-page redirect."""
        params = {
            "client_id": self.settings.github_client_id or "",
            "redirect_uri": self.settings.redirect_uri,
            "scope": " ".join(self.settings.scopes),
        }
        if state:
            params["state"] = state
        return f"{self.settings.authorize_url}?{urlencode(params, quote_via=quote)}"

    async def exchange_code(self, code: str) -> Optional[str]:
        """Exchange an authorization code for an access token.

        Returns None on any failure; the caller falls back to the login prompt.
        """
        try:
            async with self._client() as client:
                token_response = await client.post(
                    self.settings.token_url,
                    json={
                        "client_id": self.settings.github_client_id,
                        "client_secret": self.settings.github_client_secret,
                        "code": code,
                        "redirect_uri": self.settings.redirect_uri,
                    },
                    headers={"Accept": "application/json"},
                )
            token_data = token_response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error exchanging code for token: {e}")
            return None

        if not isinstance(token_data, dict):
            token_data = {}
        access_token = token_data.get("access_token")
        if not access_token:
            error = token_data.get("error_description") or token_data.get("error") or "no detail"
            logger.warning(f"Token exchange returned no access token ({error})")
            return None
        return access_token

    async def fetch_user(self, access_token: str) -> Optional[UserProfile]:
        """Get the authenticated user's login and avatar; None on any failure."""
        try:
            async with self._client() as client:
                user_response = await client.get(
                    self.settings.user_url,
                    headers={
                        "Authorization": f"token {access_token}",
                        "Accept": GITHUB_API_ACCEPT,
                    },
                )
            if not user_response.is_success:
                logger.warning(f"Profile request failed with status {user_response.status_code}")
                return None
            return UserProfile.model_validate(user_response.json())
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error loading user profile: {e}")
            return None


def get_manager(request: Request):
    """FastAPI dependency: the app's single RepositoryManager."""
    return request.app.state.manager
