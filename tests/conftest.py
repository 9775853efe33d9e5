from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import pytest

from auth import GitHubOAuthClient
from config import Settings
from github_operations import RepositoryService
from manager import RepositoryManager
from storage import TokenStore


def fake_repo(name: str, **overrides) -> SimpleNamespace:
    fields = {
        "name": name,
        "description": f"{name} description",
        "private": False,
        "default_branch": "main",
        "stargazers_count": 3,
        "updated_at": datetime(2024, 5, 1, tzinfo=timezone.utc),
        "html_url": f"https://github.com/octocat/{name}",
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


class FakeGitHub:
    """Stands in for the PyGithub client factory; records the tokens it was built with."""

    def __init__(self) -> None:
        self.client = MagicMock()
        self.tokens: list[str] = []
        self.set_repositories([])

    def __call__(self, access_token: str) -> MagicMock:
        self.tokens.append(access_token)
        return self.client

    def set_repositories(self, repos: list) -> None:
        self.client.get_user.return_value.get_repos.return_value.get_page.return_value = repos


class FakeGitHubOAuth:
    """httpx handler for the token exchange and /user endpoints."""

    def __init__(self) -> None:
        self.token_payload: dict = {"access_token": "gho_test", "token_type": "bearer"}
        self.user_status = 200
        self.user_payload: dict = {
            "login": "octocat",
            "avatar_url": "https://avatars.githubusercontent.com/u/1",
        }
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/login/oauth/access_token":
            return httpx.Response(200, json=self.token_payload)
        if request.url.path == "/user":
            return httpx.Response(self.user_status, json=self.user_payload)
        return httpx.Response(404, json={"message": "Not Found"})

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        github_client_id="client-id",
        github_client_secret="client-secret",
        base_url="http://testserver",
        token_file=tmp_path / "access_token",
    )


@pytest.fixture
def github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def oauth_server() -> FakeGitHubOAuth:
    return FakeGitHubOAuth()


@pytest.fixture
def make_manager(settings: Settings, github: FakeGitHub, oauth_server: FakeGitHubOAuth):
    def _make() -> RepositoryManager:
        return RepositoryManager(
            oauth=GitHubOAuthClient(settings, transport=httpx.MockTransport(oauth_server)),
            repositories=RepositoryService(settings, github_factory=github),
            token_store=TokenStore(settings.token_file),
        )

    return _make


@pytest.fixture
def manager(make_manager) -> RepositoryManager:
    return make_manager()
