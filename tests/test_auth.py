from __future__ import annotations

import asyncio
import json
from urllib.parse import parse_qs, urlsplit

import httpx

from auth import GitHubOAuthClient


def test_authorize_url_carries_client_redirect_and_scopes(settings) -> None:
    oauth = GitHubOAuthClient(settings)
    url = oauth.authorize_url("xyz")

    parts = urlsplit(url)
    assert f"{parts.scheme}://{parts.netloc}{parts.path}" == settings.authorize_url
    assert "scope=repo%20user" in parts.query
    params = parse_qs(parts.query)
    assert params["client_id"] == ["client-id"]
    assert params["redirect_uri"] == ["http://testserver"]
    assert params["scope"] == ["repo user"]
    assert params["state"] == ["xyz"]


def test_exchange_code_posts_json_credentials(settings, oauth_server) -> None:
    oauth = GitHubOAuthClient(settings, transport=httpx.MockTransport(oauth_server))

    token = asyncio.run(oauth.exchange_code("the-code"))

    assert token == "gho_test"
    request = oauth_server.requests[0]
    assert request.method == "POST"
    assert request.headers["accept"] == "application/json"
    assert json.loads(request.content) == {
        "client_id": "client-id",
        "client_secret": "client-secret",
        "code": "the-code",
        "redirect_uri": "http://testserver",
    }


def test_exchange_code_without_access_token_returns_none(settings, oauth_server) -> None:
    oauth_server.token_payload = {"error": "bad_verification_code"}
    oauth = GitHubOAuthClient(settings, transport=httpx.MockTransport(oauth_server))

    assert asyncio.run(oauth.exchange_code("stale")) is None


def test_exchange_code_transport_failure_returns_none(settings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    oauth = GitHubOAuthClient(settings, transport=httpx.MockTransport(handler))

    assert asyncio.run(oauth.exchange_code("code")) is None


def test_exchange_code_non_json_body_returns_none(settings) -> None:
    oauth = GitHubOAuthClient(
        settings,
        transport=httpx.MockTransport(lambda request: httpx.Response(502, text="<html>bad gateway</html>")),
    )

    assert asyncio.run(oauth.exchange_code("code")) is None


def test_fetch_user_sends_token_header(settings, oauth_server) -> None:
    oauth = GitHubOAuthClient(settings, transport=httpx.MockTransport(oauth_server))

    user = asyncio.run(oauth.fetch_user("gho_test"))

    assert user is not None
    assert user.login == "octocat"
    assert oauth_server.requests[0].headers["authorization"] == "token gho_test"


def test_fetch_user_non_success_is_soft_failure(settings, oauth_server) -> None:
    oauth_server.user_status = 401
    oauth_server.user_payload = {"message": "Bad credentials"}
    oauth = GitHubOAuthClient(settings, transport=httpx.MockTransport(oauth_server))

    assert asyncio.run(oauth.fetch_user("revoked")) is None
