import logging
from typing import Any, Callable, List, Optional

import requests
from github import Auth, Github
from github.GithubException import GithubException

from config import Settings
from models import RepositoryForm, RepositoryRecord

logger = logging.getLogger(__name__)


class RepositoryOperationError(Exception):
    """A repository call failed; ``message`` is fit to show to the user."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


def _github_message(e: GithubException, fallback: str) -> str:
    data = e.data if isinstance(e.data, dict) else {}
    return data.get("message") or fallback


class RepositoryService:
    """Repository CRUD for the authenticated user, backed by PyGithub.

    Methods are blocking; the manager runs them in a worker thread.
    """

    def __init__(self, settings: Settings, github_factory: Optional[Callable[[str], Any]] = None):
        self.settings = settings
        self._github_factory = github_factory or self._default_github

    def _default_github(self, access_token: str) -> Github:
        # lazy: get_repo() builds a handle without a GET; attributes load on first access.
        # retry=None: every failure is terminal for the action that caused it
        return Github(
            auth=Auth.Token(access_token),
            base_url=self.settings.api_url,
            per_page=self.settings.repos_per_page,
            timeout=int(self.settings.http_timeout),
            retry=None,
            lazy=True,
        )

    def list_repositories(self, access_token: str) -> List[RepositoryRecord]:
        """First page of the user's repositories, most recently updated first."""
        g = self._github_factory(access_token)
        try:
            page = g.get_user().get_repos(sort="updated").get_page(0)
            return [RepositoryRecord.from_github(repo) for repo in page]
        except GithubException as e:
            logger.warning(f"Listing repositories failed: status {e.status}")
            raise RepositoryOperationError("Failed to load repositories", e.status)
        except requests.RequestException as e:
            logger.error(f"Listing repositories failed: {e}")
            raise RepositoryOperationError(str(e))

    def get_repository(self, access_token: str, owner: str, name: str) -> RepositoryRecord:
        g = self._github_factory(access_token)
        try:
            return RepositoryRecord.from_github(g.get_repo(f"{owner}/{name}"))
        except GithubException as e:
            raise RepositoryOperationError(_github_message(e, "Failed to load repository"), e.status)
        except requests.RequestException as e:
            logger.error(f"Loading {owner}/{name} failed: {e}")
            raise RepositoryOperationError(str(e))

    def create_repository(self, access_token: str, form: RepositoryForm) -> RepositoryRecord:
        g = self._github_factory(access_token)
        try:
            repo = g.get_user().create_repo(
                name=form.name,
                description=form.description,
                private=form.private,
                auto_init=form.auto_init,
            )
        except GithubException as e:
            logger.warning(f"Creating {form.name} failed: status {e.status}, data {e.data}")
            raise RepositoryOperationError(_github_message(e, "Failed to create repository"), e.status)
        except requests.RequestException as e:
            logger.error(f"Creating {form.name} failed: {e}")
            raise RepositoryOperationError(str(e))
        logger.info(f"Created repository {form.name}")
        return RepositoryRecord.from_github(repo)

    def update_repository(self, access_token: str, owner: str, name: str, form: RepositoryForm) -> RepositoryRecord:
        """PATCH ``owner/name``. The name identifies the repository; it is never renamed."""
        g = self._github_factory(access_token)
        try:
            repo = g.get_repo(f"{owner}/{name}")
            repo.edit(name=name, description=form.description, private=form.private)
        except GithubException as e:
            logger.warning(f"Updating {owner}/{name} failed: status {e.status}, data {e.data}")
            raise RepositoryOperationError(_github_message(e, "Failed to update repository"), e.status)
        except requests.RequestException as e:
            logger.error(f"Updating {owner}/{name} failed: {e}")
            raise RepositoryOperationError(str(e))
        logger.info(f"Updated repository {owner}/{name}")
        return RepositoryRecord.from_github(repo)

    def delete_repository(self, access_token: str, owner: str, name: str) -> None:
        g = self._github_factory(access_token)
        try:
            g.get_repo(f"{owner}/{name}").delete()
        except (GithubException, requests.RequestException) as e:
            # deletes surface a generic message, never the response body
            logger.warning(f"Deleting {owner}/{name} failed: {e}")
            raise RepositoryOperationError("Failed to delete repository", getattr(e, "status", None))
        logger.info(f"Deleted repository {owner}/{name}")
