import asyncio
import logging
from typing import Optional

from auth import GitHubOAuthClient
from github_operations import RepositoryOperationError, RepositoryService
from models import (
    AppView,
    DeletionState,
    ListStatus,
    PendingDeletion,
    RepositoryCard,
    RepositoryForm,
    RepositoryListView,
    RepositoryRecord,
    Session,
    UserProfile,
)
from storage import TokenStore

logger = logging.getLogger(__name__)

EMPTY_MESSAGE = "No repositories found. Create your first repository!"
LOADING_VIEW = RepositoryListView(status=ListStatus.LOADING, message="Loading repositories...")


class NotAuthenticatedError(Exception):
    """An operation needed an access token and none is active."""


class DeletionStateError(Exception):
    """A delete confirmation step was invoked out of order."""


class RepositoryManager:
    """Owns the single session and drives every user-triggered action."""

    def __init__(
        self,
        oauth: GitHubOAuthClient,
        repositories: RepositoryService,
        token_store: TokenStore,
    ):
        self.oauth = oauth
        self.repositories = repositories
        self.token_store = token_store
        self.session = Session(access_token=token_store.get())
        self.deletion = PendingDeletion()

    # Session lifecycle

    async def start_session(self, code: Optional[str] = None, state: Optional[str] = None) -> AppView:
        """Resolve the view for a page load, consuming an authorization code if present."""
        if code:
            await self.exchange_code_for_token(code, state)
            # The code is single-use: replace the location before anything else renders
            return AppView(authenticated=self.session.authenticated, redirect_to="/")

        if not self.session.authenticated:
            return AppView(authenticated=False)

        await self.ensure_user_profile()
        repositories = await self.list_repositories()
        return AppView(
            authenticated=True,
            user=self.session.current_user,
            repositories=repositories,
            pending_deletion=self.deletion.target,
        )

    def initiate_login(self) -> str:
        """Return the GitHub authorize URL the browser must navigate to."""
        self.session.oauth_state = self.oauth.new_state()
        return self.oauth.authorize_url(self.session.oauth_state)

    async def exchange_code_for_token(self, code: str, state: Optional[str] = None) -> bool:
        expected_state = self.session.oauth_state
        self.session.oauth_state = None
        if expected_state and state != expected_state:
            logger.warning("OAuth state mismatch; ignoring authorization code")
            return False

        access_token = await self.oauth.exchange_code(code)
        if not access_token:
            return False

        self.session.access_token = access_token
        self.session.current_user = None
        if not self.token_store.set(access_token):
            logger.warning("Token not persisted; this login lasts until the app stops")
        logger.info("Signed in with GitHub")
        return True

    async def load_user_profile(self) -> Optional[UserProfile]:
        if not self.session.authenticated:
            return None
        self.session.current_user = await self.oauth.fetch_user(self.session.access_token)
        return self.session.current_user

    async def ensure_user_profile(self) -> Optional[UserProfile]:
        if self.session.current_user is None:
            await self.load_user_profile()
        return self.session.current_user

    def logout(self) -> None:
        self.session.access_token = None
        self.session.current_user = None
        self.session.oauth_state = None
        self.deletion = PendingDeletion()
        self.token_store.clear()
        logger.info("Signed out")

    # Repository operations

    def _require_token(self) -> str:
        if not self.session.authenticated:
            raise NotAuthenticatedError("Not authenticated")
        return self.session.access_token

    async def _owner(self) -> str:
        user = await self.ensure_user_profile()
        if user is None:
            raise RepositoryOperationError("Could not determine the signed-in GitHub user")
        return user.login

    async def list_repositories(self) -> RepositoryListView:
        """Fetch the list view. Callers show ``LOADING_VIEW`` while this is awaited."""
        token = self._require_token()
        try:
            records = await asyncio.to_thread(self.repositories.list_repositories, token)
        except RepositoryOperationError as e:
            return RepositoryListView(
                status=ListStatus.ERROR,
                message=f"Error loading repositories: {e.message}",
            )
        if not records:
            return RepositoryListView(status=ListStatus.EMPTY, message=EMPTY_MESSAGE)
        return RepositoryListView(
            status=ListStatus.LOADED,
            cards=[RepositoryCard.for_repository(repo) for repo in records],
        )

    async def get_repository(self, name: str) -> RepositoryRecord:
        token = self._require_token()
        owner = await self._owner()
        return await asyncio.to_thread(self.repositories.get_repository, token, owner, name)

    async def create_repository(self, form: RepositoryForm) -> RepositoryRecord:
        token = self._require_token()
        return await asyncio.to_thread(self.repositories.create_repository, token, form)

    async def update_repository(self, name: str, form: RepositoryForm) -> RepositoryRecord:
        token = self._require_token()
        owner = await self._owner()
        return await asyncio.to_thread(self.repositories.update_repository, token, owner, name, form)

    async def delete_repository(self, name: str) -> None:
        token = self._require_token()
        owner = await self._owner()
        await asyncio.to_thread(self.repositories.delete_repository, token, owner, name)

    # Delete confirmation

    def request_delete(self, name: str) -> PendingDeletion:
        self._require_token()
        if self.deletion.state == DeletionState.EXECUTING:
            raise DeletionStateError("A deletion is already in progress")
        self.deletion = PendingDeletion(state=DeletionState.PENDING, target=name)
        return self.deletion

    def cancel_delete(self) -> PendingDeletion:
        if self.deletion.state == DeletionState.PENDING:
            self.deletion = PendingDeletion()
        return self.deletion

    async def confirm_delete(self) -> str:
        """Execute the pending deletion; the target is cleared whatever the outcome."""
        if self.deletion.state != DeletionState.PENDING or not self.deletion.target:
            raise DeletionStateError("No deletion is awaiting confirmation")
        target = self.deletion.target
        self.deletion = PendingDeletion(state=DeletionState.EXECUTING, target=target)
        try:
            await self.delete_repository(target)
        finally:
            self.deletion = PendingDeletion()
        return target
