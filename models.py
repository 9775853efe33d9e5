from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from utils import is_valid_repository_name


class UserProfile(BaseModel):
    login: str
    avatar_url: str = ""


class RepositoryRecord(BaseModel):
    name: str
    description: Optional[str] = None
    private: bool = False
    default_branch: Optional[str] = None
    stargazers_count: int = 0
    updated_at: Optional[datetime] = None
    html_url: str = ""

    @classmethod
    def from_github(cls, repo: Any) -> "RepositoryRecord":
        """Build a record from a PyGithub ``Repository`` (or anything shaped like one)."""
        return cls(
            name=repo.name,
            description=repo.description,
            private=bool(repo.private),
            default_branch=repo.default_branch,
            stargazers_count=repo.stargazers_count or 0,
            updated_at=repo.updated_at,
            html_url=repo.html_url or "",
        )


class RepositoryForm(BaseModel):
    name: str
    description: str = ""
    private: bool = False
    auto_init: bool = False

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        value = value.strip()
        if not is_valid_repository_name(value):
            raise ValueError(f"Invalid repository name: {value!r}")
        return value


class DeletionState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    EXECUTING = "executing"


class PendingDeletion(BaseModel):
    state: DeletionState = DeletionState.IDLE
    target: Optional[str] = None


class Session(BaseModel):
    access_token: Optional[str] = None
    current_user: Optional[UserProfile] = None
    # state parameter issued with the last authorize redirect
    oauth_state: Optional[str] = None

    @property
    def authenticated(self) -> bool:
        return bool(self.access_token)


# View models consumed by templates.py and api.py


class ListStatus(str, Enum):
    LOADING = "loading"
    LOADED = "loaded"
    EMPTY = "empty"
    ERROR = "error"


class RepositoryCard(BaseModel):
    model_config = ConfigDict(frozen=True)

    repository: RepositoryRecord
    edit_url: str
    delete_url: str

    @classmethod
    def for_repository(cls, repo: RepositoryRecord) -> "RepositoryCard":
        return cls(
            repository=repo,
            edit_url=f"/repos/{repo.name}/edit",
            delete_url=f"/repos/{repo.name}/delete",
        )


class RepositoryListView(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: ListStatus
    cards: List[RepositoryCard] = Field(default_factory=list)
    message: Optional[str] = None

    @property
    def repositories(self) -> List[RepositoryRecord]:
        return [card.repository for card in self.cards]


class AppView(BaseModel):
    model_config = ConfigDict(frozen=True)

    authenticated: bool
    user: Optional[UserProfile] = None
    repositories: Optional[RepositoryListView] = None
    pending_deletion: Optional[str] = None
    # set when the current location must be replaced (e.g. to drop ?code=)
    redirect_to: Optional[str] = None
