import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from auth import get_manager
from github_operations import RepositoryOperationError
from manager import DeletionStateError, RepositoryManager
from models import ListStatus, PendingDeletion, RepositoryForm, RepositoryRecord

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


class DeletionRequest(BaseModel):
    name: str


class RepositoryUpdate(BaseModel):
    description: str = ""
    private: bool = False


async def require_session(manager: RepositoryManager = Depends(get_manager)) -> RepositoryManager:
    """Reject the request unless a GitHub token is active."""
    if not manager.session.authenticated:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return manager


def _operation_error(e: RepositoryOperationError) -> HTTPException:
    status = e.status if e.status and 400 <= e.status < 600 else 502
    return HTTPException(status_code=status, detail=e.message)


@router.get("/session")
async def get_session(manager: RepositoryManager = Depends(get_manager)):
    """Who is signed in, if anyone."""
    session = manager.session
    if session.authenticated and session.current_user is None:
        await manager.load_user_profile()
    return {
        "authenticated": session.authenticated,
        "user": session.current_user.model_dump() if session.current_user else None,
    }


@router.get("/repositories", response_model=List[RepositoryRecord])
async def get_repositories(manager: RepositoryManager = Depends(require_session)):
    """Get the user's repositories, most recently updated first."""
    view = await manager.list_repositories()
    if view.status == ListStatus.ERROR:
        raise HTTPException(status_code=502, detail=view.message)
    return view.repositories


@router.post("/repositories", response_model=RepositoryRecord, status_code=201)
async def create_repository(form: RepositoryForm, manager: RepositoryManager = Depends(require_session)):
    try:
        return await manager.create_repository(form)
    except RepositoryOperationError as e:
        raise _operation_error(e)


@router.patch("/repositories/{name}", response_model=RepositoryRecord)
async def update_repository(name: str, data: RepositoryUpdate, manager: RepositoryManager = Depends(require_session)):
    try:
        form = RepositoryForm(name=name, description=data.description, private=data.private)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    try:
        return await manager.update_repository(name, form)
    except RepositoryOperationError as e:
        raise _operation_error(e)


@router.get("/deletion", response_model=PendingDeletion)
async def get_deletion(manager: RepositoryManager = Depends(require_session)):
    return manager.deletion


@router.post("/deletion", response_model=PendingDeletion)
async def request_deletion(data: DeletionRequest, manager: RepositoryManager = Depends(require_session)):
    """Start the two-step delete; nothing is removed until confirmed."""
    try:
        return manager.request_delete(data.name)
    except DeletionStateError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/deletion/confirm")
async def confirm_deletion(manager: RepositoryManager = Depends(require_session)):
    try:
        name = await manager.confirm_delete()
    except DeletionStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except RepositoryOperationError as e:
        raise _operation_error(e)
    return {"deleted": name}


@router.delete("/deletion", response_model=PendingDeletion)
async def cancel_deletion(manager: RepositoryManager = Depends(require_session)):
    return manager.cancel_delete()
