import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form
from fastapi.responses import HTMLResponse, RedirectResponse, StreamingResponse
from pydantic import ValidationError

from auth import get_manager
from github_operations import RepositoryOperationError
from manager import LOADING_VIEW, DeletionStateError, NotAuthenticatedError, RepositoryManager
from models import RepositoryForm
from templates import (
    get_login_template,
    get_main_template,
    main_page_end,
    main_page_start,
    render_loaded_list,
    render_repository_list,
    render_repository_modal,
)
from utils import flash_from_params, flash_url

logger = logging.getLogger(__name__)

router = APIRouter()


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=303)


def _form_error(e: ValidationError) -> str:
    errors = e.errors()
    return errors[0]["msg"] if errors else "Invalid form data"


@router.get("/auth/login")
async def auth_login(manager: RepositoryManager = Depends(get_manager)):
    """Redirect to GitHub OAuth page."""
    return RedirectResponse(manager.initiate_login())


@router.get("/logout")
async def logout_user(manager: RepositoryManager = Depends(get_manager)):
    """Logout the user."""
    manager.logout()
    return _redirect("/")


@router.get("/", response_class=HTMLResponse)
async def read_root(
    code: Optional[str] = None,
    state: Optional[str] = None,
    modal: Optional[str] = None,
    msg: Optional[str] = None,
    kind: Optional[str] = None,
    manager: RepositoryManager = Depends(get_manager),
):
    """Show the repository list or the login page; also the OAuth callback target."""
    flash = flash_from_params(msg, kind)
    if code:
        view = await manager.start_session(code, state)
        return _redirect(view.redirect_to or "/")
    if not manager.session.authenticated:
        return HTMLResponse(get_login_template(flash))

    modal_html = render_repository_modal() if modal == "create" else ""
    return StreamingResponse(_stream_main_page(manager, flash, modal_html), media_type="text/html")


async def _stream_main_page(manager: RepositoryManager, flash: Optional[dict], modal_html: str):
    """Send the page shell with the loading block, then the list once GitHub answers."""
    user = await manager.ensure_user_profile()
    yield main_page_start(user, flash)
    yield render_repository_list(LOADING_VIEW)
    repositories = await manager.list_repositories()
    yield render_loaded_list(repositories)
    yield main_page_end(manager.deletion.target, modal_html)


@router.get("/repos/{name}/edit", response_class=HTMLResponse)
async def edit_repository(name: str, manager: RepositoryManager = Depends(get_manager)):
    """Show the edit modal pre-filled with the repository's current values."""
    try:
        repo = await manager.get_repository(name)
    except NotAuthenticatedError:
        return _redirect("/")
    except RepositoryOperationError as e:
        return _redirect(flash_url("/", f"Error: {e.message}", "error"))

    view = await manager.start_session()
    return HTMLResponse(get_main_template(view, modal=render_repository_modal(repo)))


@router.post("/repos")
async def create_repository(
    name: str = Form(...),
    description: str = Form(""),
    private: Optional[str] = Form(None),
    auto_init: Optional[str] = Form(None),
    manager: RepositoryManager = Depends(get_manager),
):
    """Handle the create form submission."""
    try:
        form = RepositoryForm(
            name=name,
            description=description,
            private=private is not None,
            auto_init=auto_init is not None,
        )
        repo = await manager.create_repository(form)
    except NotAuthenticatedError:
        return _redirect("/")
    except ValidationError as e:
        return _redirect(flash_url("/", f"Error: {_form_error(e)}", "error"))
    except RepositoryOperationError as e:
        return _redirect(flash_url("/", f"Error: {e.message}", "error"))
    return _redirect(flash_url("/", f"Created repository {repo.name}"))


@router.post("/repos/{name}")
async def update_repository(
    name: str,
    description: str = Form(""),
    private: Optional[str] = Form(None),
    manager: RepositoryManager = Depends(get_manager),
):
    """Handle the edit form submission. The path name is authoritative."""
    try:
        form = RepositoryForm(name=name, description=description, private=private is not None)
        repo = await manager.update_repository(name, form)
    except NotAuthenticatedError:
        return _redirect("/")
    except ValidationError as e:
        return _redirect(flash_url("/", f"Error: {_form_error(e)}", "error"))
    except RepositoryOperationError as e:
        return _redirect(flash_url("/", f"Error: {e.message}", "error"))
    return _redirect(flash_url("/", f"Updated repository {repo.name}"))


@router.post("/repos/{name}/delete")
async def request_delete(name: str, manager: RepositoryManager = Depends(get_manager)):
    """Record the delete intent; the main page then shows the confirmation modal."""
    try:
        manager.request_delete(name)
    except NotAuthenticatedError:
        return _redirect("/")
    except DeletionStateError as e:
        return _redirect(flash_url("/", str(e), "error"))
    return _redirect("/")


@router.post("/deletion/cancel")
async def cancel_delete(manager: RepositoryManager = Depends(get_manager)):
    manager.cancel_delete()
    return _redirect("/")


@router.post("/deletion/confirm")
async def confirm_delete(manager: RepositoryManager = Depends(get_manager)):
    try:
        name = await manager.confirm_delete()
    except NotAuthenticatedError:
        return _redirect("/")
    except DeletionStateError:
        return _redirect("/")
    except RepositoryOperationError as e:
        return _redirect(flash_url("/", f"Error deleting repository: {e.message}", "error"))
    return _redirect(flash_url("/", f"Deleted repository {name}"))
