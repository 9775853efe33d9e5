from html import escape
from typing import Optional

from models import AppView, ListStatus, RepositoryCard, RepositoryListView, RepositoryRecord, UserProfile

BASE_STYLE = """
    body {
        font-family: 'Inter', -apple-system, BlinkMacSystemFont, sans-serif;
        margin: 0;
        background: #f6f8fa;
        color: #1f2937;
    }
    header {
        display: flex;
        justify-content: space-between;
        align-items: center;
        padding: 1rem 2rem;
        background: #24292e;
        color: white;
    }
    header a { color: white; }
    main { max-width: 880px; margin: 2rem auto; padding: 0 1rem; }
    .user-avatar { width: 32px; height: 32px; border-radius: 50%; vertical-align: middle; }
    .repo-card { background: white; border-radius: 8px; padding: 1rem 1.5rem; margin-bottom: 1rem; }
    .repo-header { display: flex; justify-content: space-between; align-items: center; }
    .repo-meta span { margin-right: 1rem; color: #6b7280; font-size: 0.875rem; }
    .repo-actions form { display: inline; }
    .alert { padding: 0.75rem 1rem; border-radius: 6px; margin-bottom: 1rem; background: #e0f2fe; }
    .alert.error, .error { background: #fee2e2; color: #991b1b; }
    .loading { padding: 2rem; text-align: center; color: #6b7280; }
    .modal { position: fixed; inset: 0; background: rgba(0, 0, 0, 0.4); display: flex; }
    .modal-content { background: white; margin: auto; padding: 2rem; border-radius: 8px; min-width: 420px; }
    .form-group { margin-bottom: 1rem; }
    button, .btn {
        background-color: #24292e;
        color: white;
        padding: 0.5rem 1rem;
        border: none;
        border-radius: 4px;
        cursor: pointer;
        text-decoration: none;
    }
    .btn-danger { background-color: #cf222e; }
    .btn-warning { background-color: #9a6700; }
"""


PAGE_END = """
        </body>
    </html>
    """


def _page_start(title: str) -> str:
    return f"""
    <!DOCTYPE html>
    <html>
        <head>
            <title>{escape(title)}</title>
            <style>{BASE_STYLE}</style>
        </head>
        <body>
    """


def _page(title: str, body: str) -> str:
    return f"{_page_start(title)}{body}{PAGE_END}"


def _flash(flash: Optional[dict]) -> str:
    if not flash:
        return ""
    kind = "error" if flash.get("kind") == "error" else "info"
    return f'<div class="alert {kind}" role="alert">{escape(flash["message"])}</div>'


def _header(user: Optional[UserProfile], authenticated: bool) -> str:
    user_info = ""
    if user is not None:
        user_info = (
            f'<img src="{escape(user.avatar_url)}" alt="{escape(user.login)}" class="user-avatar"> '
            f"<span>{escape(user.login)}</span>"
        )
    action = '<a href="/logout">Logout</a>' if authenticated else '<a href="/auth/login">Login with GitHub</a>'
    return f"""
    <header>
        <h1>GitHub Repository Manager</h1>
        <div id="userInfo">{user_info} {action}</div>
    </header>
    """


def get_login_template(flash: Optional[dict] = None) -> str:
    """Get the login page HTML template."""
    body = f"""
    {_header(None, False)}
    <main id="loginPrompt">
        {_flash(flash)}
        <h2>Login Required</h2>
        <p>Please log in with GitHub to manage your repositories.</p>
        <a href="/auth/login"><button>Login with GitHub</button></a>
    </main>
    """
    return _page("Login Required", body)


def render_repository_card(card: RepositoryCard) -> str:
    repo = card.repository
    updated = repo.updated_at.date().isoformat() if repo.updated_at else ""
    return f"""
    <div class="repo-card">
        <div class="repo-header">
            <a href="{escape(repo.html_url)}" target="_blank" class="repo-name">{escape(repo.name)}</a>
            <div class="repo-actions">
                <a class="btn btn-warning" href="{escape(card.edit_url)}">Edit</a>
                <form method="post" action="{escape(card.delete_url)}">
                    <button class="btn btn-danger" type="submit">Delete</button>
                </form>
            </div>
        </div>
        <p class="repo-description">{escape(repo.description or 'No description provided')}</p>
        <div class="repo-meta">
            <span>{escape(repo.default_branch or '')}</span>
            <span>&#9733; {repo.stargazers_count}</span>
            <span>{'Private' if repo.private else 'Public'}</span>
            <span>{updated}</span>
        </div>
    </div>
    """


def render_repository_list(view: RepositoryListView) -> str:
    if view.status == ListStatus.LOADING:
        return f'<div class="loading" id="reposLoading">{escape(view.message or "Loading repositories...")}</div>'
    if view.status == ListStatus.ERROR:
        return f'<div class="error">{escape(view.message or "")}</div>'
    if view.status == ListStatus.EMPTY:
        return f'<div class="loading">{escape(view.message or "")}</div>'
    return "".join(render_repository_card(card) for card in view.cards)


def render_repository_modal(repo: Optional[RepositoryRecord] = None) -> str:
    """Create modal when ``repo`` is None, edit modal pre-filled from ``repo`` otherwise."""
    editing = repo is not None
    title = "Edit Repository" if editing else "Create New Repository"
    action = f"/repos/{escape(repo.name)}" if editing else "/repos"
    name_field = (
        f'<input type="text" id="repoName" name="name" value="{escape(repo.name)}" readonly>'
        if editing
        else '<input type="text" id="repoName" name="name" required>'
    )
    description = escape(repo.description or "") if editing else ""
    private_checked = "checked" if editing and repo.private else ""
    readme_field = "" if editing else """
                <div class="form-group">
                    <label><input type="checkbox" id="repoReadme" name="auto_init"> Initialize with README</label>
                </div>"""
    return f"""
    <div class="modal" id="repoModal">
        <div class="modal-content">
            <h2 id="modalTitle">{title}</h2>
            <form id="repoForm" method="post" action="{action}">
                <div class="form-group">
                    <label for="repoName">Repository name</label>
                    {name_field}
                </div>
                <div class="form-group">
                    <label for="repoDescription">Description</label>
                    <textarea id="repoDescription" name="description">{description}</textarea>
                </div>
                <div class="form-group">
                    <label><input type="checkbox" id="repoPrivate" name="private" {private_checked}> Private</label>
                </div>{readme_field}
                <a class="btn" href="/" id="cancelBtn">Cancel</a>
                <button type="submit" id="submitBtn">{'Update Repository' if editing else 'Create Repository'}</button>
            </form>
        </div>
    </div>
    """


def render_confirm_modal(name: str) -> str:
    return f"""
    <div class="modal" id="confirmModal">
        <div class="modal-content">
            <p id="confirmMessage">Are you sure you want to delete "{escape(name)}"? This action cannot be undone.</p>
            <form method="post" action="/deletion/cancel" style="display: inline">
                <button type="submit" id="confirmCancel">Cancel</button>
            </form>
            <form method="post" action="/deletion/confirm" style="display: inline">
                <button class="btn-danger" type="submit" id="confirmAction">Delete</button>
            </form>
        </div>
    </div>
    """


def main_page_start(user: Optional[UserProfile], flash: Optional[dict] = None) -> str:
    """Everything up to the opening of the repository list container."""
    return f"""{_page_start("GitHub Repository Manager")}
    {_header(user, True)}
    <main id="mainContent">
        {_flash(flash)}
        <div class="toolbar">
            <a class="btn" href="/?modal=create" id="createRepoBtn">New Repository</a>
            <a class="btn" href="/" id="refreshBtn">Refresh</a>
        </div>
        <div id="reposList">
    """


def render_loaded_list(view: RepositoryListView) -> str:
    """Final list for a page whose loading block was already sent."""
    return f"<style>#reposLoading {{ display: none; }}</style>{render_repository_list(view)}"


def main_page_end(pending_deletion: Optional[str] = None, modal: str = "") -> str:
    if not modal and pending_deletion:
        modal = render_confirm_modal(pending_deletion)
    return f"""
        </div>
    </main>
    {modal}
    {PAGE_END}"""


def get_main_template(view: AppView, flash: Optional[dict] = None, modal: str = "") -> str:
    """Get the main application page with the repository list and any open modal."""
    repositories = render_repository_list(view.repositories) if view.repositories else ""
    return (
        main_page_start(view.user, flash)
        + repositories
        + main_page_end(view.pending_deletion, modal)
    )
