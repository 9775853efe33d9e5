import re
from typing import Optional
from urllib.parse import urlencode

REPOSITORY_NAME_REGEX = re.compile(r'^[A-Za-z0-9._-]{1,100}$')


def is_valid_repository_name(name: str) -> bool:
    """Validate GitHub repository name format."""
    if name in ('.', '..'):
        return False
    return REPOSITORY_NAME_REGEX.match(name) is not None


def flash_url(path: str, message: str, kind: str = "info") -> str:
    """Build a redirect target carrying a one-shot flash message."""
    return f"{path}?{urlencode({'msg': message, 'kind': kind})}"


def flash_from_params(msg: Optional[str], kind: Optional[str]) -> Optional[dict]:
    if not msg:
        return None
    return {"message": msg, "kind": kind or "info"}
