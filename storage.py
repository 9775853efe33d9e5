import logging
import os
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class TokenStore:
    """Single durable slot holding the raw GitHub access token.

    A missing, empty or unreadable file means "not authenticated". Writes
    replace the whole file. I/O errors are logged, never raised.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def get(self) -> Optional[str]:
        try:
            token = self.path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning(f"Could not read token file {self.path}: {e}")
            return None
        return token or None

    def set(self, token: str) -> bool:
        """Persist the token; False when it could only be kept in memory."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(token, encoding="utf-8")
        except OSError as e:
            logger.error(f"Could not write token file {self.path}: {e}")
            return False
        try:
            os.chmod(self.path, 0o600)
        except OSError as e:
            logger.warning(f"Could not restrict permissions on {self.path}: {e}")
        return True

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Could not remove token file {self.path}: {e}")
