"""On-disk storage for the logged-in user."""

import json
import logging
from pathlib import Path
from typing import Optional

from ..models.auth import UserSession

logger = logging.getLogger(__name__)


class CredentialStore:
    """Keeps ``{email, token, role}`` in a JSON file under the data directory."""

    def __init__(self, data_dir: str = "./data", filename: str = "user.json"):
        """Initialize the store.

        Args:
            data_dir: Base directory for client data
            filename: Name of the JSON file holding the user
        """
        self.data_dir = Path(data_dir)
        self.path = self.data_dir / filename

    def save(self, user: UserSession) -> str:
        """Write the user to disk and return the file path."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(user.to_dict(), f, indent=2)
        self.path.chmod(0o600)
        logger.info(f"Saved login for {user.email} to {self.path}")
        return str(self.path)

    def load(self) -> Optional[UserSession]:
        """Read the stored user, or None when nobody is logged in."""
        if not self.path.exists():
            return None
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable credentials file {self.path}: {e}")
            return None
        if not isinstance(data, dict):
            return None
        return UserSession.from_dict(data)

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
            logger.info(f"Removed stored login {self.path}")
