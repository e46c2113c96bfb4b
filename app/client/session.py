"""Client-side authentication state.

The session is an explicit value passed to every client call; it is
loaded once at startup and cleared on logout.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class ClientSession:
    """Token and signed-in user as returned by login or register."""

    token: str | None = None
    user: dict[str, Any] = field(default_factory=dict)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @property
    def user_id(self) -> int | None:
        return self.user.get("id")

    @property
    def role(self) -> str | None:
        return self.user.get("role")

    def auth_headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    @classmethod
    def load(cls, path: str | os.PathLike) -> "ClientSession":
        """Read a saved session; a missing or unreadable file gives an empty one."""
        path = Path(path)
        if not path.exists():
            return cls()
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable session file {path}: {e}")
            return cls()
        if not isinstance(data, dict):
            logger.warning(f"Ignoring session file {path}: expected an object")
            return cls()
        return cls(token=data.get("token"), user=data.get("user") or {})

    def save(self, path: str | os.PathLike) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps({"token": self.token, "user": self.user}), encoding="utf-8")

    def clear(self, path: str | os.PathLike | None = None) -> None:
        """Forget the token and user, and remove the saved copy if given."""
        self.token = None
        self.user = {}
        if path is not None:
            Path(path).unlink(missing_ok=True)
