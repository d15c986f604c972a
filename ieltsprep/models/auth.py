"""Authentication data models."""

from dataclasses import dataclass, asdict
from typing import Any, Dict

ROLE_ADMIN = "admin"
ROLE_TEST_TAKER = "test_taker"


@dataclass
class UserSession:
    """Logged-in user as returned by the login endpoint."""
    email: str
    token: str
    role: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserSession":
        return cls(
            email=data.get("email") or "",
            token=data.get("token") or "",
            role=data.get("role") or "",
        )
