"""
Domain model representing a stored staff refresh token.
"""
from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass
class RefreshToken:
    id: int
    user_id: int
    token: str
    expires_at: datetime
    revoked: bool

    @property
    def is_expired(self) -> bool:
        return self.expires_at < datetime.now(tz=timezone.utc)

    @classmethod
    def from_row(cls, row) -> "RefreshToken":
        """Build a RefreshToken from a sqlite3.Row object."""
        expires_at = datetime.fromisoformat(row["expires_at"])
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            token=row["token"],
            expires_at=expires_at,
            revoked=bool(row["revoked"]),
        )
