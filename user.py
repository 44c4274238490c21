from __future__ import annotations

from typing import Any, Dict


class User:
    """A registered account. ``password`` holds the salted hash, never the raw value."""

    def __init__(self, id: str, name: str, email: str, password: str, created_at: str | None = None) -> None:
        self.id = id
        self.name = name
        self.email = email
        self.password = password
        self.created_at = created_at

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.name} <{self.email}>"

    def public_dict(self) -> dict:
        """Fields safe to return to clients."""
        return {"name": self.name, "email": self.email}

    @staticmethod
    def from_row(row: Dict[str, Any]) -> "User":
        return User(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            password=row["password"],
            created_at=row["created_at"],
        )
