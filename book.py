from __future__ import annotations

from typing import Any, Dict

from validators import FieldValidator

REQUIRED_FIELDS = ("title", "author", "isbn")

# JSON field name -> books table column
COLUMNS = {
    "title": "title",
    "author": "author",
    "isbn": "isbn",
    "available": "available",
    "borrowedBy": "borrowed_by",
}


class Book:
    """Represents a single book record in the catalog."""

    def __init__(self, id: str, title: str, author: str, isbn: str, available: bool = True,
                 borrowed_by: str | None = None) -> None:
        self.id = id
        self.title = title
        self.author = author
        self.isbn = isbn
        self.available = available
        self.borrowed_by = borrowed_by

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.title} by {self.author} (ISBN: {self.isbn})"

    def to_dict(self) -> dict:
        return {
            "_id": self.id,
            "title": self.title,
            "author": self.author,
            "isbn": self.isbn,
            "available": self.available,
            "borrowedBy": self.borrowed_by,
        }

    @staticmethod
    def from_row(row: Dict[str, Any]) -> "Book":
        return Book(
            id=row["id"],
            title=row["title"],
            author=row["author"],
            isbn=row["isbn"],
            available=bool(row["available"]),
            borrowed_by=row["borrowed_by"],
        )


def cast_fields(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Return the known book fields of ``payload`` cast to their stored types.

    Unknown keys, ``_id`` included, are dropped.
    """
    fields: Dict[str, Any] = {}
    for key, value in payload.items():
        if key not in COLUMNS:
            continue
        if key == "available":
            if value is None:
                continue
            fields[key] = FieldValidator.cast_bool(key, value)
        else:
            fields[key] = FieldValidator.cast_text(key, value)
    return fields


def build_new_book(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Validate a create payload and fill in defaults."""
    fields = cast_fields(payload)
    FieldValidator.require("Book", fields, REQUIRED_FIELDS)
    if fields.get("available") is None:
        fields["available"] = True
    fields.setdefault("borrowedBy", None)
    return fields
