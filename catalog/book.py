from __future__ import annotations

from typing import Any

from catalog.storage import StorageError, text_field


class Book:
    """Represents a single book in the catalog."""

    def __init__(self, title: str, author: str, isbn: str, is_available: bool = True) -> None:
        self.title = title
        self.author = author
        self.isbn = isbn
        self.is_available = is_available

    def mark_as_loaned(self) -> None:
        self.is_available = False

    def mark_as_available(self) -> None:
        self.is_available = True

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        status = "Available" if self.is_available else "Loaned"
        return f"{self.title} by {self.author} (ISBN: {self.isbn}) [{status}]"

    def __repr__(self) -> str:  # pragma: no cover
        return f"Book(title={self.title!r}, author={self.author!r}, isbn={self.isbn!r}, is_available={self.is_available!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Book):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def to_dict(self) -> dict:
        return {
            "Title": self.title,
            "Author": self.author,
            "ISBN": self.isbn,
            "IsAvailable": self.is_available,
        }

    @staticmethod
    def from_dict(data: Any) -> "Book":
        if not isinstance(data, dict):
            raise StorageError(f"Expected a book object, got {type(data).__name__}")
        is_available = data.get("IsAvailable", True)
        if not isinstance(is_available, bool):
            raise StorageError(f"IsAvailable must be a boolean, got {is_available!r}")
        return Book(
            title=text_field(data, "Title"),
            author=text_field(data, "Author"),
            isbn=text_field(data, "ISBN"),
            is_available=is_available,
        )
