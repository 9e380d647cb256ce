from __future__ import annotations

from typing import Any

from catalog.storage import StorageError, text_field


class Reader:
    """A registered library reader. Email is stored as given."""

    def __init__(self, id: int, name: str, email: str) -> None:
        self.id = id
        self.name = name
        self.email = email

    def __str__(self) -> str:  # pragma: no cover
        return f"#{self.id} {self.name} <{self.email}>"

    def __repr__(self) -> str:  # pragma: no cover
        return f"Reader(id={self.id!r}, name={self.name!r}, email={self.email!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Reader):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def to_dict(self) -> dict:
        return {"Id": self.id, "Name": self.name, "Email": self.email}

    @staticmethod
    def from_dict(data: Any) -> "Reader":
        if not isinstance(data, dict):
            raise StorageError(f"Expected a reader object, got {type(data).__name__}")
        reader_id = data.get("Id", 0)
        # bool is an int subclass; reject it explicitly
        if isinstance(reader_id, bool) or not isinstance(reader_id, int):
            raise StorageError(f"Reader Id must be an integer, got {reader_id!r}")
        return Reader(
            id=reader_id,
            name=text_field(data, "Name"),
            email=text_field(data, "Email"),
        )
