"""JSON file persistence for the catalog.

Each collection (books, readers, loans) lives in its own file holding a single
JSON array. A missing file reads as an empty collection; anything that cannot
be parsed as an array raises ``StorageError`` so the caller can decide how to
recover.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, List, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


class StorageError(Exception):
    """Raised when a catalog file cannot be read, parsed or written."""

    def __init__(self, message: str, destination: PathLike | None = None) -> None:
        super().__init__(message)
        self.destination = str(destination) if destination is not None else None

    def __str__(self) -> str:
        message = super().__str__()
        if self.destination:
            return f"{self.destination}: {message}"
        return message


class JsonStorage:
    """Reads and writes JSON array documents."""

    def __init__(self, indent: int = 4) -> None:
        self.indent = indent

    def read(self, destination: PathLike) -> List[Any]:
        path = Path(destination)
        if not path.exists():
            logger.debug("No data file at %s, starting with an empty collection", path)
            return []
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StorageError(f"Malformed JSON ({e.msg} at line {e.lineno})", path) from e
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Could not read file: {e}", path) from e

        if not isinstance(data, list):
            raise StorageError(f"Expected a JSON array, got {type(data).__name__}", path)
        return data

    def write(self, records: List[Any], destination: PathLike) -> None:
        """Write records as JSON, replacing the destination atomically."""
        path = Path(destination)
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=self.indent, ensure_ascii=False)
            os.replace(tmp_path, path)
        except OSError as e:
            try:
                if tmp_path.exists():
                    tmp_path.unlink()
            except OSError:
                logger.debug("Could not remove temp file %s", tmp_path)
            raise StorageError(f"Could not write file: {e}", path) from e
        logger.debug("Wrote %d records to %s", len(records), path)


def text_field(data: dict, key: str, default: str | None = "", allow_none: bool = False) -> str | None:
    """Return ``data[key]`` as a string, rejecting values of any other JSON type."""
    value = data.get(key, default)
    if value is None and allow_none:
        return None
    if not isinstance(value, str):
        raise StorageError(f"{key} must be a string, got {value!r}")
    return value
