"""Durable key/value storage for persisted application records.

A storage holds JSON-compatible values under fixed string keys, in the manner
of a browser's local storage. Writes are synchronous and complete before the
call returns, so a process that exits right after a write keeps the data.

Usage:
    storage = JsonFileStorage(Path(".geomind/state.json"))
    storage.write("geomind_vendors", [shop.model_dump(mode="json") for shop in shops])
    raw = storage.read("geomind_vendors")
"""

import json
import os
import tempfile
from abc import ABC, abstractmethod
from copy import deepcopy
from pathlib import Path
from typing import Any, Optional

import structlog

from geomind.core.exceptions import StorageError

logger = structlog.get_logger(__name__)


class KeyValueStorage(ABC):
    """Abstract record store keyed by string."""

    @abstractmethod
    def read(self, key: str) -> Optional[Any]:
        """Return the value stored under ``key``, or None when absent.

        Raises:
            StorageError: If the backing store exists but cannot be decoded.
        """

    @abstractmethod
    def write(self, key: str, value: Any) -> None:
        """Replace the value stored under ``key``.

        Raises:
            StorageError: If the value could not be made durable.
        """

    def is_writable(self) -> bool:
        """Check whether writes can currently succeed."""
        return True


class InMemoryStorage(KeyValueStorage):
    """Process-local storage, used in tests and when persistence is disabled."""

    def __init__(self, initial: Optional[dict[str, Any]] = None) -> None:
        self._data: dict[str, Any] = deepcopy(initial) if initial else {}

    def read(self, key: str) -> Optional[Any]:
        value = self._data.get(key)
        return deepcopy(value) if value is not None else None

    def write(self, key: str, value: Any) -> None:
        self._data[key] = deepcopy(value)


class JsonFileStorage(KeyValueStorage):
    """
    Storage backed by a single JSON document on disk.

    The document is a JSON object mapping keys to values. Each write rewrites
    the whole document through a temporary file that is fsynced and then moved
    over the original, so readers never observe a half-written file.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                document = json.load(fh)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(
                f"Unreadable storage document: {e}",
                {"path": str(self.path)},
            ) from e
        if not isinstance(document, dict):
            raise StorageError(
                "Storage document is not a JSON object",
                {"path": str(self.path), "type": type(document).__name__},
            )
        return document

    def read(self, key: str) -> Optional[Any]:
        return self._load().get(key)

    def write(self, key: str, value: Any) -> None:
        try:
            document = self._load()
        except StorageError:
            logger.warning("storage_document_replaced", path=str(self.path))
            document = {}
        document[key] = value

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(document, fh, ensure_ascii=False, indent=2)
                    fh.flush()
                    os.fsync(fh.fileno())
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as e:
            logger.error("storage_write_failed", path=str(self.path), key=key, error=str(e))
            raise StorageError(
                f"Failed to write storage document: {e}",
                {"path": str(self.path), "key": key},
            ) from e

        logger.debug("storage_written", path=str(self.path), key=key)

    def is_writable(self) -> bool:
        directory = self.path.parent
        if directory.exists():
            return os.access(directory, os.W_OK)
        # Directory is created on first write; check the nearest existing parent.
        for parent in directory.parents:
            if parent.exists():
                return os.access(parent, os.W_OK)
        return False
