"""
Key-value persistence for the registry collections.

Each collection lives in its own named slot:

    courseTypes, courses, courseOfferings, students

JsonFileStorage keeps one file per slot:

    <data_dir>/<slot>.json

Storage contract:
- load(slot, default) never crashes on a missing or corrupted slot,
  it returns the default instead
- save(slot, value) overwrites the whole slot with the latest value
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """
    Raised when a slot cannot be written.
    """


def default_data_dir() -> Path:
    """
    Return the default directory for the slot files inside the package.

    Using a function instead of a constant makes testing easier,
    because tests can pass their own directory.
    """
    base_dir = Path(__file__).resolve().parent
    return base_dir / "data" / "store"


def _dump(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


class JsonFileStorage:
    """
    Stores every slot as a JSON file in one directory.
    """

    def __init__(self, data_dir: str | Path | None = None) -> None:
        self.data_dir = Path(data_dir) if data_dir is not None else default_data_dir()

    def slot_path(self, slot: str) -> Path:
        return self.data_dir / f"{slot}.json"

    def load(self, slot: str, default: Any) -> Any:
        """
        Load the value stored in a slot.

        Returns `default` if the slot file does not exist or is invalid.
        """
        path = self.slot_path(slot)

        # First run: nothing stored yet
        if not path.exists():
            logger.debug("Slot %s not found at %s, using default", slot, path)
            return default

        try:
            value = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as exc:
            logger.warning("Ignoring unreadable slot %s (%s): %s", slot, path, exc)
            return default

        logger.debug("Loaded slot %s from %s", slot, path)
        return value

    def save(self, slot: str, value: Any) -> None:
        """
        Save a JSON-serializable value to a slot, replacing the previous value.

        The file is written to a temp file first and then moved into place,
        so a slot is never left half-written.
        """
        path = self.slot_path(slot)
        tmp_name = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=path.parent, prefix=f".{slot}.", suffix=".tmp", delete=False
            ) as fh:
                tmp_name = fh.name
                fh.write(_dump(value))
            os.replace(tmp_name, path)
        except OSError as exc:
            logger.error("Could not save slot %s to %s: %s", slot, path, exc)
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Could not save {slot!r} to {path}: {exc}") from exc

        logger.debug("Saved slot %s to %s", slot, path)

    def clear(self) -> int:
        """
        Delete every slot file. Returns the number of removed files.
        """
        if not self.data_dir.exists():
            return 0

        removed = 0
        for path in sorted(self.data_dir.glob("*.json")):
            try:
                path.unlink()
            except OSError as exc:
                raise StorageError(f"Could not remove {path}: {exc}") from exc
            removed += 1
        logger.info("Removed %d slot files from %s", removed, self.data_dir)
        return removed


class MemoryStorage:
    """
    In-process storage with the same contract as JsonFileStorage.

    Values are kept as JSON text so that loading returns fresh copies,
    exactly like reading them back from disk.
    """

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._slots: dict[str, str] = {}
        self.writes: list[str] = []
        for slot, value in (initial or {}).items():
            self._slots[slot] = _dump(value)

    def load(self, slot: str, default: Any) -> Any:
        raw = self._slots.get(slot)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable slot %s", slot)
            return default

    def save(self, slot: str, value: Any) -> None:
        self._slots[slot] = _dump(value)
        self.writes.append(slot)

    def put_raw(self, slot: str, text: str) -> None:
        """
        Store raw text in a slot (used to simulate corrupted data).
        """
        self._slots[slot] = text

    def clear(self) -> int:
        removed = len(self._slots)
        self._slots.clear()
        return removed
