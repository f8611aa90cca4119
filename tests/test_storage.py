"""
Unit tests for the key-value storage backends.

Storage contract:
- Missing/invalid slot -> default value
- save() replaces the whole slot
- one JSON file per slot: <data_dir>/<slot>.json
"""

import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from courseregistry.storage import JsonFileStorage, MemoryStorage, StorageError


class TestJsonFileStorage(unittest.TestCase):
    def test_load_missing_slot_returns_default(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            storage = JsonFileStorage(Path(d) / "store")
            self.assertEqual(storage.load("courses", []), [])

    def test_save_and_load_roundtrip(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            storage = JsonFileStorage(Path(d) / "store")
            value = [{"id": "c1", "name": "Mathématiques"}]
            storage.save("courses", value)

            self.assertEqual(storage.load("courses", []), value)

            # one readable JSON file per slot
            path = Path(d) / "store" / "courses.json"
            self.assertTrue(path.exists())
            self.assertEqual(json.loads(path.read_text(encoding="utf-8")), value)
            self.assertIn("Mathématiques", path.read_text(encoding="utf-8"))

    def test_save_overwrites_previous_value(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            storage = JsonFileStorage(d)
            storage.save("students", [{"id": "s1"}])
            storage.save("students", [])
            self.assertEqual(storage.load("students", None), [])
            # no temp files are left behind
            self.assertEqual(sorted(p.name for p in Path(d).iterdir()), ["students.json"])

    def test_load_corrupted_slot_returns_default(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            storage = JsonFileStorage(d)
            storage.slot_path("courseTypes").write_text("{not json", encoding="utf-8")

            with self.assertLogs("courseregistry.storage", level="WARNING"):
                self.assertEqual(storage.load("courseTypes", []), [])

    def test_save_failure_raises_storage_error(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            storage = JsonFileStorage(d)
            with mock.patch("courseregistry.storage.os.replace", side_effect=OSError("disk full")):
                with self.assertLogs("courseregistry.storage", level="ERROR"):
                    with self.assertRaises(StorageError):
                        storage.save("courses", [])
            self.assertEqual(list(Path(d).iterdir()), [])

    def test_clear_removes_slot_files(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            storage = JsonFileStorage(Path(d) / "store")
            self.assertEqual(storage.clear(), 0)

            storage.save("courses", [])
            storage.save("students", [])
            self.assertEqual(storage.clear(), 2)
            self.assertEqual(storage.load("courses", "default"), "default")


class TestMemoryStorage(unittest.TestCase):
    def test_load_returns_copies(self) -> None:
        storage = MemoryStorage({"courses": [{"id": "c1", "name": "Math"}]})
        loaded = storage.load("courses", [])
        loaded.append({"id": "c2"})
        self.assertEqual(storage.load("courses", []), [{"id": "c1", "name": "Math"}])

    def test_corrupted_slot_returns_default(self) -> None:
        storage = MemoryStorage()
        storage.put_raw("courses", "[")
        self.assertEqual(storage.load("courses", []), [])

    def test_writes_are_recorded(self) -> None:
        storage = MemoryStorage()
        storage.save("courses", [])
        storage.save("students", [])
        self.assertEqual(storage.writes, ["courses", "students"])


if __name__ == "__main__":
    unittest.main()
