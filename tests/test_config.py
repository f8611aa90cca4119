"""
Unit tests for settings resolution from the environment.
"""

import unittest
from pathlib import Path

from courseregistry.config import load_settings
from courseregistry.storage import default_data_dir


class TestConfig(unittest.TestCase):
    def test_defaults(self) -> None:
        settings = load_settings({})
        self.assertEqual(settings.data_dir, default_data_dir())
        self.assertFalse(settings.cascade_students)
        self.assertEqual(settings.log_level, "WARNING")
        self.assertIsNone(settings.log_file)

    def test_environment_overrides(self) -> None:
        settings = load_settings(
            {
                "COURSEREGISTRY_DATA_DIR": "/tmp/registry",
                "COURSEREGISTRY_CASCADE_STUDENTS": "Yes",
                "COURSEREGISTRY_LOG_LEVEL": "debug",
                "COURSEREGISTRY_LOG_FILE": "/tmp/registry.log",
            }
        )
        self.assertEqual(settings.data_dir, Path("/tmp/registry"))
        self.assertTrue(settings.cascade_students)
        self.assertEqual(settings.log_level, "DEBUG")
        self.assertEqual(settings.log_file, Path("/tmp/registry.log"))

    def test_cascade_flag_falsy_values(self) -> None:
        for value in ["", "0", "no", "off", "false"]:
            with self.subTest(value=value):
                settings = load_settings({"COURSEREGISTRY_CASCADE_STUDENTS": value})
                self.assertFalse(settings.cascade_students)


if __name__ == "__main__":
    unittest.main()
