"""
Unit tests for presentation-layer input validation.
"""

import unittest

from courseregistry.registry import Registry
from courseregistry.storage import MemoryStorage
from courseregistry.validation import (
    ValidationError,
    require_email,
    require_name,
    require_offering,
    require_offering_selection,
)


class TestValidation(unittest.TestCase):
    def test_require_name(self) -> None:
        self.assertEqual(require_name("  Math ", "Course name"), "Math")
        with self.assertRaises(ValidationError) as ctx:
            require_name("   ", "Course name")
        self.assertEqual(str(ctx.exception), "Course name is required")
        with self.assertRaises(ValidationError):
            require_name(None, "Student name")

    def test_require_email(self) -> None:
        self.assertEqual(require_email(" ana@x.com "), "ana@x.com")
        with self.assertRaises(ValidationError) as ctx:
            require_email("")
        self.assertEqual(str(ctx.exception), "Student email is required")

        for bad in ["ana", "ana@x", "a na@x.com", "ana@@x.com", "@x.com"]:
            with self.subTest(email=bad):
                with self.assertRaises(ValidationError) as ctx:
                    require_email(bad)
                self.assertEqual(str(ctx.exception), "Please enter a valid email address")

    def test_validation_error_is_value_error(self) -> None:
        self.assertTrue(issubclass(ValidationError, ValueError))

    def test_offering_selection(self) -> None:
        registry = Registry(MemoryStorage())
        ct = registry.add_course_type("Group")
        c = registry.add_course("Math")

        self.assertEqual(require_offering_selection(registry, c.id, ct.id), (c.id, ct.id))

        with self.assertRaises(ValidationError) as ctx:
            require_offering_selection(registry, "", ct.id)
        self.assertEqual(str(ctx.exception), "Please select a course")

        with self.assertRaises(ValidationError) as ctx:
            require_offering_selection(registry, c.id, None)
        self.assertEqual(str(ctx.exception), "Please select a course type")

        with self.assertRaises(ValidationError):
            require_offering_selection(registry, "missing", ct.id)
        with self.assertRaises(ValidationError):
            require_offering_selection(registry, c.id, "missing")

    def test_require_offering(self) -> None:
        registry = Registry(MemoryStorage())
        o = registry.add_course_offering("c", "t")
        self.assertEqual(require_offering(registry, o.id), o.id)
        with self.assertRaises(ValidationError):
            require_offering(registry, "missing")
        with self.assertRaises(ValidationError):
            require_offering(registry, "")


if __name__ == "__main__":
    unittest.main()
