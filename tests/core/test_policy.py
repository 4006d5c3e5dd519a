"""
Tests for the strict validation policy.
"""

import pytest


class TestStrictTaskPolicy:
    """Tests for StrictTaskPolicy."""

    @pytest.mark.parametrize("priority", [1, 3, 5])
    def test_accepts_priority_in_range(self, priority):
        from tasktable.policy import StrictTaskPolicy

        StrictTaskPolicy().check({"priority": priority})

    @pytest.mark.parametrize("priority", [0, 6, 2.5, -1])
    def test_rejects_priority_out_of_range(self, priority):
        from tasktable.errors import ValidationError
        from tasktable.policy import StrictTaskPolicy

        with pytest.raises(ValidationError) as exc:
            StrictTaskPolicy().check({"priority": priority})

        assert "priority" in str(exc.value)

    def test_accepts_known_metadata_keys(self):
        from tasktable.policy import StrictTaskPolicy

        StrictTaskPolicy().check({
            "metadata": {"assignee": "Alice", "dueDate": "2026-11-01", "category": ""},
        })

    def test_rejects_unknown_metadata_keys(self):
        from tasktable.errors import ValidationError
        from tasktable.policy import StrictTaskPolicy

        with pytest.raises(ValidationError) as exc:
            StrictTaskPolicy().check({"metadata": {"assignee": "Alice", "sprint": "42"}})

        assert "sprint" in str(exc.value)

    def test_rejects_non_string_metadata_values(self):
        from tasktable.errors import ValidationError
        from tasktable.policy import StrictTaskPolicy

        with pytest.raises(ValidationError):
            StrictTaskPolicy().check({"metadata": {"assignee": ["Alice", "Bob"]}})

    def test_ignores_fields_it_does_not_govern(self):
        from tasktable.policy import StrictTaskPolicy

        StrictTaskPolicy().check({"title": "x", "tags": [1, 2], "completed": True})
