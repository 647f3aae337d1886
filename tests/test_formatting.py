"""
Tests for utils/formatting.py and utils/strings.py — display helpers.
"""
import pytest

from utils.formatting import (
    format_count,
    format_phone_number,
    results_summary,
)
from utils.strings import strip_angle_brackets


class TestFormatPhoneNumber:
    @pytest.mark.parametrize("value, expected", [
        (5551234567, "(555) 123-4567"),
        (15551234567, "1 (555) 123-4567"),
        (25551234567, "25551234567"),
        (12345, "12345"),
        (None, "-"),
    ])
    def test_format(self, value, expected):
        assert format_phone_number(value) == expected


class TestFormatCount:
    def test_thousands(self):
        assert format_count(1234567) == "1,234,567"

    def test_none(self):
        assert format_count(None) == "-"


class TestResultsSummary:
    def test_middle_page(self):
        assert results_summary(45, 2, 20) == "Showing 21-40 of 45 advocates"

    def test_last_partial_page(self):
        assert results_summary(45, 3, 20) == "Showing 41-45 of 45 advocates"

    def test_single_result(self):
        assert results_summary(1, 1, 20) == "Showing 1-1 of 1 advocate"

    def test_with_search(self):
        assert results_summary(3, 1, 20, "onco") == 'Showing 1-3 of 3 advocates matching "onco"'

    def test_no_results(self):
        assert results_summary(0, 1, 20) == "No advocates found"
        assert results_summary(0, 1, 20, "xyz") == 'No advocates match "xyz"'

    def test_page_past_the_end(self):
        assert results_summary(45, 4, 20) == "No results on page 4 of 45 advocates"


class TestStrings:
    def test_strip_angle_brackets(self):
        assert strip_angle_brackets("<script>alert(1)</script>") == "scriptalert(1)/script"
        assert strip_angle_brackets("Chicago") == "Chicago"

    def test_strip_angle_brackets_empty(self):
        assert strip_angle_brackets("") == ""
        assert strip_angle_brackets(None) == ""


class TestPackageExports:
    def test_all_names_resolve(self):
        import utils
        for name in utils.__all__:
            assert hasattr(utils, name), name

    def test_only_used_helpers_exported(self):
        import utils
        assert "normalize_whitespace" not in utils.__all__
        assert "format_specialties" not in utils.__all__
