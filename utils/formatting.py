"""Output formatting utilities for the advocate directory.

Provides reusable functions for:
- Formatting phone numbers for display
- Result summary lines for the search page
"""

from typing import Optional


def format_phone_number(phone_number: Optional[int]) -> str:
    """Format a phone number for display.

    Args:
        phone_number: Phone number stored as an integer.

    Returns:
        "(XXX) XXX-XXXX" for 10 digits, "1 (XXX) XXX-XXXX" for 11 digits
        with a leading 1, otherwise the plain digit string.

    Examples:
        format_phone_number(5551234567) -> "(555) 123-4567"
        format_phone_number(15551234567) -> "1 (555) 123-4567"
        format_phone_number(12345) -> "12345"
        format_phone_number(None) -> "-"
    """
    if phone_number is None:
        return "-"
    digits = str(phone_number)
    if len(digits) == 10:
        return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"
    if len(digits) == 11 and digits.startswith("1"):
        return f"1 ({digits[1:4]}) {digits[4:7]}-{digits[7:]}"
    return digits


def format_count(value: Optional[int]) -> str:
    """Format a count with thousands separator.

    Examples:
        format_count(1234567) -> "1,234,567"
        format_count(None) -> "-"
    """
    if value is None:
        return "-"
    return f"{value:,}"


def results_summary(total: int, page: int, limit: int, search: str = "") -> str:
    """One-line summary of a result page, e.g. "Showing 21-40 of 45 advocates".

    Examples:
        results_summary(45, 2, 20) -> "Showing 21-40 of 45 advocates"
        results_summary(0, 1, 20, "xyz") -> 'No advocates match "xyz"'
    """
    if total == 0:
        return f'No advocates match "{search}"' if search else "No advocates found"
    first = (page - 1) * limit + 1
    if first > total:
        return f"No results on page {page} of {format_count(total)} advocates"
    last = min(page * limit, total)
    noun = "advocate" if total == 1 else "advocates"
    summary = f"Showing {first}-{last} of {format_count(total)} {noun}"
    if search:
        summary += f' matching "{search}"'
    return summary
