"""String processing utilities for the advocate directory."""

from utils.patterns import ANGLE_BRACKETS


def strip_angle_brackets(s: str | None) -> str:
    """Remove ``<`` and ``>`` from user input.

    Mirrors the browser-side sanitization of the search box.  This is not
    a substitute for server-side validation.
    """
    if not s:
        return ""
    return ANGLE_BRACKETS.sub("", s)
