"""Shared utilities for the advocate directory."""

# Pattern definitions
from utils.patterns import ANGLE_BRACKETS

# String utilities
from utils.strings import strip_angle_brackets

# Formatting utilities
from utils.formatting import (
    format_count,
    format_phone_number,
    results_summary,
)

# Query helpers
from utils.query import (
    build_search_clause,
    escape_like,
    matches_search,
    page_offset,
    total_pages,
)

# Configuration
from utils.config import AppConfig, Config

__all__ = [
    "ANGLE_BRACKETS",
    "strip_angle_brackets",
    "format_count",
    "format_phone_number",
    "results_summary",
    "build_search_clause",
    "escape_like",
    "matches_search",
    "page_offset",
    "total_pages",
    "AppConfig",
    "Config",
]
