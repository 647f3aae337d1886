"""Pre-compiled regex patterns for the advocate directory.

All patterns are compiled once at module import.

Usage:
    from utils.patterns import ANGLE_BRACKETS

    ANGLE_BRACKETS.sub("", text)
"""

import re

# Characters stripped from the search box before a request is sent
ANGLE_BRACKETS = re.compile(r'[<>]')
