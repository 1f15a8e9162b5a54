"""
Scene text sanitization.

Shared by request validation (text that sanitizes to nothing is rejected)
and plan building (text is sanitized before it reaches the renderer).
"""

import unicodedata

# Control and format characters break the renderer's text layout
_STRIPPED_CATEGORIES = {"Cc", "Cf"}

# Code points outside the Basic Multilingual Plane (most emoji) have no glyphs
_MAX_CODE_POINT = 0xFFFF


def sanitize_text(text: str) -> str:
    """
    Remove control/format characters and non-BMP code points.

    Example:
        >>> sanitize_text("Hi\\u0007 \\U0001F600 world")
        'Hi  world'
    """
    return "".join(
        char
        for char in text
        if ord(char) <= _MAX_CODE_POINT
        and unicodedata.category(char) not in _STRIPPED_CATEGORIES
    )
