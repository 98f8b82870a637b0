"""Bilingual label helpers.

User-facing strings are authored as ``"한글 (English)"`` pairs; the UI shows
the Korean half only.
"""

from __future__ import annotations

import re

_PARENTHESIZED = re.compile(r"\s*\([^)]*\)")
_TRAILING_ENGLISH = re.compile(r"\s+[a-zA-Z\s]+$")


def format_bilingual_text(text: str) -> str:
    """Return the Korean part of ``"한글 (English text)"`` or ``"한글 English"``."""
    korean = _PARENTHESIZED.sub("", text or "")
    korean = _TRAILING_ENGLISH.sub("", korean)
    return korean.strip()


__all__ = ["format_bilingual_text"]
