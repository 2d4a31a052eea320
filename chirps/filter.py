"""
chirps/filter.py -- Chirp body validation and profanity masking.

Masking is a case-insensitive substring replacement: every occurrence of a
banned word is replaced with "****" wherever it appears, including inside
longer words. The surrounding text keeps its original case.
"""

from __future__ import annotations

import re

MAX_CHIRP_LENGTH = 140

BANNED_WORDS: tuple[str, ...] = ("kerfuffle", "sharbert", "fornax")

_MASK = "****"

_BANNED_RE = re.compile("|".join(re.escape(w) for w in BANNED_WORDS), re.IGNORECASE)


def is_too_long(body: str) -> bool:
    return len(body) > MAX_CHIRP_LENGTH


def clean_body(body: str) -> str:
    """Return body with every banned word replaced by ****."""
    return _BANNED_RE.sub(_MASK, body)
