# src/rootshare/core/validators.py
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

from .result import Err, Ok, Result

MAX_FILENAME_LENGTH = 255
_FORBIDDEN_CHARS = frozenset('/\\\x00')


def validate_filename(name: str | None) -> Result[str]:
    """
    Accepts a single path segment only: no separators, no NUL, not '.' or '..'.
    Surrounding whitespace is stripped.
    """
    if name is None:
        return Err.invalid_path("File name cannot be empty")
    cleaned = name.strip()
    if not cleaned:
        return Err.invalid_path("File name cannot be empty")
    if cleaned in (".", ".."):
        return Err.invalid_path(f"Invalid file name: '{cleaned}'")
    if any(ch in _FORBIDDEN_CHARS for ch in cleaned):
        return Err.invalid_path(f"File name contains invalid characters: '{cleaned}'")
    if len(cleaned.encode("utf-8")) > MAX_FILENAME_LENGTH:
        return Err.invalid_path("File name is too long")
    return Ok(cleaned)
