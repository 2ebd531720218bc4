"""Text extraction from uploaded bytes.

Format-specific parsers (PDF, PowerPoint, spreadsheets) are not part of
this package.  Plain-text and CSV uploads are decoded directly; anything
else is decoded permissively and stripped down to printable ASCII so that
arbitrary binary content still yields searchable text.
"""

from __future__ import annotations

import re

_UNPRINTABLE_RE = re.compile(r"[^\x09\x0A\x0D\x20-\x7E]+")


def is_plain_text(file_type: str | None) -> bool:
    """Return ``True`` for MIME types that are decoded without filtering."""
    if not file_type:
        return False
    return file_type.startswith("text/") or "csv" in file_type


def extract_text(raw: bytes, file_type: str | None = None) -> str:
    """Decode *raw* into text.  Never raises on malformed input.

    Parameters
    ----------
    raw:
        The uploaded file content.
    file_type:
        MIME type reported by the uploader (may be empty).
    """
    decoded = raw.decode("utf-8", errors="replace")
    if is_plain_text(file_type):
        return decoded
    return _UNPRINTABLE_RE.sub(" ", decoded)
