"""Output file names derived from document titles."""

import re
from typing import Optional

_WHITESPACE = re.compile(r"\s+")
_SEPARATORS = "-_."
_UNSAFE = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def sanitize_for_path(value: str, replacement: str = "_") -> str:
    """Strip characters that are not allowed in file names."""
    cleaned = _UNSAFE.sub(replacement, value)
    return cleaned.strip(" .") or "document"


def build_filename(title: Optional[str], suffix: str = "", ext: str = "pdf") -> str:
    """
    Build a download name from a title.

    Whitespace runs become ``_``, e.g. ``build_filename("My Title", "-worksheet")``
    returns ``"My_Title-worksheet.pdf"``.

    Args:
        title: Document title
        suffix: Appended to the stem; a bare word ("slides") gets a "-"
            separator, one that already starts with "-", "_" or "." is kept as is
        ext: File extension without the dot

    Returns:
        File name
    """
    stem = _WHITESPACE.sub("_", (title or "").strip()) or "document"
    suffix = suffix.strip()
    if suffix and suffix[0] not in _SEPARATORS:
        suffix = f"-{suffix}"
    name = sanitize_for_path(f"{stem}{suffix}")
    ext = ext.lstrip(".")
    return f"{name}.{ext}" if ext else name
