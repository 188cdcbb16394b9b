from __future__ import annotations

import re
from typing import Optional, Pattern, Tuple

# Anything outside this set is replaced with an underscore.
DEFAULT_SANITIZE_PATTERN: Pattern[str] = re.compile(r"[^a-zA-Z0-9.\-+_]")
UNNAMED = "unnamed"

_DOTS_ONLY_RE = re.compile(r"\.+")

# Tried in order; the first match wins.
EXTENSION_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"(.+)\.([^.]{1,3}\.[^.]{1,4})"),  # archive.tar.gz
    re.compile(r"(.+)\.([^.]+)"),  # photo.jpg
)


def _last_segment(name: str) -> str:
    # Trailing separators are ignored; a name made only of separators keeps one.
    if "/" not in name:
        return name
    trimmed = name.rstrip("/")
    if not trimmed:
        return "/"
    return trimmed.rsplit("/", 1)[-1]


def sanitize_filename(name: str, pattern: Optional[Pattern[str]] = None) -> str:
    """Rewrite a client-supplied filename into a safe, lower-case on-disk name.

    Backslashes are treated as path separators and every directory component is
    dropped, so ``..\\..\\boot.ini`` and ``../../etc/passwd`` both collapse to
    their last segment. Characters outside ``pattern``'s allowed set become
    underscores. Names made only of dots get an underscore prefix and an empty
    result becomes ``unnamed``.
    """
    regexp = pattern or DEFAULT_SANITIZE_PATTERN
    name = _last_segment(name.replace("\\", "/"))
    name = regexp.sub("_", name)
    if _DOTS_ONLY_RE.fullmatch(name):
        name = f"_{name}"
    if not name:
        name = UNNAMED
    return name.lower()


def split_extension(filename: str) -> Tuple[str, str]:
    """Split a sanitized filename into ``(basename, extension)``.

    Short compound suffixes such as ``tar.gz`` are kept together; a name
    without a dot returns an empty extension.
    """
    for regexp in EXTENSION_PATTERNS:
        match = regexp.fullmatch(filename)
        if match:
            return match.group(1), match.group(2)
    return filename, ""


__all__ = ["DEFAULT_SANITIZE_PATTERN", "EXTENSION_PATTERNS", "UNNAMED", "sanitize_filename", "split_extension"]
