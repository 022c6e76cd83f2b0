"""Helper functions shared by capabilities.

Grouped the way capabilities use them:
- Path helpers: extension, stem, filename, hidden check, relative path
- Metadata helpers: file age and human readable sizes
- Patterns: compiled regular expressions for common file families
"""

import re
import time
from pathlib import Path
from typing import Optional, Pattern

# Path helpers


def extension(path: Path) -> Optional[str]:
    """Get file extension as a lowercase string without the dot."""
    suffix = path.suffix
    if not suffix:
        return None
    return suffix[1:].lower()


def stem(path: Path) -> Optional[str]:
    """Get file name without its extension."""
    return path.stem or None


def filename(path: Path) -> Optional[str]:
    return path.name or None


def is_hidden(path: Path) -> bool:
    """Check if the last path component starts with a dot."""
    return path.name.startswith(".")


def relative_path(path: Path, base: Path) -> Optional[Path]:
    try:
        return path.relative_to(base)
    except ValueError:
        return None


# Metadata helpers

SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 86400


def age_in_days(modified: float, now: Optional[float] = None) -> int:
    """Whole days elapsed since ``modified`` (POSIX seconds)."""
    now = time.time() if now is None else now
    return int((now - modified) // SECONDS_PER_DAY)


def age_in_hours(modified: float, now: Optional[float] = None) -> int:
    now = time.time() if now is None else now
    return int((now - modified) // SECONDS_PER_HOUR)


def is_recent(modified: float, days: int, now: Optional[float] = None) -> bool:
    """Check if the file was modified within the last ``days`` days."""
    return age_in_days(modified, now) <= days


def format_size(size: int) -> str:
    """Format a byte count as a human readable string.

    Example:
        >>> format_size(500)
        '500 B'
        >>> format_size(1536)
        '1.50 KB'
    """
    kb = 1024
    mb = kb * 1024
    gb = mb * 1024
    tb = gb * 1024

    if size >= tb:
        return f"{size / tb:.2f} TB"
    if size >= gb:
        return f"{size / gb:.2f} GB"
    if size >= mb:
        return f"{size / mb:.2f} MB"
    if size >= kb:
        return f"{size / kb:.2f} KB"
    return f"{size} B"


# Patterns


class Patterns:
    """Common file patterns matched against the full path string."""

    NODE_MODULES: Pattern[str] = re.compile(r"node_modules")
    DS_STORE: Pattern[str] = re.compile(r"\.DS_Store$")
    TEMP_FILES: Pattern[str] = re.compile(r"\.(tmp|temp|swp|swo|bak)$")
    BUILD_ARTIFACTS: Pattern[str] = re.compile(r"(^|/)(target|build|dist|out|bin)/")
    IMAGE_FILES: Pattern[str] = re.compile(r"\.(jpg|jpeg|png|gif|bmp|tiff|webp|svg)$")
    VIDEO_FILES: Pattern[str] = re.compile(r"\.(mp4|avi|mov|wmv|flv|mkv|webm)$")
    AUDIO_FILES: Pattern[str] = re.compile(r"\.(mp3|wav|flac|aac|ogg|m4a)$")
    DOCUMENT_FILES: Pattern[str] = re.compile(r"\.(pdf|doc|docx|txt|md|rtf|odt)$")
    ARCHIVE_FILES: Pattern[str] = re.compile(r"\.(zip|tar|gz|bz2|xz|7z|rar)$")


def matches(path: Path, pattern: Pattern[str]) -> bool:
    """Check if the path (with forward slashes) matches ``pattern``."""
    return pattern.search(path.as_posix()) is not None
