"""Safety checks run around a scan.

- SafetyChecker counts visible and hidden entries and warns when a tree is
  almost entirely hidden, which usually means ``--include-hidden`` was
  wanted.
- ``check_system_directory`` refuses to scan operating-system trees unless
  explicitly allowed.
"""

from pathlib import Path
from typing import Tuple

DEFAULT_WARNING_THRESHOLD = 1000

# Few visible files next to many hidden ones triggers the warning
MAX_VISIBLE_FOR_WARNING = 10
HIDDEN_TO_VISIBLE_RATIO = 100

SYSTEM_DIRECTORIES = (
    "/system",
    "/windows",
    "/boot",
    "/dev",
    "/proc",
    "/sys",
    "c:\\windows",
    "c:\\program files",
    "/library/system",
)


class SystemDirectoryError(ValueError):
    """Raised when a scan root is an operating-system directory."""


class SafetyChecker:
    """Tracks visible/hidden entry counts for the hidden-ratio warning.

    Attributes:
        warning_threshold: Hidden count above which a warning is possible.
    """

    def __init__(self, warning_threshold: int = DEFAULT_WARNING_THRESHOLD) -> None:
        self.warning_threshold = warning_threshold
        self.visible_count = 0
        self.hidden_count = 0

    def track_file(self, path: Path) -> bool:
        """Count ``path`` as visible or hidden; return True if hidden."""
        hidden = is_hidden_file(path)
        if hidden:
            self.hidden_count += 1
        else:
            self.visible_count += 1
        return hidden

    def should_warn(self) -> bool:
        return (
            self.hidden_count > self.warning_threshold
            and self.visible_count < MAX_VISIBLE_FOR_WARNING
            and self.hidden_count > self.visible_count * HIDDEN_TO_VISIBLE_RATIO
        )

    def warning_message(self) -> str:
        return (
            f"{self.visible_count} visible files, {self.hidden_count} hidden files detected. "
            "Use --include-hidden to scan hidden files."
        )

    def stats(self) -> Tuple[int, int]:
        """Return (visible, hidden) counts."""
        return self.visible_count, self.hidden_count

    def reset(self) -> None:
        self.visible_count = 0
        self.hidden_count = 0


def is_system_directory(path: Path) -> bool:
    """Return True if ``path`` is, or lies inside, an operating-system directory."""
    text = str(path).lower()
    for system_dir in SYSTEM_DIRECTORIES:
        if text == system_dir:
            return True
        if text.startswith(system_dir + "/") or text.startswith(system_dir + "\\"):
            return True
    return False


def check_system_directory(path: Path, allow_system: bool = False) -> None:
    """Refuse to scan system directories.

    Raises:
        SystemDirectoryError: If ``path`` is a system directory and
            ``allow_system`` is False.
    """
    if allow_system:
        return
    if is_system_directory(path):
        raise SystemDirectoryError(
            f"Refusing to scan system directory: {path}. "
            "This could be dangerous or very slow. If you're sure, use --allow-system."
        )


def is_hidden_file(path: Path) -> bool:
    return Path(path).name.startswith(".")


def is_git_repo(path: Path) -> bool:
    return (Path(path) / ".git").exists()


def sanitize_path_for_display(path: Path) -> str:
    """Strip parent-directory segments so output cannot suggest path traversal."""
    return str(path).replace("../", "").replace("..\\", "")
