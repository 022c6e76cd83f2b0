"""Directory traversal under a ScanPolicy.

This module provides the TraversalEngine class, which walks a root
directory and yields one TraversalEntry per regular file that survives the
policy: depth bound, hidden-file rule, symlink handling and ignore files.

The walk is deterministic: entries are sorted by name inside every
directory and visited depth-first, pre-order. Each call to ``walk()`` starts
a fresh walk from the root.

Example:
    >>> engine = TraversalEngine(ScanPolicy(max_depth=2))
    >>> for entry in engine.walk(Path("/data/project")):
    ...     print(entry.identity.path, entry.identity.size)
"""

import logging
import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Set, Tuple

import pathspec

from fslint.models import FileIdentity, ScanPolicy

from .safety import SafetyChecker

logger = logging.getLogger(__name__)

IGNORE_FILE_NAMES = (".gitignore", ".ignore")
VCS_DIR_NAME = ".git"


@dataclass(frozen=True)
class TraversalEntry:
    """A regular file yielded by the traversal engine."""
    identity: FileIdentity            # Path, mtime and size of the file
    stat: os.stat_result              # Raw stat of the file (target stat for links)
    depth: int                        # Path components below the root


@dataclass
class _IgnoreFrame:
    """Ignore patterns loaded from the ignore files of one directory."""
    base: Path
    patterns: List[pathspec.Pattern]


class IgnoreRules:
    """Stack of gitignore-style pattern sets, shallowest first.

    Patterns are matched with the ``pathspec`` gitwildmatch flavor. Every
    pattern of every frame is evaluated and the last one that matches wins,
    so a deeper ignore file overrides a shallower one and a negated pattern
    (``!keep.log``) re-includes a path an earlier pattern excluded.
    """

    def __init__(self, frames: Optional[List[_IgnoreFrame]] = None) -> None:
        self._frames: List[_IgnoreFrame] = frames or []

    def child(self, directory: Path, errors: List[str]) -> "IgnoreRules":
        """Rules for ``directory``: these rules plus its own ignore files."""
        lines: List[str] = []
        for file_name in IGNORE_FILE_NAMES:
            ignore_file = directory / file_name
            if not ignore_file.is_file():
                continue
            try:
                lines.extend(ignore_file.read_text(encoding="utf-8", errors="replace").splitlines())
            except OSError as e:
                message = f"Error reading ignore file {ignore_file}: {e}"
                logger.warning(message)
                errors.append(message)

        if not lines:
            return self

        spec = pathspec.PathSpec.from_lines("gitwildmatch", lines)
        patterns = [p for p in spec.patterns if p.include is not None]
        if not patterns:
            return self
        return IgnoreRules(self._frames + [_IgnoreFrame(directory, patterns)])

    def is_ignored(self, path: Path, is_dir: bool) -> bool:
        """Return True if the last matching pattern excludes ``path``."""
        ignored = False
        for frame in self._frames:
            try:
                relative = path.relative_to(frame.base).as_posix()
            except ValueError:
                continue
            if is_dir:
                relative += "/"
            for pattern in frame.patterns:
                if pattern.match_file(relative) is not None:
                    ignored = bool(pattern.include)
        return ignored


class TraversalEngine:
    """Walks a directory tree and yields the regular files a policy admits.

    Traversal errors on single entries (permission denied, broken links,
    entries deleted mid-walk) never stop the walk: the entry is skipped and
    the condition is logged and recorded.

    Attributes:
        policy: The ScanPolicy applied to every walk.
        _errors: List of warning messages collected during walks.

    Example:
        >>> engine = TraversalEngine(ScanPolicy(include_hidden=True))
        >>> paths = [entry.identity.path for entry in engine.walk(root)]
        >>> engine.get_errors()
        []
    """

    def __init__(
        self,
        policy: Optional[ScanPolicy] = None,
        safety: Optional[SafetyChecker] = None,
    ) -> None:
        """Initialize the engine.

        Args:
            policy: Traversal policy. Defaults to ``ScanPolicy()``.
            safety: Optional SafetyChecker that is told about every yielded
                file and every hidden entry the policy excluded.
        """
        self.policy = policy if policy is not None else ScanPolicy()
        self.safety = safety
        self._errors: List[str] = []

    def walk(self, root: Path) -> Iterator[TraversalEntry]:
        """Yield every admitted regular file under ``root``.

        The root itself is never filtered, even if its name starts with a
        dot or an ignore file of the root matches it.

        Args:
            root: Directory to walk.

        Yields:
            TraversalEntry objects in depth-first, name-sorted order.
        """
        root = Path(root).resolve()
        try:
            root_stat = root.stat()
        except OSError as e:
            self._warn(f"Error accessing root {root}: {e}")
            return
        if not stat.S_ISDIR(root_stat.st_mode):
            self._warn(f"Not a directory: {root}")
            return

        # Track visited directories by (device, inode) to detect cycles
        visited_dirs: Set[Tuple[int, int]] = {(root_stat.st_dev, root_stat.st_ino)}

        rules = IgnoreRules()
        if self.policy.respect_ignore_rules:
            rules = rules.child(root, self._errors)

        # Each frame: (remaining sorted entries of a directory, its depth, its rules)
        stack: List[Tuple[Iterator[os.DirEntry], int, IgnoreRules]] = []
        entries = self._list_directory(root)
        if entries is None:
            return
        stack.append((iter(entries), 0, rules))

        while stack:
            iterator, dir_depth, dir_rules = stack[-1]
            entry = next(iterator, None)
            if entry is None:
                stack.pop()
                continue

            depth = dir_depth + 1
            if not self.policy.include_hidden and entry.name.startswith("."):
                if self.safety is not None:
                    self.safety.track_file(Path(entry.path))
                continue

            path = Path(entry.path)
            target = self._stat_entry(entry, path)
            if target is None:
                continue

            if stat.S_ISDIR(target.st_mode):
                if self.policy.respect_ignore_rules:
                    if entry.name == VCS_DIR_NAME or dir_rules.is_ignored(path, is_dir=True):
                        continue
                if self.policy.max_depth is not None and depth >= self.policy.max_depth:
                    continue

                dir_id = (target.st_dev, target.st_ino)
                if dir_id in visited_dirs:
                    logger.debug("Skipping already visited directory: %s", path)
                    continue
                visited_dirs.add(dir_id)

                children = self._list_directory(path)
                if children is None:
                    continue
                child_rules = dir_rules
                if self.policy.respect_ignore_rules:
                    child_rules = dir_rules.child(path, self._errors)
                stack.append((iter(children), depth, child_rules))
                continue

            if not stat.S_ISREG(target.st_mode):
                continue
            if self.policy.max_depth is not None and depth > self.policy.max_depth:
                continue
            if self.policy.respect_ignore_rules and dir_rules.is_ignored(path, is_dir=False):
                continue

            if self.safety is not None:
                self.safety.track_file(path)
            yield TraversalEntry(
                identity=FileIdentity.from_stat(path, target),
                stat=target,
                depth=depth,
            )

    def _stat_entry(self, entry: os.DirEntry, path: Path) -> Optional[os.stat_result]:
        """Stat an entry per the symlink policy; None if it must be skipped."""
        try:
            if entry.is_symlink():
                if not self.policy.follow_symlinks:
                    return None
                return entry.stat(follow_symlinks=True)
            return entry.stat(follow_symlinks=False)
        except PermissionError:
            self._warn(f"Permission denied: {path}")
        except FileNotFoundError:
            # Broken link, or deleted while walking
            self._warn(f"Entry vanished or broken link: {path}")
        except OSError as e:
            self._warn(f"Error accessing {path}: {e}")
        return None

    def _list_directory(self, directory: Path) -> Optional[List[os.DirEntry]]:
        try:
            with os.scandir(directory) as it:
                return sorted(it, key=lambda e: e.name)
        except PermissionError:
            self._warn(f"Permission denied accessing directory: {directory}")
        except OSError as e:
            self._warn(f"Error reading directory {directory}: {e}")
        return None

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self._errors.append(message)

    def get_errors(self) -> List[str]:
        """Get list of warnings encountered during traversal.

        Returns:
            List of warning message strings.
        """
        return self._errors.copy()

    def clear_errors(self) -> None:
        """Clear the list of accumulated warnings."""
        self._errors.clear()
