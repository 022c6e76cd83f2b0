"""Git status capability: reports the working-tree status of each file.

Status is read with ``git status --porcelain`` for the single file, so the
answer reflects the repository at call time. Cached findings can therefore
lag behind a repository that changes while the file itself does not.
"""

import subprocess
import threading
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from fslint.capabilities.base import Capability, ExternalDependencyError
from fslint.models import CapabilityDescriptor, Finding, FindingStatus, ScanContext
from fslint.scanning.safety import is_git_repo

GIT_TIMEOUT_SECONDS = 30


def _run_git_command(args: List[str], cwd: Path, timeout: int = GIT_TIMEOUT_SECONDS) -> Optional[str]:
    """Run a git command and return its stdout, or None if git failed.

    Raises:
        ExternalDependencyError: If git did not answer within ``timeout``.
    """
    try:
        result = subprocess.run(
            ["git"] + args,
            cwd=str(cwd),
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        raise ExternalDependencyError(
            f"Git command timed out after {timeout}s", "git-status"
        ) from e
    except OSError:
        # Git is not installed or not in PATH
        return None

    if result.returncode != 0:
        return None
    return result.stdout


class GitStatusCapability(Capability):
    """Shows git status (new, modified, deleted, ...) and branch per file."""

    def __init__(self) -> None:
        self._branches: Dict[Path, str] = {}
        self._lock = threading.Lock()

    @classmethod
    def describe(cls) -> CapabilityDescriptor:
        return CapabilityDescriptor(
            name="git-status",
            version="0.1.0",
            description="Shows git repository status and branch information",
            enabled_by_default=True,
            author="fslint contributors",
        )

    @staticmethod
    def find_repository(path: Path) -> Optional[Path]:
        """Return the work tree root containing ``path``, or None."""
        for candidate in path.parents:
            if is_git_repo(candidate):
                return candidate
        return None

    def get_branch_name(self, repo_root: Path) -> str:
        with self._lock:
            cached = self._branches.get(repo_root)
        if cached is not None:
            return cached

        output = _run_git_command(["rev-parse", "--abbrev-ref", "HEAD"], repo_root)
        branch = output.strip() if output else ""
        if not branch or branch == "HEAD":
            branch = "detached"

        with self._lock:
            self._branches[repo_root] = branch
        return branch

    @staticmethod
    def status_to_message(code: str) -> Tuple[str, str, FindingStatus]:
        """Map a two-letter porcelain status code to (message, color, status)."""
        if code == "!!":
            return "Ignored", "gray", FindingStatus.INACTIVE
        if "U" in code or code in ("AA", "DD"):
            return "Conflict", "red", FindingStatus.ERROR
        if code == "??" or "A" in code:
            return "New", "green", FindingStatus.ACTIVE
        if "M" in code:
            return "Modified", "yellow", FindingStatus.ALERT
        if "D" in code:
            return "Deleted", "red", FindingStatus.WARNING
        if "R" in code or "C" in code:
            return "Renamed", "blue", FindingStatus.ACTIVE
        return "Clean", "gray", FindingStatus.INACTIVE

    def get_file_status(self, repo_root: Path, path: Path) -> Optional[str]:
        """Return the porcelain status code of ``path`` ('' if clean), or None."""
        try:
            relative = path.relative_to(repo_root)
        except ValueError:
            return None

        output = _run_git_command(
            ["status", "--porcelain=v1", "--untracked-files=all", "--", relative.as_posix()],
            repo_root,
        )
        if output is None:
            return None

        for line in output.splitlines():
            if len(line) >= 2:
                return line[:2]
        return ""

    def check(self, context: ScanContext) -> Finding:
        repo_root = self.find_repository(context.path)
        if repo_root is None:
            return Finding.inactive(self.name)

        code = self.get_file_status(repo_root, context.path)
        if code is None:
            return Finding.inactive(self.name)

        branch = self.get_branch_name(repo_root)
        message, color, status = self.status_to_message(code)
        return (
            Finding(self.name, status, message=message, color=color)
            .with_tags(["git"])
            .with_metadata("branch", branch)
            .with_metadata("status", message)
        )

    def cleanup(self) -> None:
        with self._lock:
            self._branches.clear()
