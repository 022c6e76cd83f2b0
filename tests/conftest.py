"""Pytest fixtures for fslint tests."""

import os
import tempfile
import threading
import time
from pathlib import Path
from typing import Callable, Dict, Generator, List, Optional, Union

import pytest

from fslint.capabilities import Capability, CapabilityExecutionError, CapabilityRegistry
from fslint.models import (
    CapabilityDescriptor,
    FileIdentity,
    Finding,
    FindingStatus,
    ScanContext,
    ScanRecord,
)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests of a single component")
    config.addinivalue_line("markers", "integration: tests that touch the real filesystem end to end")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for isolated test environments.

    Yields:
        Resolved path to the temporary directory.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


def write_file(
    root: Path,
    relative: str,
    content: Union[str, bytes] = "",
    mtime: Optional[float] = None,
) -> Path:
    """Create ``root/relative`` (and its parents) with the given content."""
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content)
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def make_file() -> Callable[..., Path]:
    """Return the write_file helper."""
    return write_file


@pytest.fixture
def sample_tree(temp_dir: Path) -> Path:
    """Create a small project tree.

    Creates:
        project/
        ├── README.md
        ├── notes.txt
        ├── .env            (hidden)
        ├── .cache/data.bin (hidden directory)
        ├── src/main.py
        ├── src/util.py
        └── src/deep/inner/leaf.txt
    """
    root = temp_dir / "project"
    write_file(root, "README.md", "# readme\n")
    write_file(root, "notes.txt", "notes\n")
    write_file(root, ".env", "KEY=value\n")
    write_file(root, ".cache/data.bin", b"\x00\x01")
    write_file(root, "src/main.py", "print('hi')\n")
    write_file(root, "src/util.py", "def f():\n    return 1\n")
    write_file(root, "src/deep/inner/leaf.txt", "leaf\n")
    return root


def make_context(path: Path, root: Optional[Path] = None) -> ScanContext:
    """Build a ScanContext for an existing file."""
    stat_result = path.stat()
    return ScanContext(
        identity=FileIdentity.from_stat(path, stat_result),
        stat=stat_result,
        working_dir=root if root is not None else path.parent,
    )


@pytest.fixture
def context_for() -> Callable[..., ScanContext]:
    """Return the make_context helper."""
    return make_context


def make_record(
    name: str,
    size: int = 0,
    modified: Optional[float] = 0.0,
    findings: Optional[List[Finding]] = None,
) -> ScanRecord:
    """Build a ScanRecord without touching the filesystem."""
    identity = FileIdentity(path=Path("/data") / name, modified=modified, size=size)
    return ScanRecord(identity=identity, findings=findings or [])


class CountingCapability(Capability):
    """Stub capability that reports the file name and counts its calls."""

    capability_name = "counting"
    default_enabled = True

    def __init__(self, delay: float = 0.0) -> None:
        self.delay = delay
        self.calls = 0
        self.initialized_with: Optional[Dict[str, str]] = None
        self.cleanups = 0
        self._lock = threading.Lock()

    @classmethod
    def describe(cls) -> CapabilityDescriptor:
        return CapabilityDescriptor(
            name=cls.capability_name,
            version="1.0.0",
            description="Counts checks",
            enabled_by_default=cls.default_enabled,
        )

    def check(self, context: ScanContext) -> Finding:
        with self._lock:
            self.calls += 1
        if self.delay:
            time.sleep(self.delay)
        return Finding.active(self.name, f"seen {context.path.name}").with_tags([self.name])

    def initialize(self, config: Dict[str, str]) -> None:
        self.initialized_with = dict(config)

    def cleanup(self) -> None:
        self.cleanups += 1


class FirstCapability(CountingCapability):
    capability_name = "first"


class SecondCapability(CountingCapability):
    capability_name = "second"


class ThirdCapability(CountingCapability):
    capability_name = "third"


class OptInCapability(CountingCapability):
    capability_name = "opt-in"
    default_enabled = False


class FailingCapability(Capability):
    """Stub capability that always fails."""

    def __init__(self, exception: Optional[Exception] = None) -> None:
        self.exception = exception
        self.calls = 0

    @classmethod
    def describe(cls) -> CapabilityDescriptor:
        return CapabilityDescriptor(
            name="failing",
            version="1.0.0",
            description="Always fails",
            enabled_by_default=True,
        )

    def check(self, context: ScanContext) -> Finding:
        self.calls += 1
        if self.exception is not None:
            raise self.exception
        raise CapabilityExecutionError("boom", self.name)


@pytest.fixture
def counting_registry() -> CapabilityRegistry:
    """Registry with three enabled stub capabilities: first, second, third."""
    registry = CapabilityRegistry()
    registry.register(FirstCapability())
    registry.register(SecondCapability())
    registry.register(ThirdCapability())
    return registry


@pytest.fixture
def config_file(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point FSLINT_CONFIG at a file inside the temporary directory."""
    path = temp_dir / "config" / "config.json"
    monkeypatch.setenv("FSLINT_CONFIG", str(path))
    return path


def finding_names(record: ScanRecord) -> List[str]:
    return [f.capability_name for f in record.findings]


def statuses(record: ScanRecord) -> Dict[str, FindingStatus]:
    return {f.capability_name: f.status for f in record.findings}
