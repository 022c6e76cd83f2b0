"""
Integration tests for TraversalEngine in fslint.scanning.traversal.

Tests cover:
- Deterministic depth-first, name-sorted order
- Hidden entry exclusion and the root exception
- max_depth bound
- .gitignore / .ignore rules (negation, directory pruning, deeper overrides)
- Symlink handling and cycle detection
- Error tolerance for broken links and unreadable directories
"""

import os
from pathlib import Path
from typing import List

import pytest

from conftest import write_file
from fslint.models import ScanPolicy
from fslint.scanning import SafetyChecker, TraversalEngine


def walk(root: Path, **policy) -> List[str]:
    engine = TraversalEngine(ScanPolicy(**policy))
    return [entry.identity.path.relative_to(root).as_posix() for entry in engine.walk(root)]


@pytest.mark.integration
class TestTraversalOrder:
    """Order and basic admission."""

    def test_default_walk(self, sample_tree: Path):
        assert walk(sample_tree) == [
            "README.md",
            "notes.txt",
            "src/deep/inner/leaf.txt",
            "src/main.py",
            "src/util.py",
        ]

    def test_walk_is_deterministic(self, sample_tree: Path):
        assert walk(sample_tree) == walk(sample_tree)

    def test_identity_and_depth(self, sample_tree: Path):
        entries = list(TraversalEngine().walk(sample_tree))
        leaf = next(e for e in entries if e.identity.path.name == "leaf.txt")

        assert leaf.depth == 4
        assert leaf.identity.size == len("leaf\n")
        assert leaf.identity.modified == leaf.stat.st_mtime
        assert leaf.identity.path.is_absolute()

    def test_empty_directory(self, temp_dir: Path):
        assert walk(temp_dir) == []

    def test_missing_root_records_error(self, temp_dir: Path):
        engine = TraversalEngine()
        assert list(engine.walk(temp_dir / "missing")) == []
        assert len(engine.get_errors()) == 1

        engine.clear_errors()
        assert engine.get_errors() == []


@pytest.mark.integration
class TestHiddenEntries:
    """include_hidden handling."""

    def test_include_hidden(self, sample_tree: Path):
        assert walk(sample_tree, include_hidden=True) == [
            ".cache/data.bin",
            ".env",
            "README.md",
            "notes.txt",
            "src/deep/inner/leaf.txt",
            "src/main.py",
            "src/util.py",
        ]

    def test_dotfiles_only_directory(self, temp_dir: Path):
        for name in (".a", ".b", ".c"):
            write_file(temp_dir, name, "x")

        assert walk(temp_dir) == []
        assert walk(temp_dir, include_hidden=True) == [".a", ".b", ".c"]

    def test_hidden_root_is_still_walked(self, temp_dir: Path):
        root = temp_dir / ".dotroot"
        write_file(root, "visible.txt", "x")
        assert walk(root) == ["visible.txt"]

    def test_safety_checker_sees_hidden_entries(self, sample_tree: Path):
        safety = SafetyChecker()
        list(TraversalEngine(safety=safety).walk(sample_tree))
        assert safety.stats() == (5, 2)


@pytest.mark.integration
class TestMaxDepth:
    """max_depth bound."""

    def test_depth_zero_yields_nothing(self, sample_tree: Path):
        assert walk(sample_tree, max_depth=0) == []

    def test_depth_one_is_root_files_only(self, sample_tree: Path):
        assert walk(sample_tree, max_depth=1) == ["README.md", "notes.txt"]

    def test_depth_two(self, sample_tree: Path):
        assert walk(sample_tree, max_depth=2) == ["README.md", "notes.txt", "src/main.py", "src/util.py"]

    def test_unbounded(self, temp_dir: Path):
        write_file(temp_dir, "a/b/c/d/e/f/g/h/i/j/k/l/deep.txt", "x")
        assert walk(temp_dir, max_depth=None) == ["a/b/c/d/e/f/g/h/i/j/k/l/deep.txt"]
        assert walk(temp_dir) == []


@pytest.mark.integration
class TestIgnoreRules:
    """.gitignore and .ignore files."""

    def test_patterns_and_negation(self, temp_dir: Path):
        write_file(temp_dir, ".gitignore", "*.log\n!keep.log\n")
        write_file(temp_dir, "a.log", "x")
        write_file(temp_dir, "keep.log", "x")
        write_file(temp_dir, "main.py", "x")

        assert walk(temp_dir) == ["keep.log", "main.py"]

    def test_ignored_directory_is_pruned(self, temp_dir: Path):
        write_file(temp_dir, ".gitignore", "build/\n")
        write_file(temp_dir, "build/out.o", "x")
        write_file(temp_dir, "src/build.py", "x")

        assert walk(temp_dir) == ["src/build.py"]

    def test_deeper_file_overrides(self, temp_dir: Path):
        write_file(temp_dir, ".gitignore", "*.log\n")
        write_file(temp_dir, "sub/.gitignore", "!*.log\n")
        write_file(temp_dir, "top.log", "x")
        write_file(temp_dir, "sub/kept.log", "x")

        assert walk(temp_dir) == ["sub/kept.log"]

    def test_anchored_pattern(self, temp_dir: Path):
        write_file(temp_dir, ".gitignore", "/secret.txt\n")
        write_file(temp_dir, "secret.txt", "x")
        write_file(temp_dir, "docs/secret.txt", "x")

        assert walk(temp_dir) == ["docs/secret.txt"]

    def test_dot_ignore_file(self, temp_dir: Path):
        write_file(temp_dir, ".ignore", "*.tmp\n# comment\n\n")
        write_file(temp_dir, "a.tmp", "x")
        write_file(temp_dir, "b.txt", "x")

        assert walk(temp_dir) == ["b.txt"]

    def test_rules_disabled(self, temp_dir: Path):
        write_file(temp_dir, ".gitignore", "*.log\n")
        write_file(temp_dir, "a.log", "x")

        assert walk(temp_dir, respect_ignore_rules=False) == ["a.log"]

    def test_vcs_directory_skipped(self, temp_dir: Path):
        write_file(temp_dir, ".git/config", "[core]\n")
        write_file(temp_dir, "main.py", "x")

        assert walk(temp_dir, include_hidden=True) == ["main.py"]
        assert walk(temp_dir, include_hidden=True, respect_ignore_rules=False) == [
            ".git/config",
            "main.py",
        ]


@pytest.mark.integration
class TestSymlinks:
    """Symlink policy."""

    def test_links_skipped_by_default(self, temp_dir: Path):
        target = write_file(temp_dir, "real.txt", "x")
        os.symlink(target, temp_dir / "link.txt")

        assert walk(temp_dir) == ["real.txt"]

    def test_links_followed(self, temp_dir: Path):
        target = write_file(temp_dir, "data/real.txt", "x")
        os.symlink(target, temp_dir / "link.txt")

        entries = list(TraversalEngine(ScanPolicy(follow_symlinks=True)).walk(temp_dir))
        link = next(e for e in entries if e.identity.path.name == "link.txt")

        assert [e.identity.path.name for e in entries] == ["real.txt", "link.txt"]
        assert link.identity.size == 1

    def test_cycle_terminates(self, temp_dir: Path):
        write_file(temp_dir, "a/file.txt", "x")
        os.symlink(temp_dir, temp_dir / "a" / "loop")

        assert walk(temp_dir, follow_symlinks=True, max_depth=None) == ["a/file.txt"]

    def test_broken_link_is_skipped_with_warning(self, temp_dir: Path):
        os.symlink(temp_dir / "nowhere", temp_dir / "broken")
        write_file(temp_dir, "ok.txt", "x")
        engine = TraversalEngine(ScanPolicy(follow_symlinks=True))

        paths = [e.identity.path.name for e in engine.walk(temp_dir)]

        assert paths == ["ok.txt"]
        assert any("broken" in error for error in engine.get_errors())


@pytest.mark.integration
@pytest.mark.skipif(os.name != "posix" or os.geteuid() == 0, reason="needs POSIX permissions as non-root")
def test_unreadable_directory_is_skipped(temp_dir: Path):
    write_file(temp_dir, "locked/secret.txt", "x")
    write_file(temp_dir, "open.txt", "x")
    locked = temp_dir / "locked"
    locked.chmod(0o000)
    try:
        engine = TraversalEngine()
        paths = [e.identity.path.name for e in engine.walk(temp_dir)]
    finally:
        locked.chmod(0o755)

    assert paths == ["open.txt"]
    assert any("Permission denied" in error for error in engine.get_errors())
