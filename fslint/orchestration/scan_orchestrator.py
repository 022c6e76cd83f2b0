"""ScanOrchestrator for running a full scan.

This module provides the ScanOrchestrator class that composes the traversal
engine, the result cache and the capability registry into one scan: walk
the tree, look every file up in the cache, dispatch the enabled
capabilities on a miss, and collect ScanRecords until ``max_files`` is
reached.

Example:
    from fslint.capabilities.builtin import create_default_registry
    from fslint.orchestration import ScanOrchestrator

    with ScanOrchestrator(create_default_registry()) as orchestrator:
        result = orchestrator.scan(Path("/data/project"))
        print(len(result.records), result.cache_stats.hit_rate)
"""

import logging
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from fslint.capabilities import CapabilityRegistry
from fslint.models import CacheStats, ScanContext, ScanPolicy, ScanRecord, ScanResult
from fslint.scanning import (
    ResultCache,
    SafetyChecker,
    TraversalEngine,
    TraversalEntry,
    check_system_directory,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, Path], None]


class ScanOrchestrator:
    """Runs scans of directory trees against a capability registry.

    The cache belongs to the orchestrator, so reusing one instance for
    several scans keeps it warm: unchanged files are served from the cache
    without invoking any capability.

    With ``workers == 1`` everything runs on the calling thread in traversal
    order. With more workers, files are dispatched to a thread pool with at
    most ``workers`` dispatches in flight; records are put back into
    traversal order before they are returned and findings inside a record
    are always in registration order.

    Attributes:
        registry: The CapabilityRegistry whose enabled capabilities run.
        policy: The ScanPolicy used for traversal and the file cap.
        cache: The ResultCache shared by all scans of this instance.
        workers: Number of dispatch threads.
        allow_system: Whether system directories may be scanned.

    Example:
        orchestrator = ScanOrchestrator(registry, ScanPolicy(max_files=100))
        first = orchestrator.scan(root)
        second = orchestrator.scan(root)  # served from cache
        print(orchestrator.cache_stats().hits)
    """

    def __init__(
        self,
        registry: CapabilityRegistry,
        policy: Optional[ScanPolicy] = None,
        cache: Optional[ResultCache] = None,
        workers: int = 1,
        check_system_paths: bool = True,
        allow_system: bool = False,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> None:
        """Initialize the ScanOrchestrator.

        Args:
            registry: Registry holding the capabilities to run.
            policy: Traversal policy. Defaults to ``ScanPolicy()``.
            cache: Result cache. A fresh one is created when omitted.
            workers: Number of dispatch threads (1 = sequential).
            check_system_paths: Refuse operating-system directories as roots.
            allow_system: Scan system directories anyway.
            progress_callback: Called as ``callback(scanned_count, path)``
                after every produced record.

        Raises:
            ValueError: If workers is less than 1.
        """
        if workers < 1:
            raise ValueError(f"workers must be >= 1, got {workers}")

        self.registry = registry
        self.policy = policy if policy is not None else ScanPolicy()
        self.cache = cache if cache is not None else ResultCache()
        self.workers = workers
        self.check_system_paths = check_system_paths
        self.allow_system = allow_system
        self.progress_callback = progress_callback

    def scan(self, root: Path) -> ScanResult:
        """Scan a directory tree.

        Args:
            root: Directory to scan. It is resolved to an absolute path,
                which becomes the working directory of every ScanContext.

        Returns:
            ScanResult with the records in traversal order, the cache
            counters, and every warning raised by traversal, capabilities,
            the file cap or the safety checks. Registry errors are drained
            into the result, so any left pending before the scan are
            reported here as well.

        Raises:
            ValueError: If root does not exist or is not a directory.
            SystemDirectoryError: If root is a system directory and system
                scans are not allowed.
        """
        resolved_root = Path(root).resolve()
        if not resolved_root.exists():
            raise ValueError(f"Scan root does not exist: {root}")
        if not resolved_root.is_dir():
            raise ValueError(f"Scan root is not a directory: {root}")
        if self.check_system_paths:
            check_system_directory(resolved_root, allow_system=self.allow_system)

        start_time = time.time()
        safety = SafetyChecker()
        engine = TraversalEngine(self.policy, safety=safety)

        entries = engine.walk(resolved_root)
        if self.workers == 1:
            records, capped = self._scan_sequential(entries, resolved_root)
        else:
            records, capped = self._scan_parallel(entries, resolved_root)

        warnings: List[str] = engine.get_errors()
        warnings.extend(self.registry.take_errors())
        if capped:
            message = f"Reached max files limit ({self.policy.max_files})"
            logger.warning(message)
            warnings.append(message)
        if safety.should_warn():
            message = safety.warning_message()
            logger.warning(message)
            warnings.append(message)

        duration = time.time() - start_time
        logger.debug("Scanned %d files under %s in %.2fs", len(records), resolved_root, duration)

        return ScanResult(
            root=resolved_root,
            records=records,
            cache_stats=self.cache_stats(),
            warnings=warnings,
            duration_seconds=duration,
            capped=capped,
        )

    def _scan_sequential(
        self, entries: Iterator[TraversalEntry], root: Path
    ) -> Tuple[List[ScanRecord], bool]:
        """Dispatch entries one by one; the file cap is exact."""
        records: List[ScanRecord] = []
        max_files = self.policy.max_files

        for entry in entries:
            if max_files is not None and len(records) >= max_files:
                return records, True
            records.append(self._process_entry(entry, root))
            self._report_progress(len(records), entry.identity.path)

        return records, False

    def _scan_parallel(
        self, entries: Iterator[TraversalEntry], root: Path
    ) -> Tuple[List[ScanRecord], bool]:
        """Dispatch entries to a bounded thread pool.

        No new dispatch starts once ``max_files`` dispatches were issued;
        dispatches already in flight always finish and are counted.
        """
        max_files = self.policy.max_files
        in_flight: Dict[Future, int] = {}
        completed: List[Tuple[int, ScanRecord]] = []
        submitted = 0
        exhausted = False

        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="fslint") as executor:
            while True:
                while not exhausted and len(in_flight) < self.workers:
                    if max_files is not None and submitted >= max_files:
                        break
                    entry = next(entries, None)
                    if entry is None:
                        exhausted = True
                        break
                    future = executor.submit(self._process_entry, entry, root)
                    in_flight[future] = submitted
                    submitted += 1

                if not in_flight:
                    break

                done, _ = wait(list(in_flight), return_when=FIRST_COMPLETED)
                for future in done:
                    index = in_flight.pop(future)
                    record = future.result()
                    completed.append((index, record))
                    self._report_progress(len(completed), record.path)

        capped = False
        if not exhausted and max_files is not None and submitted >= max_files:
            capped = next(entries, None) is not None

        completed.sort(key=lambda item: item[0])
        return [record for _, record in completed], capped

    def _process_entry(self, entry: TraversalEntry, root: Path) -> ScanRecord:
        """Build the ScanRecord of one file, from the cache when possible."""
        identity = entry.identity
        cached = self.cache.get(identity)
        if cached is not None:
            return ScanRecord(identity=identity, findings=cached)

        context = ScanContext(identity=identity, stat=entry.stat, working_dir=root)
        findings = self.registry.run(context)
        self.cache.put(identity, findings)
        return ScanRecord(identity=identity, findings=findings)

    def _report_progress(self, scanned: int, path: Path) -> None:
        if self.progress_callback is not None:
            self.progress_callback(scanned, path)

    def cache_stats(self) -> CacheStats:
        """Current cache counters and entry count."""
        return self.cache.snapshot()

    def clear_cache(self) -> None:
        """Drop every cached entry and reset the counters."""
        self.cache.clear()

    def close(self) -> None:
        """Run ``cleanup`` on every registered capability."""
        self.registry.cleanup_all()

    def __enter__(self) -> "ScanOrchestrator":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
