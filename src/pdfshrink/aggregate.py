"""Running totals over per-file results."""

from __future__ import annotations

import threading

from pdfshrink.models import STATUS_DONE, STATUS_FAILED, STATUS_SKIPPED, FileResult, RunSummary


class RunAggregator:
    """Accumulate file results into a :class:`RunSummary`.

    Updates are commutative and guarded by a lock, so results may arrive in
    any order and from worker threads.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._files = 0
        self._succeeded = 0
        self._failed = 0
        self._skipped = 0
        self._bytes_saved = 0

    def add(self, result: FileResult) -> None:
        with self._lock:
            self._files += 1
            if result.status == STATUS_FAILED:
                self._failed += 1
                return
            self._succeeded += 1
            if result.status == STATUS_SKIPPED:
                self._skipped += 1
            elif result.status == STATUS_DONE:
                self._bytes_saved += max(0, result.bytes_saved)

    def summary(self) -> RunSummary:
        with self._lock:
            return RunSummary(
                files_found=self._files,
                succeeded=self._succeeded,
                failed=self._failed,
                skipped=self._skipped,
                bytes_saved=self._bytes_saved,
            )


def summarize(results: list[FileResult]) -> RunSummary:
    """Build a summary for an already collected list of results."""
    aggregator = RunAggregator()
    for result in results:
        aggregator.add(result)
    return aggregator.summary()
