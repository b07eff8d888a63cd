"""Batch driver running the per-file pipeline over every candidate."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Sequence

from pdfshrink.aggregate import RunAggregator
from pdfshrink.models import CandidateFile, FileResult, RunSummary
from pdfshrink.processor import ShrinkFn, ShrinkOptions, process_file

ResultCallback = Callable[[FileResult], None]


def run_batch(
    candidates: Sequence[CandidateFile],
    shrink: ShrinkFn,
    options: ShrinkOptions,
    jobs: int = 1,
    on_result: ResultCallback | None = None,
) -> tuple[list[FileResult], RunSummary]:
    """Process candidates and return the results with their summary.

    With ``jobs == 1`` files are handled strictly in order. Larger values
    use a thread pool; results are then delivered in completion order.
    """
    if jobs < 1:
        raise ValueError("jobs must be >= 1")

    aggregator = RunAggregator()
    results: list[FileResult] = []

    def record(result: FileResult) -> None:
        aggregator.add(result)
        results.append(result)
        if on_result is not None:
            on_result(result)

    if jobs == 1 or len(candidates) <= 1:
        for candidate in candidates:
            record(process_file(candidate, shrink, options))
        return results, aggregator.summary()

    def run_group(group: list[CandidateFile]) -> list[FileResult]:
        return [process_file(candidate, shrink, options) for candidate in group]

    # Callbacks run on this thread only, so reporting stays serialized.
    with ThreadPoolExecutor(max_workers=jobs, thread_name_prefix="pdfshrink") as pool:
        futures = [pool.submit(run_group, group) for group in group_by_file(candidates)]
        for future in as_completed(futures):
            for result in future.result():
                record(result)

    return results, aggregator.summary()


def group_by_file(candidates: Sequence[CandidateFile]) -> list[list[CandidateFile]]:
    """Group candidates that point at the same file, keeping first-seen order."""
    groups: dict[Path, list[CandidateFile]] = {}
    for candidate in candidates:
        groups.setdefault(_file_key(candidate.path), []).append(candidate)
    return list(groups.values())


def _file_key(path: Path) -> Path:
    try:
        return path.resolve()
    except OSError:
        return path.absolute()
