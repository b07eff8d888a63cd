"""Single-file shrink pipeline: invoke, size gate, keep or replace."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path
import shutil
import tempfile
from time import perf_counter
from typing import Callable

from pypdf import PdfReader

from pdfshrink.models import (
    STATUS_DONE,
    STATUS_FAILED,
    STATUS_SKIPPED,
    CandidateFile,
    FileResult,
    InvocationOutcome,
    SizeDecision,
)

logger = logging.getLogger(__name__)

TEMP_SUFFIX = ".pdfshrink-tmp.pdf"

ShrinkFn = Callable[[Path, Path], InvocationOutcome]


@dataclass(frozen=True)
class ShrinkOptions:
    """Replacement settings, fixed for the whole run."""

    in_place: bool = False
    suffix: str = "_compressed"
    output_dir: Path | None = None
    verify_pages: bool = False


def decide_size(original_bytes: int, produced_bytes: int) -> SizeDecision:
    """Accept the produced file only when it is strictly smaller than a non-empty original."""
    if original_bytes < 0 or produced_bytes < 0:
        raise ValueError("byte counts must be >= 0")
    if original_bytes == 0 or produced_bytes >= original_bytes:
        return SizeDecision(improved=False)
    return SizeDecision(improved=True, saved_bytes=original_bytes - produced_bytes)


def build_output_path(input_path: Path, suffix: str, output_dir: Path | None = None) -> Path:
    """Return ``<dir>/<stem><suffix><ext>`` for a sibling output file."""
    name = f"{input_path.stem}{suffix}{input_path.suffix}"
    if output_dir is None:
        return input_path.with_name(name)
    return output_dir / name


def make_temp_path(input_path: Path) -> Path:
    """Reserve a private temporary file in the same directory as ``input_path``."""
    fd, name = tempfile.mkstemp(
        prefix=f".{input_path.stem}.",
        suffix=TEMP_SUFFIX,
        dir=str(input_path.parent),
    )
    os.close(fd)
    return Path(name)


def process_file(candidate: CandidateFile, shrink: ShrinkFn, options: ShrinkOptions) -> FileResult:
    """Shrink one PDF and return a structured file result."""
    run_start = perf_counter()
    timings: dict[str, float] = {}
    input_path = candidate.path
    original_bytes = file_size(input_path)

    def result(
        status: str,
        destination: Path,
        output_path: Path | None = None,
        output_bytes: int = 0,
        bytes_saved: int = 0,
        error: str | None = None,
        engine_output: str = "",
    ) -> FileResult:
        timings["total_seconds"] = round(perf_counter() - run_start, 6)
        return FileResult(
            input_path=str(input_path),
            destination=str(destination),
            output_path=str(output_path) if output_path is not None else None,
            status=status,
            original_bytes=original_bytes,
            output_bytes=output_bytes,
            bytes_saved=bytes_saved,
            error=error,
            engine_output=engine_output,
            timings=timings,
        )

    if options.in_place:
        destination = input_path
        try:
            target = make_temp_path(input_path)
        except OSError as exc:
            return result(STATUS_FAILED, destination, error=f"temp_error: {exc}")
    else:
        target = build_output_path(input_path, options.suffix, options.output_dir)
        destination = target
        if _same_file(target, input_path):
            return result(
                STATUS_FAILED,
                destination,
                error="output path is the input file; use a suffix, an output directory or --in-place",
            )

    engine_start = perf_counter()
    outcome = shrink(input_path, target)
    timings["engine_seconds"] = round(perf_counter() - engine_start, 6)

    if not outcome.ok:
        remove_quietly(target)
        return result(
            STATUS_FAILED,
            destination,
            error=outcome.error or "Ghostscript failed",
            engine_output=outcome.stdout,
        )

    if options.verify_pages:
        problem = compare_page_counts(input_path, target)
        if problem is not None:
            remove_quietly(target)
            return result(STATUS_FAILED, destination, error=problem, engine_output=outcome.stdout)

    output_bytes = file_size(target)
    decision = decide_size(original_bytes, output_bytes)
    if not decision.improved:
        remove_quietly(target)
        return result(
            STATUS_SKIPPED,
            destination,
            output_bytes=output_bytes,
            engine_output=outcome.stdout,
        )

    if options.in_place:
        try:
            shutil.copymode(input_path, target)
            os.replace(target, input_path)
        except OSError as exc:
            remove_quietly(target)
            return result(
                STATUS_FAILED,
                destination,
                output_bytes=output_bytes,
                error=f"rename failed: {exc}",
                engine_output=outcome.stdout,
            )
        target = input_path

    return result(
        STATUS_DONE,
        destination,
        output_path=target,
        output_bytes=output_bytes,
        bytes_saved=decision.saved_bytes,
        engine_output=outcome.stdout,
    )


def compare_page_counts(original_path: Path, produced_path: Path) -> str | None:
    """Return an error message when the produced PDF lost or gained pages."""
    try:
        original_pages = len(PdfReader(str(original_path), strict=False).pages)
    except Exception as exc:
        logger.debug("cannot count pages of %s: %s", original_path, exc)
        return None
    try:
        produced_pages = len(PdfReader(str(produced_path), strict=False).pages)
    except Exception as exc:
        return f"read_error: produced PDF is unreadable: {exc}"
    if produced_pages != original_pages:
        return f"page_count_mismatch: original has {original_pages} page(s), output has {produced_pages}"
    return None


def file_size(path: Path) -> int:
    try:
        return path.stat().st_size
    except OSError:
        return 0


def remove_quietly(path: Path) -> None:
    """Delete ``path`` if present, logging instead of raising on failure."""
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("could not remove %s: %s", path, exc)


def _same_file(first: Path, second: Path) -> bool:
    try:
        return first.resolve() == second.resolve()
    except OSError:
        return first == second
