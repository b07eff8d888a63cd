"""Console output and run report generation for pdfshrink."""

from __future__ import annotations

from dataclasses import asdict, is_dataclass
from datetime import datetime, timezone
from enum import Enum
import getpass
import json
from pathlib import Path
import platform
import sys
from typing import Any, TextIO

import pypdf

from pdfshrink.models import (
    STATUS_DONE,
    STATUS_SKIPPED,
    FileResult,
    JSONValue,
    RunConfig,
    RunResult,
    RunSummary,
)

PROG = "pdfshrink"
_UNITS = ("KB", "MB", "GB", "TB")


def format_bytes(size: int | float) -> str:
    """Render a byte count with binary multiples, e.g. ``1.5 MB``."""
    value = float(size)
    if abs(value) < 1024:
        return f"{int(value)} B"
    unit = _UNITS[0]
    for unit in _UNITS:
        value /= 1024.0
        if abs(value) < 1024:
            break
    return f"{value:.1f} {unit}"


def format_file_line(result: FileResult) -> str:
    """One console line describing a processed file."""
    head = f"  shrinking {result.input_path} -> {result.destination} ... "
    if result.status == STATUS_DONE:
        return head + (
            f"done ({format_bytes(result.original_bytes)} -> {format_bytes(result.output_bytes)}, "
            f"saved {format_bytes(result.bytes_saved)} / {result.saved_percent:.1f}%)"
        )
    if result.status == STATUS_SKIPPED:
        return head + (
            f"skip ({format_bytes(result.original_bytes)} - no reduction achieved; output discarded)"
        )
    return head + "failed"


def format_summary_line(summary: RunSummary) -> str:
    return (
        f"summary: {summary.succeeded} succeeded, {summary.failed} failed"
        f" - total saved: {format_bytes(summary.bytes_saved)}"
    )


class ConsoleReporter:
    """Write per-file lines and the final summary.

    Each file's lines go out in a single write so output from different
    files never interleaves.
    """

    def __init__(
        self,
        verbose: bool = False,
        out: TextIO | None = None,
        err: TextIO | None = None,
    ) -> None:
        self.verbose = verbose
        self.out = out if out is not None else sys.stdout
        self.err = err if err is not None else sys.stderr

    def file_result(self, result: FileResult) -> None:
        chunk = ""
        if self.verbose and result.engine_output:
            chunk += result.engine_output
            if not chunk.endswith("\n"):
                chunk += "\n"
        chunk += format_file_line(result) + "\n"
        self.out.write(chunk)
        self.out.flush()
        if result.error:
            self.err.write(f"  {result.error.rstrip()}\n")
            self.err.flush()

    def summary(self, summary: RunSummary) -> None:
        self.out.write("\n" + format_summary_line(summary) + "\n")
        self.out.flush()

    def error(self, message: str) -> None:
        self.err.write(f"{PROG}: error: {message}\n")
        self.err.flush()


def build_run_result(
    config: RunConfig,
    files: list[FileResult],
    summary: RunSummary,
    engine_version: str | None = None,
    warnings: list[str] | None = None,
    errors: list[str] | None = None,
) -> RunResult:
    """Build an aggregated run result with environment metadata."""
    now_utc = datetime.now(timezone.utc)
    now_local = now_utc.astimezone()
    return RunResult(
        timestamp_local=now_local.isoformat(),
        timestamp_utc=now_utc.isoformat(),
        user=_current_user(),
        host=platform.node(),
        python_version=sys.version.split()[0],
        pypdf_version=pypdf.__version__,
        engine_version=engine_version,
        config=config,
        files=files,
        summary=summary,
        warnings=list(warnings or []),
        errors=list(errors or []),
    )


def write_run_reports(run_result: RunResult, report_dir: Path) -> tuple[Path, Path]:
    """Write machine-readable and text run reports."""
    report_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.fromisoformat(run_result.timestamp_local).strftime("%Y%m%d_%H%M%S")
    json_path = report_dir / f"run_report_{timestamp}.json"
    txt_path = report_dir / f"run_report_{timestamp}.txt"
    suffix = 1
    while json_path.exists() or txt_path.exists():
        json_path = report_dir / f"run_report_{timestamp}_{suffix}.json"
        txt_path = report_dir / f"run_report_{timestamp}_{suffix}.txt"
        suffix += 1

    json_path.write_text(
        json.dumps(run_result_to_dict(run_result), indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    txt_path.write_text(_text_report(run_result), encoding="utf-8")
    return json_path, txt_path


def run_result_to_dict(run_result: RunResult) -> dict[str, JSONValue]:
    """Convert a run result to a JSON-serializable dictionary."""
    serialized = _serialize_value(run_result)
    if not isinstance(serialized, dict):
        raise TypeError("RunResult serialization must produce a dictionary.")
    return serialized


def _current_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "unknown"


def _text_report(run_result: RunResult) -> str:
    config = run_result.config
    summary = run_result.summary
    lines = [
        "pdfshrink Run Report",
        "",
        f"Timestamp (local): {run_result.timestamp_local}",
        f"Timestamp (UTC):   {run_result.timestamp_utc}",
        f"User:              {run_result.user}",
        f"Host:              {run_result.host}",
        f"Python:            {run_result.python_version}",
        f"pypdf:             {run_result.pypdf_version}",
        f"Ghostscript:       {run_result.engine_version or 'not found'}",
        "",
        "Config:",
        f"  inputs={list(config.inputs)}",
        f"  output_dir={config.output_dir}",
        f"  suffix={config.suffix}",
        f"  quality={config.quality.value}",
        f"  recursive={config.recursive}",
        f"  in_place={config.in_place}",
        f"  jobs={config.jobs}",
        f"  timeout={config.timeout}",
        f"  verify_pages={config.verify_pages}",
        f"  verbose={config.verbose}",
        "",
        "Summary:",
        f"  files_found={summary.files_found}",
        f"  succeeded={summary.succeeded}",
        f"  failed={summary.failed}",
        f"  skipped={summary.skipped}",
        f"  bytes_saved={summary.bytes_saved}",
    ]

    if run_result.warnings:
        lines.extend(["", "Run warnings:"])
        lines.extend(f"  - {warning}" for warning in run_result.warnings)

    if run_result.errors:
        lines.extend(["", "Run errors:"])
        lines.extend(f"  - {error}" for error in run_result.errors)

    lines.extend(["", "Files:", _file_table(run_result.files)])

    for file_result in run_result.files:
        if file_result.error:
            lines.extend(["", f"[{file_result.status}] {file_result.input_path}"])
            lines.extend(f"  {line}" for line in file_result.error.splitlines())

    return "\n".join(lines) + "\n"


def _file_table(files: list[FileResult]) -> str:
    if not files:
        return "status   original   output   saved   input\n(no PDF files found)"

    header = f"{'status':<8} {'original':>10} {'output':>10} {'saved':>10} input"
    rows = [
        f"{file.status:<8} {file.original_bytes:>10} {file.output_bytes:>10} "
        f"{file.bytes_saved:>10} {file.input_path}"
        for file in files
    ]
    return "\n".join([header, *rows])


def _serialize_value(value: Any) -> JSONValue:
    if is_dataclass(value) and not isinstance(value, type):
        return {
            field_name: _serialize_value(getattr(value, field_name))
            for field_name in asdict(value)
        }
    if isinstance(value, Enum):
        return _serialize_value(value.value)
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, dict):
        return {
            str(key): _serialize_value(item)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_serialize_value(item) for item in value]
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)
