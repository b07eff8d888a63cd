"""Command-line interface for pdfshrink."""

from __future__ import annotations

import argparse
from functools import partial
import logging
from pathlib import Path
from typing import Sequence

from pdfshrink.batch import run_batch
from pdfshrink.discovery import collect_pdfs
from pdfshrink.engine import EngineNotFoundError, require_ghostscript, run_engine
from pdfshrink.models import (
    CandidateFile,
    EngineHandle,
    FileResult,
    InvocationConfig,
    Quality,
    RunConfig,
    RunSummary,
)
from pdfshrink.processor import ShrinkOptions
from pdfshrink.reporting import ConsoleReporter, build_run_result, write_run_reports

DEFAULT_SUFFIX = "_compressed"
NO_FILES_MESSAGE = "no matching files found"
LOG_HANDLER_NAME = "pdfshrink-console"


def build_parser() -> argparse.ArgumentParser:
    """Create the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="pdfshrink",
        description="Compress and reduce PDF file sizes using Ghostscript.",
    )
    parser.add_argument(
        "inputs",
        nargs="+",
        metavar="INPUT",
        help="Input PDF file(s) or directories.",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        default=None,
        metavar="DIR",
        help="Write compressed files to this directory instead of alongside the originals.",
    )
    parser.add_argument(
        "-s",
        "--suffix",
        default=None,
        metavar="SUFFIX",
        help=f"Suffix appended to the output filename. Default: {DEFAULT_SUFFIX}.",
    )
    parser.add_argument(
        "-q",
        "--quality",
        type=str.lower,
        choices=[quality.value for quality in Quality],
        default=Quality.EBOOK.value,
        help=(
            "Compression preset: screen (72 dpi, smallest), ebook (150 dpi), "
            "printer (300 dpi), prepress (300 dpi, colour-preserving). Default: ebook."
        ),
    )
    parser.add_argument(
        "-r",
        "--recursive",
        action="store_true",
        help="Recursively process subdirectories.",
    )
    parser.add_argument(
        "--in-place",
        action="store_true",
        help="Overwrite the original file (write a temporary file, then rename over the original).",
    )
    parser.add_argument(
        "-j",
        "--jobs",
        type=_parse_jobs,
        default=1,
        help="Number of files to compress concurrently. Default: 1.",
    )
    parser.add_argument(
        "--timeout",
        type=_parse_timeout,
        default=None,
        metavar="SECONDS",
        help="Abort Ghostscript for a file after this many seconds.",
    )
    parser.add_argument(
        "--gs",
        dest="engine",
        default=None,
        metavar="EXECUTABLE",
        help="Ghostscript executable to use instead of searching PATH.",
    )
    parser.add_argument(
        "--verify-pages",
        action="store_true",
        help="Reject outputs whose page count differs from the original.",
    )
    parser.add_argument(
        "--report-dir",
        default=None,
        help="Directory for JSON and text run reports. Reports are skipped when omitted.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show Ghostscript output and debug logging.",
    )
    return parser


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and return the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    _validate_cli_args(parser=parser, args=args)
    _configure_logging(verbose=bool(args.verbose))
    _configure_pypdf_logging()

    config = RunConfig(
        inputs=tuple(str(value) for value in args.inputs),
        output_dir=str(args.output_dir) if args.output_dir is not None else None,
        suffix=str(args.suffix) if args.suffix is not None else DEFAULT_SUFFIX,
        quality=Quality.parse(args.quality),
        recursive=bool(args.recursive),
        in_place=bool(args.in_place),
        verbose=bool(args.verbose),
        jobs=int(args.jobs),
        timeout=args.timeout,
        verify_pages=bool(args.verify_pages),
        report_dir=str(args.report_dir) if args.report_dir is not None else None,
        engine=args.engine,
    )
    reporter = ConsoleReporter(verbose=config.verbose)

    run_warnings: list[str] = []
    run_errors: list[str] = []
    files: list[FileResult] = []
    summary = RunSummary(files_found=0, succeeded=0, failed=0, skipped=0, bytes_saved=0)
    engine: EngineHandle | None = None
    output_dir = Path(config.output_dir) if config.output_dir is not None else None

    if output_dir is not None:
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            run_errors.append(f"failed to create output directory '{output_dir}': {exc}")

    candidates: list[CandidateFile] = []
    if not run_errors:
        discovery = collect_pdfs(config.inputs, recursive=config.recursive)
        candidates = discovery.candidates
        run_warnings.extend(f"skipped {skip.path} ({skip.reason})" for skip in discovery.skips)
        if not candidates:
            run_errors.append(NO_FILES_MESSAGE)

    if not run_errors:
        try:
            engine = require_ghostscript([config.engine] if config.engine else None)
        except EngineNotFoundError as exc:
            run_errors.append(str(exc))

    if engine is not None and not run_errors:
        invocation = InvocationConfig(
            engine=engine,
            quality=config.quality,
            verbose=config.verbose,
            timeout=config.timeout,
        )
        options = ShrinkOptions(
            in_place=config.in_place,
            suffix=config.suffix,
            output_dir=output_dir,
            verify_pages=config.verify_pages,
        )
        files, summary = run_batch(
            candidates,
            partial(run_engine, invocation),
            options,
            jobs=config.jobs,
            on_result=reporter.file_result,
        )
        reporter.summary(summary)

    for error in run_errors:
        reporter.error(error)

    if config.report_dir is not None:
        run_result = build_run_result(
            config=config,
            files=files,
            summary=summary,
            engine_version=engine.version if engine is not None else None,
            warnings=run_warnings,
            errors=run_errors,
        )
        json_path, txt_path = write_run_reports(run_result=run_result, report_dir=Path(config.report_dir))
        print(f"pdfshrink: reports written to {json_path} and {txt_path}")

    if run_errors:
        return 1
    return summary.exit_code


def main(argv: Sequence[str] | None = None) -> None:
    """Run the CLI as a console entry point."""
    raise SystemExit(run_cli(argv))


def _configure_logging(verbose: bool) -> None:
    """Send pdfshrink diagnostics to stderr as ``pdfshrink: <level>: <message>``."""
    logger = logging.getLogger("pdfshrink")
    for handler in [h for h in logger.handlers if h.get_name() == LOG_HANDLER_NAME]:
        logger.removeHandler(handler)
    handler = logging.StreamHandler()
    handler.set_name(LOG_HANDLER_NAME)
    handler.setFormatter(logging.Formatter("pdfshrink: %(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)


def _configure_pypdf_logging() -> None:
    """Suppress pypdf warning spam from the page-count check."""
    logger = logging.getLogger("pypdf")
    logger.setLevel(logging.ERROR)
    logger.propagate = False
    if not any(isinstance(handler, logging.NullHandler) for handler in logger.handlers):
        logger.addHandler(logging.NullHandler())


def _parse_jobs(value: str) -> int:
    try:
        jobs = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("jobs must be an integer") from exc
    if jobs < 1:
        raise argparse.ArgumentTypeError("jobs must be >= 1")
    return jobs


def _parse_timeout(value: str) -> float:
    try:
        seconds = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("timeout must be a number of seconds") from exc
    if seconds <= 0:
        raise argparse.ArgumentTypeError("timeout must be > 0 seconds")
    return seconds


def _validate_cli_args(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    """Validate CLI argument combinations after parsing."""
    if args.in_place and args.output_dir is not None:
        parser.error("--in-place cannot be combined with --output-dir.")
    if args.in_place and args.suffix is not None:
        parser.error("--in-place cannot be combined with --suffix.")
