"""Ghostscript discovery and invocation."""

from __future__ import annotations

import logging
from pathlib import Path
import subprocess
import sys
from typing import Sequence

from pdfshrink.models import EngineHandle, InvocationConfig, InvocationOutcome

logger = logging.getLogger(__name__)

if sys.platform == "win32":
    GHOSTSCRIPT_CANDIDATES: tuple[str, ...] = ("gswin64c", "gswin32c", "gs")
else:
    GHOSTSCRIPT_CANDIDATES = ("gs", "gswin64c", "gswin32c")

PROBE_TIMEOUT_SECONDS = 10.0


class EngineNotFoundError(RuntimeError):
    """Raised when no Ghostscript executable answers the version probe."""

    def __init__(self, candidates: Sequence[str]) -> None:
        self.candidates = tuple(candidates)
        super().__init__(
            "Ghostscript not found (tried: "
            + ", ".join(self.candidates)
            + "). Install it with:\n"
            "  macOS:   brew install ghostscript\n"
            "  Ubuntu:  sudo apt-get install ghostscript\n"
            "  Windows: https://www.ghostscript.com/download/gsdnld.html"
        )


def find_ghostscript(candidates: Sequence[str] | None = None) -> EngineHandle | None:
    """Return the first candidate that answers ``--version`` successfully."""
    names = tuple(candidates) if candidates is not None else GHOSTSCRIPT_CANDIDATES
    for name in names:
        handle = probe_engine((name,))
        if handle is not None:
            return handle
    return None


def require_ghostscript(candidates: Sequence[str] | None = None) -> EngineHandle:
    """Like :func:`find_ghostscript` but raise when nothing responds."""
    names = tuple(candidates) if candidates is not None else GHOSTSCRIPT_CANDIDATES
    handle = find_ghostscript(names)
    if handle is None:
        raise EngineNotFoundError(names)
    return handle


def probe_engine(command: Sequence[str]) -> EngineHandle | None:
    """Run ``<command> --version`` and return a handle if it exits cleanly."""
    try:
        completed = subprocess.run(
            [*command, "--version"],
            capture_output=True,
            text=True,
            timeout=PROBE_TIMEOUT_SECONDS,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        logger.debug("engine probe failed for %s: %s", " ".join(command), exc)
        return None
    if completed.returncode != 0:
        logger.debug("engine probe for %s exited with %s", " ".join(command), completed.returncode)
        return None
    version = completed.stdout.strip()
    logger.debug("using Ghostscript %s (%s)", version or "?", " ".join(command))
    return EngineHandle(command=tuple(command), version=version)


def build_command(config: InvocationConfig, input_path: Path, output_path: Path) -> list[str]:
    """Build the Ghostscript argument vector for one file."""
    command = [
        *config.engine.command,
        "-sDEVICE=pdfwrite",
        "-dCompatibilityLevel=1.4",
        f"-dPDFSETTINGS={config.quality.gs_setting}",
        "-dNOPAUSE",
        "-dBATCH",
        "-dSAFER",
    ]
    if not config.verbose:
        command.append("-dQUIET")
    command.append(f"-sOutputFile={output_path}")
    command.append(str(input_path))
    return command


def run_engine(config: InvocationConfig, input_path: Path, output_path: Path) -> InvocationOutcome:
    """Invoke Ghostscript once and classify the outcome.

    On success ``output_path`` exists and holds the engine's result. On
    failure it may hold a partial file; removing it is the caller's job.
    """
    command = build_command(config, input_path, output_path)
    logger.debug("running: %s", " ".join(command))
    try:
        completed = subprocess.run(
            command,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=config.timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        return InvocationOutcome(
            ok=False,
            output_path=output_path,
            error=f"Ghostscript timed out after {config.timeout:g} seconds",
        )
    except OSError as exc:
        return InvocationOutcome(
            ok=False,
            output_path=output_path,
            error=f"Failed to spawn Ghostscript: {exc}",
        )

    if completed.returncode != 0:
        detail = completed.stderr or f"exit status {completed.returncode}"
        return InvocationOutcome(
            ok=False,
            output_path=output_path,
            stdout=completed.stdout,
            error=f"Ghostscript failed: {detail}",
        )
    if not output_path.is_file():
        return InvocationOutcome(
            ok=False,
            output_path=output_path,
            stdout=completed.stdout,
            error=f"Ghostscript reported success but wrote no output: {output_path}",
        )
    return InvocationOutcome(
        ok=True,
        output_path=output_path,
        stdout=completed.stdout if config.verbose else "",
    )
