"""Typed models for pdfshrink run configuration and results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from functools import total_ordering
from pathlib import Path

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]

STATUS_DONE = "done"
STATUS_SKIPPED = "skipped"
STATUS_FAILED = "failed"


@total_ordering
class Quality(Enum):
    """Ghostscript quality presets, ordered from smallest output to highest fidelity."""

    SCREEN = "screen"
    EBOOK = "ebook"
    PRINTER = "printer"
    PREPRESS = "prepress"

    @classmethod
    def parse(cls, text: str) -> Quality:
        """Return the preset named by ``text`` (case-insensitive)."""
        try:
            return cls(text.strip().lower())
        except ValueError as exc:
            choices = ", ".join(quality.value for quality in cls)
            raise ValueError(f"unknown quality preset '{text}' (choose from {choices})") from exc

    @property
    def rank(self) -> int:
        return list(type(self)).index(self)

    @property
    def gs_setting(self) -> str:
        """Value passed to Ghostscript's ``-dPDFSETTINGS``."""
        return f"/{self.value}"

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Quality):
            return NotImplemented
        return self.rank < other.rank


@dataclass(frozen=True)
class RunConfig:
    """Configuration for a single CLI run."""

    inputs: tuple[str, ...]
    output_dir: str | None
    suffix: str
    quality: Quality
    recursive: bool
    in_place: bool
    verbose: bool
    jobs: int = 1
    timeout: float | None = None
    verify_pages: bool = False
    report_dir: str | None = None
    engine: str | None = None


@dataclass(frozen=True)
class CandidateFile:
    """A discovered PDF path scheduled for shrinking."""

    path: Path
    origin: Path
    source: str


@dataclass(frozen=True)
class DiscoverySkip:
    """An input path that discovery excluded, with the reason."""

    path: Path
    reason: str


@dataclass(frozen=True)
class DiscoveryResult:
    """Ordered candidates plus the non-fatal skips recorded on the way."""

    candidates: list[CandidateFile]
    skips: list[DiscoverySkip] = field(default_factory=list)


@dataclass(frozen=True)
class EngineHandle:
    """A resolved Ghostscript command, probed once per run."""

    command: tuple[str, ...]
    version: str


@dataclass(frozen=True)
class InvocationConfig:
    """Engine settings shared read-only by every file in a run."""

    engine: EngineHandle
    quality: Quality = Quality.EBOOK
    verbose: bool = False
    timeout: float | None = None


@dataclass(frozen=True)
class InvocationOutcome:
    """Result of one engine call."""

    ok: bool
    output_path: Path
    stdout: str = ""
    error: str | None = None


@dataclass(frozen=True)
class SizeDecision:
    """Whether a produced file is smaller than its original."""

    improved: bool
    saved_bytes: int = 0


@dataclass(frozen=True)
class FileResult:
    """Processing result for a single PDF."""

    input_path: str
    destination: str
    output_path: str | None
    status: str
    original_bytes: int
    output_bytes: int
    bytes_saved: int
    error: str | None = None
    engine_output: str = ""
    timings: dict[str, float] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status != STATUS_FAILED

    @property
    def saved_percent(self) -> float:
        if self.original_bytes <= 0:
            return 0.0
        return (self.bytes_saved / self.original_bytes) * 100.0


@dataclass(frozen=True)
class RunSummary:
    """Totals over every file result of a run."""

    files_found: int
    succeeded: int
    failed: int
    skipped: int
    bytes_saved: int

    @property
    def ok(self) -> bool:
        return self.files_found > 0 and self.failed == 0

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1


@dataclass(frozen=True)
class RunResult:
    """Aggregated result for a full CLI run."""

    timestamp_local: str
    timestamp_utc: str
    user: str
    host: str
    python_version: str
    pypdf_version: str
    engine_version: str | None
    config: RunConfig
    files: list[FileResult]
    summary: RunSummary
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
