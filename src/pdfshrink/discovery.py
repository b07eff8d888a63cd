"""Candidate PDF discovery from mixed file and directory inputs."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator, Sequence

from pdfshrink.models import CandidateFile, DiscoveryResult, DiscoverySkip

logger = logging.getLogger(__name__)

PDF_SUFFIX = ".pdf"


def collect_pdfs(inputs: Sequence[Path | str], recursive: bool) -> DiscoveryResult:
    """Resolve input paths into an ordered list of candidate PDFs.

    Regular files are kept when their extension is ``.pdf`` in any case.
    Directories contribute their immediate children, or every descendant
    when ``recursive`` is set. Anything else is skipped; nothing here is
    fatal.
    """
    candidates: list[CandidateFile] = []
    skips: list[DiscoverySkip] = []

    for raw in inputs:
        origin = Path(raw)
        kind = _classify(origin)
        if kind == "file":
            if is_pdf(origin):
                candidates.append(CandidateFile(path=origin, origin=origin, source="file"))
            else:
                logger.warning("skipping non-PDF file: %s", origin)
                skips.append(DiscoverySkip(path=origin, reason="not_pdf"))
        elif kind == "directory":
            for path in _walk_directory(origin, recursive=recursive):
                candidates.append(CandidateFile(path=path, origin=origin, source="directory"))
        else:
            logger.warning("path not found: %s", origin)
            skips.append(DiscoverySkip(path=origin, reason="not_found"))

    return DiscoveryResult(candidates=candidates, skips=skips)


def is_pdf(path: Path) -> bool:
    """Return whether ``path`` has a ``.pdf`` extension, ignoring case."""
    return path.suffix.lower() == PDF_SUFFIX


def _classify(path: Path) -> str:
    try:
        if path.is_file():
            return "file"
        if path.is_dir():
            return "directory"
    except OSError:
        pass
    return "missing"


def _walk_directory(root: Path, recursive: bool) -> Iterator[Path]:
    """Yield matching files under ``root`` with names sorted per directory."""
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        for name in sorted(filenames):
            path = Path(dirpath) / name
            if is_pdf(path) and _classify(path) == "file":
                yield path
        if not recursive:
            break
