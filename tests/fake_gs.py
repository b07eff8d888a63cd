"""Stand-in for the Ghostscript executable used by engine and CLI tests.

Run as ``python fake_gs.py <gs arguments>``. Behaviour per input file name is
read from the JSON file named by ``FAKE_GS_PLAN``; each entry may set:

- ``size``: write an output of exactly this many bytes
- ``pages``: write a valid PDF with this many pages
- ``copy``: copy the input unchanged
- ``exit`` / ``stderr``: exit with this status after printing ``stderr``
- ``partial``: write a few bytes of output before failing
- ``sleep``: sleep this many seconds first

Without an entry the output is half the size of the input. ``FAKE_GS_BROKEN``
makes the ``--version`` probe fail.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
import shutil
import sys
import time

FAKE_GS_PATH = Path(__file__).resolve()
FAKE_GS_VERSION = "10.02.1"


def fake_engine():
    """Handle that runs this script with the current interpreter."""
    from pdfshrink.models import EngineHandle

    return EngineHandle(command=(sys.executable, str(FAKE_GS_PATH)), version=FAKE_GS_VERSION)


def write_plan(directory: Path, plan: dict[str, dict[str, object]]) -> Path:
    """Write a behaviour plan and return its path for ``FAKE_GS_PLAN``."""
    plan_path = directory / "fake_gs_plan.json"
    plan_path.write_text(json.dumps(plan), encoding="utf-8")
    return plan_path


def main(argv: list[str]) -> int:
    if "--version" in argv:
        if os.environ.get("FAKE_GS_BROKEN"):
            return 1
        print(FAKE_GS_VERSION)
        return 0

    output_arg = next(arg for arg in argv if arg.startswith("-sOutputFile="))
    output_path = Path(output_arg.split("=", 1)[1])
    input_path = Path(argv[-1])
    entry = _load_plan().get(input_path.name, {})

    if "sleep" in entry:
        time.sleep(float(entry["sleep"]))

    if "-dQUIET" not in argv:
        print(f"Processing pages of {input_path.name}")

    if "exit" in entry:
        if entry.get("partial"):
            output_path.write_bytes(b"%PDF-1.4\n%partial")
        sys.stderr.write(str(entry.get("stderr", "")))
        return int(entry["exit"])

    if entry.get("copy"):
        shutil.copyfile(input_path, output_path)
    elif "pages" in entry:
        _write_pages(output_path, int(entry["pages"]))
    else:
        size = int(entry.get("size", input_path.stat().st_size // 2))
        header = b"%PDF-1.4\n"
        output_path.write_bytes((header + b"1" * max(0, size - len(header)))[:size])
    return 0


def _load_plan() -> dict[str, dict[str, object]]:
    plan_path = os.environ.get("FAKE_GS_PLAN")
    if not plan_path:
        return {}
    return json.loads(Path(plan_path).read_text(encoding="utf-8"))


def _write_pages(output_path: Path, pages: int) -> None:
    from pypdf import PdfWriter

    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=612, height=792)
    with output_path.open("wb") as handle:
        writer.write(handle)


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
