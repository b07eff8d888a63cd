"""Tests for the quality preset enumeration."""

from __future__ import annotations

import pytest

from pdfshrink.models import Quality


def test_quality_presets_map_to_ghostscript_settings() -> None:
    assert Quality.SCREEN.gs_setting == "/screen"
    assert Quality.EBOOK.gs_setting == "/ebook"
    assert Quality.PRINTER.gs_setting == "/printer"
    assert Quality.PREPRESS.gs_setting == "/prepress"


def test_quality_presets_are_ordered_low_to_high() -> None:
    assert sorted([Quality.PREPRESS, Quality.SCREEN, Quality.PRINTER, Quality.EBOOK]) == [
        Quality.SCREEN,
        Quality.EBOOK,
        Quality.PRINTER,
        Quality.PREPRESS,
    ]
    assert Quality.SCREEN < Quality.PREPRESS


def test_quality_parse_ignores_case() -> None:
    assert Quality.parse("Printer") is Quality.PRINTER
    assert Quality.parse(" ebook ") is Quality.EBOOK


def test_quality_parse_rejects_unknown_names() -> None:
    with pytest.raises(ValueError, match="unknown quality preset"):
        Quality.parse("maximum")


def test_quality_presets_support_every_comparison() -> None:
    assert Quality.EBOOK <= Quality.EBOOK
    assert Quality.SCREEN <= Quality.PRINTER
    assert Quality.PREPRESS > Quality.PRINTER
    assert Quality.PRINTER >= Quality.EBOOK
    assert not Quality.PREPRESS <= Quality.SCREEN
    assert max(Quality) is Quality.PREPRESS
