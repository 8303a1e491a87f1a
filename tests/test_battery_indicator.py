"""Tests for the GTK front end helpers; skipped where PyGObject is unavailable."""

from unittest.mock import MagicMock, patch

import pytest

pytest.importorskip("gi")

try:
    import battery_indicator
except (ImportError, ValueError) as exc:  # AppIndicator3 typelib not installed
    pytest.skip(f"GTK indicator unavailable: {exc}", allow_module_level=True)


@pytest.mark.parametrize("level, expected", [
    (5, "battery-caution-symbolic"),
    (10, "battery-caution-symbolic"),
    (30, "battery-low-symbolic"),
    (60, "battery-good-symbolic"),
    (95, "battery-full-symbolic"),
])
def test_icon_name(level, expected):
    assert battery_indicator.get_icon_name(level, 10) == expected


def test_bar_colors_cover_every_band():
    assert set(battery_indicator.BAR_COLORS) == {"red", "orange", "green", "blue"}


def test_scheduled_tick_survives_a_failing_callback():
    scheduler = battery_indicator.GLibScheduler()
    callback = MagicMock(side_effect=OSError("device busy"))
    with patch.object(battery_indicator.GLib, "timeout_add_seconds", return_value=7) as add:
        scheduler.every(60, callback)

    interval, tick = add.call_args[0]
    assert interval == 60
    assert tick() is True
    assert tick() is True
    assert callback.call_count == 2
    assert scheduler.source_ids == [7]
