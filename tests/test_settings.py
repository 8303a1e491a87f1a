"""Tests for the JSON settings store."""

import json
import os

import pytest

from errors import SettingsError
from settings import SettingsStore


def test_missing_file_reads_zero(tmp_path):
    store = SettingsStore(str(tmp_path / "settings.json"))
    assert store.get_int("LowBatteryThreshold") == 0


def test_set_creates_directory_and_round_trips(tmp_path):
    path = tmp_path / "nested" / "settings.json"
    store = SettingsStore(str(path))

    store.set_int("LowBatteryThreshold", 15)
    store.set_int("HighBatteryThreshold", 90)

    assert json.loads(path.read_text()) == {"LowBatteryThreshold": 15, "HighBatteryThreshold": 90}
    assert SettingsStore(str(path)).get_int("HighBatteryThreshold") == 90


def test_corrupt_file_is_treated_as_empty(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{not json")
    store = SettingsStore(str(path))

    assert store.get_int("LowBatteryThreshold") == 0
    store.set_int("LowBatteryThreshold", 20)
    assert store.get_int("LowBatteryThreshold") == 20


@pytest.mark.parametrize("raw", ['[1, 2]', '{"LowBatteryThreshold": "12"}', '{"LowBatteryThreshold": true}'])
def test_non_integer_values_read_zero(tmp_path, raw):
    path = tmp_path / "settings.json"
    path.write_text(raw)
    assert SettingsStore(str(path)).get_int("LowBatteryThreshold") == 0


def test_write_failure_raises_settings_error(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("")
    store = SettingsStore(os.path.join(str(blocker), "settings.json"))

    with pytest.raises(SettingsError):
        store.set_int("LowBatteryThreshold", 20)
