"""ApplicationSettings parsing and SettingsManager persistence."""

from __future__ import annotations

import json

import pytest

from models import ApplicationSettings
from settings_manager import SettingsManager


def test_missing_file_gives_defaults(tmp_path):
    settings = SettingsManager(tmp_path / "settings.json").load()
    assert settings == ApplicationSettings()
    assert settings.pause_tick_ms == 100
    assert settings.action_gap_ms == 100


def test_save_then_load(tmp_path):
    manager = SettingsManager(tmp_path / "nested" / "settings.json")
    settings = ApplicationSettings(macros_path="/data/m.json", pause_hotkey="ctrl+F9", action_gap_ms=0)

    manager.save(settings)

    assert manager.load() == settings
    assert not manager.storage_path.with_suffix(".tmp").exists()


def test_corrupt_file_is_backed_up(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("[]", encoding="utf-8")

    assert SettingsManager(path).load() == ApplicationSettings()
    assert (tmp_path / "settings.bak").exists()
    assert not path.exists()


def test_invalid_values_fall_back_to_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"action_gap_ms": -5}), encoding="utf-8")
    assert SettingsManager(path).load() == ApplicationSettings()


def test_validation():
    with pytest.raises(ValueError):
        ApplicationSettings(pause_tick_ms=0)
    with pytest.raises(ValueError):
        ApplicationSettings(log_max_entries=0)


def test_relative_macros_path_resolves_next_to_settings(tmp_path):
    manager = SettingsManager(tmp_path / "settings.json")
    assert manager.macros_path(ApplicationSettings()) == tmp_path / "macros.json"
    absolute = tmp_path / "elsewhere" / "m.json"
    assert manager.macros_path(ApplicationSettings(macros_path=str(absolute))) == absolute
