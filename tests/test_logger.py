"""StatusLogger history, forwarding and player observation."""

from __future__ import annotations

import logging

from logger import StatusLogger
from macro import MacroPlayer, PlaybackState

from conftest import FakeDevice, make_script


def test_history_is_bounded():
    status = StatusLogger(max_entries=3)
    for i in range(5):
        status.log_info(f"message {i}")
    assert [e.message for e in status.get_all_logs()] == ["message 2", "message 3", "message 4"]
    assert [e.message for e in status.get_recent_logs(1)] == ["message 4"]


def test_entries_are_forwarded(caplog):
    status = StatusLogger(name="macro.test")
    with caplog.at_level(logging.INFO, logger="macro.test"):
        status.log_warning("careful")
        status.update_status("Ready to play")
    assert "careful" in caplog.text
    assert status.get_current_status() == "Ready to play"


def test_attach_records_transitions_and_errors():
    device = FakeDevice(results={"tap": False})
    player = MacroPlayer(device, tick_ms=10, action_gap_ms=0)
    status = StatusLogger()
    status.attach(player)

    assert player.play(make_script())
    assert player.wait(timeout=5)

    assert player.progress.state is PlaybackState.STOPPED
    levels = [e.level for e in status.get_all_logs()]
    assert "ERROR" in levels
    errors = [e.message for e in status.get_all_logs() if e.level == "ERROR"]
    assert errors[-1].startswith("Action failed")


def test_export(tmp_path):
    status = StatusLogger()
    status.log_error("boom")
    target = tmp_path / "log.txt"

    assert status.export_logs_to_file(str(target)) is True
    text = target.read_text(encoding="utf-8")
    assert "Macro Player - Log Export" in text
    assert "ERROR: boom" in text
    assert status.export_logs_to_file(str(tmp_path / "missing" / "log.txt")) is False
