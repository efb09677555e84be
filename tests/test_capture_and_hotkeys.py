"""Live click capture classification and hotkey parsing/binding."""

from __future__ import annotations

import pytest

from click_capture import ClickCaptureService
from hotkey_manager import HotkeyManager, parse_hotkey
from macro import ActionType, MacroPlayer, MacroRecorder

from conftest import FakeDevice


class StepClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def capture():
    recorder = MacroRecorder()
    recorder.start_recording()
    clock = StepClock()
    service = ClickCaptureService(
        recorder, long_press_ms=600, swipe_threshold_px=20, normalize_coordinates=False, clock=clock
    )
    return service, recorder, clock


def press_release(service, clock, start, end, held_seconds):
    service._handle_click(start[0], start[1], None, True)
    clock.now += held_seconds
    service._handle_click(end[0], end[1], None, False)


def test_short_press_is_click(capture):
    service, recorder, clock = capture
    press_release(service, clock, (10, 20), (12, 21), 0.1)
    action = recorder.stop_recording().actions[0]
    assert action.type is ActionType.CLICK
    assert (action.x, action.y) == (10, 20)


def test_held_press_is_long_press(capture):
    service, recorder, clock = capture
    press_release(service, clock, (5, 5), (5, 5), 2.2)
    action = recorder.stop_recording().actions[0]
    assert action.type is ActionType.LONG_PRESS
    assert action.duration == 2


def test_drag_is_swipe(capture):
    service, recorder, clock = capture
    press_release(service, clock, (0, 0), (0, 300), 0.4)
    action = recorder.stop_recording().actions[0]
    assert action.type is ActionType.SWIPE
    assert (action.x, action.y, action.x2, action.y2) == (0, 0, 0, 300)


def test_release_without_press_is_ignored(capture):
    service, recorder, _clock = capture
    service._handle_click(1, 1, None, False)
    assert recorder.recorded_count == 0


def test_delays_measure_press_to_press():
    clock = StepClock()
    recorder = MacroRecorder(clock=clock)
    recorder.start_recording()
    service = ClickCaptureService(
        recorder, long_press_ms=600, swipe_threshold_px=20, normalize_coordinates=False, clock=clock
    )

    press_release(service, clock, (5, 5), (5, 5), 2.2)
    clock.now = 3.0
    press_release(service, clock, (0, 0), (0, 300), 0.5)
    clock.now = 4.0
    press_release(service, clock, (9, 9), (9, 9), 0.1)

    long_press, swipe, tap = recorder.stop_recording().actions
    assert long_press.type is ActionType.LONG_PRESS and long_press.delay == 0
    assert swipe.type is ActionType.SWIPE and swipe.delay == 3000
    assert tap.type is ActionType.CLICK and tap.delay == 1000


class TestHotkeys:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("F7", "<f7>"),
            ("ctrl+shift+p", "<ctrl>+<shift>+p"),
            ("Win + F12", "<cmd>+<f12>"),
            ("option+f", "<alt>+f"),
        ],
    )
    def test_parse_hotkey(self, raw, expected):
        assert parse_hotkey(raw) == expected

    @pytest.mark.parametrize("raw", ["", "  ", "ctrl+", "+"])
    def test_malformed_hotkey_rejected(self, raw):
        with pytest.raises(ValueError):
            parse_hotkey(raw)

    def test_bind_player_maps_pause_and_stop(self):
        player = MacroPlayer(FakeDevice())
        manager = HotkeyManager("F7", "F8")
        manager.bind_player(player)

        hotkey_map = manager.build_hotkey_map()
        assert set(hotkey_map) == {"<f7>", "<f8>"}

        hotkey_map["<f8>"]()
        assert player.progress.state.value == "stopped"

    def test_clashing_hotkeys_are_not_enabled(self):
        manager = HotkeyManager("f9", "F9")
        manager.bind_player(MacroPlayer(FakeDevice()))
        with pytest.raises(ValueError):
            manager.build_hotkey_map()
        assert manager.enable_hotkeys() is False
        assert not manager.is_enabled

    def test_nothing_to_enable_without_a_player(self):
        manager = HotkeyManager()
        assert manager.build_hotkey_map() == {}
        assert manager.enable_hotkeys() is False
        manager.disable_hotkeys()
