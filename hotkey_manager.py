"""Global playback hotkeys: one toggles pause/resume, the other stops playback."""

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional

try:
    from pynput import keyboard  # type: ignore
except Exception:  # pragma: no cover - environment dependent
    keyboard = None  # type: ignore

from macro.engine import MacroPlayer

logger = logging.getLogger(__name__)

# user-facing modifier names -> pynput key names
MODIFIER_KEYS: Dict[str, str] = {
    "ctrl": "ctrl",
    "control": "ctrl",
    "alt": "alt",
    "option": "alt",
    "shift": "shift",
    "win": "cmd",
    "super": "cmd",
    "cmd": "cmd",
    "command": "cmd",
}


def parse_hotkey(text: str) -> str:
    """
    Translate a combination such as "ctrl+shift+p" or "F7" into pynput's
    GlobalHotKeys syntax ("<ctrl>+<shift>+p", "<f7>").

    Raises:
        ValueError: if the combination is empty or has an empty part ("ctrl+").
    """
    parts = [part.strip().lower() for part in (text or "").split("+")]
    if not any(parts):
        raise ValueError(f"Empty hotkey: {text!r}")
    if not all(parts):
        raise ValueError(f"Malformed hotkey: {text!r}")

    keys = []
    for part in parts:
        if part in MODIFIER_KEYS:
            keys.append(f"<{MODIFIER_KEYS[part]}>")
        elif len(part) > 1 and part[0] == "f" and part[1:].isdigit():
            keys.append(f"<{part}>")
        else:
            keys.append(part)
    return "+".join(keys)


class HotkeyManager:
    """Registers the pause and stop combinations for a bound MacroPlayer."""

    def __init__(self, pause_hotkey: str = "F7", stop_hotkey: str = "F8") -> None:
        self.pause_hotkey = pause_hotkey
        self.stop_hotkey = stop_hotkey
        self._player: Optional[MacroPlayer] = None
        self._listener: Optional[object] = None

    @property
    def is_enabled(self) -> bool:
        return self._listener is not None

    def bind_player(self, player: MacroPlayer) -> None:
        self._player = player

    def build_hotkey_map(self) -> Dict[str, Callable[[], None]]:
        """Empty until a player is bound. Raises ValueError for bad or clashing combinations."""
        if self._player is None:
            return {}
        pause = parse_hotkey(self.pause_hotkey)
        stop = parse_hotkey(self.stop_hotkey)
        if pause == stop:
            raise ValueError(f"Pause and stop share the hotkey {self.pause_hotkey!r}")
        return {pause: self._player.toggle_pause, stop: self._player.stop}

    def enable_hotkeys(self) -> bool:
        if self._listener is not None:
            return True

        try:
            hotkey_map = self.build_hotkey_map()
        except ValueError as exc:
            logger.error("Invalid hotkey definition: %s", exc)
            return False
        if not hotkey_map:
            return False

        if keyboard is None:
            logger.warning("pynput/keyboard backend not available; global hotkeys disabled")
            return False
        try:
            listener = keyboard.GlobalHotKeys(hotkey_map)
            listener.start()
        except Exception as exc:  # pragma: no cover - system specific
            logger.error("Failed to register hotkeys: %s", exc)
            return False
        self._listener = listener
        return True

    def disable_hotkeys(self) -> None:
        listener, self._listener = self._listener, None
        if listener is None:
            return
        try:
            listener.stop()  # type: ignore[attr-defined]
        except Exception:
            pass
