"""
Desktop implementation of the macro DeviceController protocol.

Taps, presses and swipes go through pyautogui. Text is sent with pywinauto on
Windows and with the pynput keyboard controller elsewhere. A desktop has no
external element list, so index-based calls fall back to the coordinate hint
recorded with the action and fail when there is none.

Backends are imported lazily so the module loads on headless machines.
"""

from __future__ import annotations

import logging
import subprocess
import sys
import time
from typing import Any, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


def _pyautogui() -> Any:
    import pyautogui  # local import to avoid hard dep at import time

    pyautogui.FAILSAFE = True  # Move mouse to corner to abort
    pyautogui.PAUSE = 0.0
    return pyautogui


def _get_pynput() -> Tuple[Optional[Any], Optional[Any]]:
    """Import pynput lazily and return (KeyboardControllerClass, KeyModule)."""
    try:
        from pynput.keyboard import Controller as KeyboardController, Key as KeyModule  # type: ignore
        return KeyboardController, KeyModule
    except Exception:
        return None, None


def _try_pywinauto_send_keys(text: str, *, pause: float = 0.0) -> bool:
    """Try to send keys via pywinauto on Windows; return True on success."""
    if not sys.platform.startswith("win"):
        return False
    try:
        from pywinauto.keyboard import send_keys as pw_send_keys  # type: ignore
        pw_send_keys(text, with_spaces=True, pause=max(0.0, float(pause)))
        return True
    except Exception as e:  # pragma: no cover
        logger.warning("pywinauto send_keys failed: %s", e)
        return False


class DesktopDeviceController:
    """Drives the local desktop; each call returns True/False or raises."""

    def __init__(self, swipe_seconds: float = 0.5, launcher: Optional[Sequence[str]] = None) -> None:
        self._swipe_seconds = swipe_seconds
        self._launcher = list(launcher) if launcher else None

    def tap(self, x: int, y: int) -> bool:
        _pyautogui().click(x=int(x), y=int(y))
        return True

    def smart_tap(self, index: int, x: Optional[int], y: Optional[int]) -> bool:
        if x is None or y is None:
            logger.warning("Element #%s has no coordinate hint; cannot tap on desktop", index)
            return False
        return self.tap(x, y)

    def long_press(self, x: int, y: int, ms: int) -> bool:
        gui = _pyautogui()
        gui.mouseDown(x=int(x), y=int(y))
        try:
            time.sleep(max(ms, 0) / 1000.0)
        finally:
            gui.mouseUp(x=int(x), y=int(y))
        return True

    def long_press_by_index(self, index: int, ms: int) -> bool:
        logger.warning("Element #%s cannot be resolved on desktop", index)
        return False

    def double_tap(self, x: int, y: int) -> bool:
        _pyautogui().doubleClick(x=int(x), y=int(y))
        return True

    def swipe(self, x1: int, y1: int, x2: int, y2: int) -> bool:
        gui = _pyautogui()
        gui.moveTo(int(x1), int(y1))
        gui.dragTo(int(x2), int(y2), duration=self._swipe_seconds, button="left")
        return True

    def type(self, text: str) -> bool:
        if not text:
            return True
        # Tiny pause between characters prevents dropped input in some apps
        if _try_pywinauto_send_keys(text, pause=0.015):
            return True
        kb_cls, _key_mod = _get_pynput()
        if kb_cls is None:
            logger.error("No keyboard backend available (install pynput)")
            return False
        kb = kb_cls()
        for ch in text:
            kb.press(ch); kb.release(ch)
            time.sleep(0.01)
        return True

    def smart_type(self, index: int, text: str) -> bool:
        # No element focus on desktop; type into whatever has focus.
        return self.type(text)

    def back(self) -> bool:
        _pyautogui().hotkey("alt", "left")
        return True

    def home(self) -> bool:
        modifier = "win" if sys.platform.startswith("win") else "super"
        _pyautogui().hotkey(modifier, "d")
        return True

    def open_app(self, name: str) -> bool:
        if not name:
            return False
        command = [*self._launcher, name] if self._launcher else [name]
        try:
            subprocess.Popen(command)
        except OSError as e:
            logger.error("Failed to start '%s': %s", name, e)
            return False
        return True
