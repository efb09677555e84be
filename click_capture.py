"""Live mouse capture that feeds a MacroRecorder while a recording is active."""

from __future__ import annotations

import logging
import math
import threading
import time
from typing import Callable, Optional, Tuple

try:
    from pynput import mouse  # type: ignore
except Exception:  # pragma: no cover - environment dependent
    mouse = None  # type: ignore

from macro.actions import Action, ActionType
from macro.recorder import MacroRecorder

logger = logging.getLogger(__name__)

ErrorCallback = Callable[[Exception], None]


class ClickCaptureService:
    """
    Listens to global mouse presses and records one action per press/release.

    - pointer moved at least `swipe_threshold_px` -> SWIPE
    - held at least `long_press_ms`              -> LONG_PRESS (whole seconds, min 1)
    - otherwise                                   -> CLICK
    """

    def __init__(
        self,
        recorder: MacroRecorder,
        long_press_ms: int = 600,
        swipe_threshold_px: int = 20,
        normalize_coordinates: bool = True,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self._recorder = recorder
        self._long_press_ms = long_press_ms
        self._swipe_threshold = swipe_threshold_px
        self._normalize = normalize_coordinates
        self._clock = clock or time.monotonic
        self._listener: Optional[object] = None
        self._lock = threading.Lock()
        # press position, capture-clock time and recorder timestamp of the open gesture
        self._pressed_at: Optional[Tuple[int, int, float, int]] = None

    @property
    def is_active(self) -> bool:
        return self._listener is not None

    def start(self, on_error: Optional[ErrorCallback] = None) -> bool:
        """Start listening. Returns False if already listening or no backend exists."""
        with self._lock:
            if self._listener is not None:
                return False

            try:
                if mouse is None:
                    raise RuntimeError("pynput/mouse backend not available; live capture disabled")
                self._listener = mouse.Listener(on_click=self._handle_click)
                self._listener.start()
                return True
            except Exception as exc:  # pragma: no cover - hardware dependent
                self._listener = None
                logger.error("Mouse capture failed to start: %s", exc)
                if on_error:
                    try:
                        on_error(exc)
                    except Exception:
                        pass
                return False

    def stop(self) -> None:
        with self._lock:
            listener = self._listener
            self._listener = None
            self._pressed_at = None
        if listener is not None:
            try:
                listener.stop()  # type: ignore[attr-defined]
            except Exception:
                pass

    # Internal helpers -------------------------------------------------

    def _handle_click(self, x: float, y: float, _button, pressed: bool) -> bool:
        px, py = self._position(x, y)
        if pressed:
            self._pressed_at = (px, py, self._clock(), self._recorder.now_ms())
            return True

        if self._pressed_at is None:
            return True
        sx, sy, started, stamp = self._pressed_at
        self._pressed_at = None

        action = self._classify(sx, sy, px, py, (self._clock() - started) * 1000.0)
        # delays run press to press
        self._recorder.record_macro_action(action, timestamp=stamp)
        return True

    def _classify(self, sx: int, sy: int, ex: int, ey: int, held_ms: float) -> Action:
        if math.hypot(ex - sx, ey - sy) >= self._swipe_threshold:
            return Action(type=ActionType.SWIPE, x=sx, y=sy, x2=ex, y2=ey)
        if held_ms >= self._long_press_ms:
            seconds = max(1, int(round(held_ms / 1000.0)))
            return Action(type=ActionType.LONG_PRESS, x=sx, y=sy, duration=seconds)
        return Action(type=ActionType.CLICK, x=sx, y=sy)

    def _position(self, x: float, y: float) -> Tuple[int, int]:
        # Normalise with pyautogui so recorded points match the coordinate
        # system used for playback (DPI scaling on multi-monitor setups).
        if self._normalize:
            try:
                import pyautogui  # type: ignore
                cx, cy = pyautogui.position()
                return int(cx), int(cy)
            except Exception:
                pass
        return int(x), int(y)
