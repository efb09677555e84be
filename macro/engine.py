"""
Macro player: replays a Script against a device controller in a worker thread.

States
------
IDLE     -> PLAYING   play(script)
PLAYING <-> PAUSED    pause() / resume()
*        -> STOPPED   stop(), or a failed action (error_message is set)
PLAYING  -> IDLE      all loops completed
STOPPED  -> IDLE      reset()

The worker is the only writer of per-action progress. Control calls only flip
the pause/stop flags and reflect the resulting state.
"""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, List, Optional

from .actions import Action, ActionType
from .device import DeviceController, succeeded
from .script_model import Script

logger = logging.getLogger(__name__)

INFINITE_LOOPS = -1


class PlaybackState(Enum):
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    STOPPED = "stopped"


@dataclass(frozen=True)
class PlaybackProgress:
    """Snapshot of a playback session; replaced, never mutated."""

    state: PlaybackState = PlaybackState.IDLE
    current_loop: int = 0
    total_loops: int = 1  # INFINITE_LOOPS when the script repeats until stopped
    current_action: int = 0
    total_actions: int = 0
    current_action_description: str = ""
    error_message: Optional[str] = None

    @property
    def is_infinite(self) -> bool:
        return self.total_loops == INFINITE_LOOPS


ProgressListener = Callable[[PlaybackProgress], None]


class MacroPlayer:
    """
    Plays one script at a time.

    Sleeps (action delay, waits, gaps, loop delay, pause ticks) block on the
    session's stop event, so stop() cuts them short. A device call that is
    already running is always allowed to finish.
    """

    def __init__(self, device: DeviceController, tick_ms: int = 100, action_gap_ms: int = 100):
        self._device = device
        self._tick = max(int(tick_ms), 1) / 1000.0
        self._action_gap = max(int(action_gap_ms), 0) / 1000.0
        self._lock = threading.RLock()
        self._progress = PlaybackProgress()
        self._paused = threading.Event()
        self._stop_flag = threading.Event()
        self._worker_thread: Optional[threading.Thread] = None
        self._listeners: List[ProgressListener] = []
        self._status_callback: Optional[Callable[[str], None]] = None

    # Observers ---------------------------------------------------------

    @property
    def progress(self) -> PlaybackProgress:
        return self._progress

    @property
    def state(self) -> PlaybackState:
        return self._progress.state

    def is_playing(self) -> bool:
        return self._progress.state == PlaybackState.PLAYING

    def is_paused(self) -> bool:
        return self._progress.state == PlaybackState.PAUSED

    def add_listener(self, listener: ProgressListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: ProgressListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def register_status_callback(self, callback: Callable[[str], None]) -> None:
        self._status_callback = callback

    # Control -----------------------------------------------------------

    def play(self, script: Script) -> bool:
        """
        Start playing `script` in a background thread.

        Returns:
            bool: True if a session was started. Playing, paused or stopped
            (not yet reset) players reject the call.
        """
        with self._lock:
            state = self._progress.state
            if state != PlaybackState.IDLE:
                self._notify_status(f"Cannot play while {state.value}")
                return False

            stop_flag = threading.Event()
            self._stop_flag = stop_flag
            self._paused.clear()
            self._set_progress(
                PlaybackProgress(
                    state=PlaybackState.PLAYING,
                    current_loop=1,
                    total_loops=INFINITE_LOOPS if script.loop_count == 0 else script.loop_count,
                    current_action=0,
                    total_actions=len(script.actions),
                )
            )
            self._worker_thread = threading.Thread(
                target=self._play_worker,
                args=(script, stop_flag),
                name=f"macro-player-{script.id[:8]}",
                daemon=True,
            )
            self._worker_thread.start()

        self._notify_status(f"Playing '{script.name}'")
        return True

    def pause(self) -> None:
        with self._lock:
            if self._progress.state != PlaybackState.PLAYING:
                return
            self._paused.set()
            self._set_progress(replace(self._progress, state=PlaybackState.PAUSED))
        self._notify_status("Paused")

    def resume(self) -> None:
        with self._lock:
            if self._progress.state != PlaybackState.PAUSED:
                return
            self._paused.clear()
            self._set_progress(replace(self._progress, state=PlaybackState.PLAYING))
        self._notify_status("Resumed")

    def toggle_pause(self) -> None:
        if self.is_paused():
            self.resume()
        else:
            self.pause()

    def stop(self) -> None:
        """Stop the current session; the player stays STOPPED until reset()."""
        with self._lock:
            self._paused.clear()
            self._stop_flag.set()
            self._set_progress(PlaybackProgress(state=PlaybackState.STOPPED))
            worker = self._worker_thread
            self._worker_thread = None

        if worker and worker.is_alive() and worker is not threading.current_thread():
            worker.join(timeout=2.0)
        self._notify_status("Stopped")

    def reset(self) -> None:
        self.stop()
        with self._lock:
            self._set_progress(PlaybackProgress())

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the worker exits. Returns False if it is still running."""
        worker = self._worker_thread
        if worker is None:
            return True
        worker.join(timeout)
        return not worker.is_alive()

    # Worker ------------------------------------------------------------

    def _play_worker(self, script: Script, stop_flag: threading.Event) -> None:
        if script.loop_count == 0:
            loops = itertools.count(1)
        else:
            loops = iter(range(1, script.loop_count + 1))

        try:
            if not script.actions:
                self._finish(stop_flag, PlaybackState.IDLE)
                return

            for loop in loops:
                if stop_flag.is_set():
                    return
                self._publish(stop_flag, current_loop=loop, current_action=0)

                if not self._play_actions(script.actions, stop_flag):
                    return

                is_last = script.loop_count != 0 and loop >= script.loop_count
                if not is_last and script.loop_delay > 0:
                    if stop_flag.wait(script.loop_delay / 1000.0):
                        return

            if self._finish(stop_flag, PlaybackState.IDLE):
                self._notify_status(f"Completed '{script.name}'")
        except Exception as e:
            logger.exception("Playback of %r crashed", script.name)
            self._finish(stop_flag, PlaybackState.STOPPED, error=str(e) or "Unknown error")

    def _play_actions(self, actions: tuple, stop_flag: threading.Event) -> bool:
        """Run one pass over `actions`. Returns False when the session ended early."""
        for position, action in enumerate(actions, start=1):
            if stop_flag.is_set():
                return False

            while self._paused.is_set() and not stop_flag.is_set():
                stop_flag.wait(self._tick)
            if stop_flag.is_set():
                return False

            description = action.short_description()
            self._publish(
                stop_flag,
                current_action=position,
                current_action_description=description,
            )

            if action.delay > 0 and stop_flag.wait(action.delay / 1000.0):
                return False

            if not self._execute_action(action, stop_flag):
                message = f"Action failed: {description}"
                logger.warning(message)
                self._finish(stop_flag, PlaybackState.STOPPED, error=message)
                self._notify_status(message)
                return False

            if stop_flag.wait(self._action_gap):
                return False
        return True

    def _execute_action(self, action: Action, stop_flag: threading.Event) -> bool:
        try:
            return self._dispatch(action, stop_flag)
        except Exception:
            logger.exception("Device call for %r raised", action.short_description())
            return False

    def _dispatch(self, action: Action, stop_flag: threading.Event) -> bool:
        device = self._device
        kind = action.type
        has_point = action.x is not None and action.y is not None

        if kind is ActionType.CLICK:
            if action.index is not None:
                return succeeded(device.smart_tap(action.index, action.x, action.y))
            if has_point:
                return succeeded(device.tap(action.x, action.y))
            return False

        if kind is ActionType.LONG_PRESS:
            hold_ms = (action.duration if action.duration is not None else 1) * 1000
            if action.index is not None:
                return succeeded(device.long_press_by_index(action.index, hold_ms))
            if has_point:
                return succeeded(device.long_press(action.x, action.y, hold_ms))
            return False

        if kind is ActionType.DOUBLE_TAP:
            if has_point:
                return succeeded(device.double_tap(action.x, action.y))
            return False

        if kind is ActionType.SWIPE:
            if has_point and action.x2 is not None and action.y2 is not None:
                return succeeded(device.swipe(action.x, action.y, action.x2, action.y2))
            return False

        if kind is ActionType.TYPE:
            if action.text is None:
                return False
            if action.index is not None:
                return succeeded(device.smart_type(action.index, action.text))
            return succeeded(device.type(action.text))

        if kind is ActionType.SYSTEM_BUTTON:
            button = (action.button or "").strip().lower()
            if button == "back":
                return succeeded(device.back())
            if button == "home":
                return succeeded(device.home())
            # only back/home are supported
            return False

        if kind is ActionType.WAIT:
            seconds = action.duration if action.duration is not None else 1
            stop_flag.wait(max(seconds, 0))
            return True

        if kind is ActionType.OPEN_APP:
            if action.text is None:
                return False
            return succeeded(device.open_app(action.text))

        return False

    # Progress plumbing -------------------------------------------------

    def _publish(self, stop_flag: threading.Event, **changes) -> None:
        with self._lock:
            if stop_flag.is_set():
                return
            self._set_progress(replace(self._progress, **changes))

    def _finish(self, stop_flag: threading.Event, state: PlaybackState, error: Optional[str] = None) -> bool:
        with self._lock:
            if stop_flag.is_set():
                return False
            self._set_progress(replace(self._progress, state=state, error_message=error))
            return True

    def _set_progress(self, progress: PlaybackProgress) -> None:
        self._progress = progress
        for listener in list(self._listeners):
            try:
                listener(progress)
            except Exception:
                pass

    def _notify_status(self, message: str) -> None:
        if self._status_callback:
            try:
                self._status_callback(message)
            except Exception:
                pass
