"""
Macro recorder: buffers live actions with timestamps and turns them into a Script.

One recorder per recording context; callers hold and pass the instance
explicitly. Actions may arrive from listener threads (see click_capture), so
every entry point takes the recorder's lock.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

from .actions import Action, AgentAction, UnmappedAction, from_agent_action
from .script_model import Script

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordedAction:
    action: Action
    timestamp: int  # wall clock, ms


class MacroRecorder:
    def __init__(self, clock: Optional[Callable[[], float]] = None):
        # clock returns seconds since the epoch, like time.time
        self._clock = clock or time.time
        self._lock = threading.Lock()
        self._recording = False
        self._buffer: List[RecordedAction] = []
        self._start_time = 0
        self._source_instruction = ""

    def now_ms(self) -> int:
        return int(self._clock() * 1000)

    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def recorded_count(self) -> int:
        return len(self._buffer)

    @property
    def recording_duration_ms(self) -> int:
        if not self._recording:
            return 0
        return self.now_ms() - self._start_time

    def start_recording(self, instruction: str = "") -> None:
        """Begin a new recording; an active one is restarted with an empty buffer."""
        with self._lock:
            self._recording = True
            self._buffer.clear()
            self._start_time = self.now_ms()
            self._source_instruction = instruction or ""
        logger.info("Recording started%s", f" for {instruction!r}" if instruction else "")

    def record_action(self, agent_action: AgentAction, description: str = "") -> bool:
        """Record an agent action. Returns False if ignored (idle or unmapped type)."""
        if not self._recording:
            return False
        mapped = from_agent_action(agent_action, description)
        if isinstance(mapped, UnmappedAction):
            logger.warning("Not recording agent action of unknown type %r", mapped.type_name)
            return False
        return self.record_macro_action(mapped)

    def record_macro_action(self, action: Action, timestamp: Optional[int] = None) -> bool:
        """
        Record a ready-made action.

        `timestamp` (ms, on the recorder's clock) marks when the gesture began;
        it defaults to now. Delays are measured between these timestamps.
        """
        with self._lock:
            if not self._recording:
                return False
            stamp = self.now_ms() if timestamp is None else int(timestamp)
            self._buffer.append(RecordedAction(action, stamp))
            return True

    def stop_recording(self) -> Optional[Script]:
        """
        Finish the recording.

        Returns:
            The recorded Script, or None when not recording or nothing was captured.
        """
        with self._lock:
            was_recording = self._recording
            self._recording = False
            buffer = list(self._buffer)
            instruction = self._source_instruction
            self._buffer.clear()
            self._source_instruction = ""

        if not was_recording or not buffer:
            logger.info("Recording stopped without actions; no script produced")
            return None

        actions = []
        previous: Optional[int] = None
        for recorded in buffer:
            delay = 0 if previous is None else max(recorded.timestamp - previous, 0)
            actions.append(recorded.action.with_delay(delay))
            previous = recorded.timestamp

        script = Script.create(
            name=self._script_name(),
            description=f"Recorded from: {instruction}" if instruction else "Manual recording",
            actions=actions,
            source_instruction=instruction,
        )
        logger.info("Recording stopped: %d action(s) in '%s'", len(actions), script.name)
        return script

    def cancel_recording(self) -> None:
        with self._lock:
            self._recording = False
            self._buffer.clear()
            self._source_instruction = ""
        logger.info("Recording cancelled")

    def _script_name(self) -> str:
        stamp = datetime.fromtimestamp(self._clock()).strftime("%m-%d %H:%M")
        return f"Recording {stamp}"
