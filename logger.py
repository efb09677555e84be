"""
Status Logger - keeps the playback/recording status history.

Entries are held in memory for display and forwarded to the standard
`logging` module so they also reach configured handlers.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from macro.engine import MacroPlayer, PlaybackProgress, PlaybackState


@dataclass
class LogEntry:
    """A single status entry."""
    timestamp: datetime
    message: str
    level: str = "INFO"

    def __str__(self) -> str:
        time_str = self.timestamp.strftime("%H:%M:%S")
        return f"[{time_str}] {self.level}: {self.message}"


_LEVELS = {
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


class StatusLogger:
    """
    Manages status updates and maintains a bounded log history.

    attach() subscribes to a MacroPlayer and turns its state transitions
    into entries.
    """

    def __init__(self, max_entries: int = 100, name: str = "macro"):
        """
        Initialize the logger.

        Args:
            max_entries: Maximum number of log entries to keep in memory
            name: Name of the stdlib logger entries are forwarded to
        """
        self._log_entries: List[LogEntry] = []
        self._max_entries = max_entries
        self._current_status = "Ready"
        self._forward = logging.getLogger(name)
        self._last_state: Optional[PlaybackState] = None

    def log_info(self, message: str) -> None:
        self._add_entry(message, "INFO")

    def log_warning(self, message: str) -> None:
        self._add_entry(message, "WARNING")

    def log_error(self, message: str) -> None:
        self._add_entry(message, "ERROR")

    def update_status(self, status: str) -> None:
        """
        Update the current status.

        Args:
            status: The new status message
        """
        self._current_status = status
        self.log_info(status)

    def get_current_status(self) -> str:
        return self._current_status

    def get_recent_logs(self, count: int = 10) -> List[LogEntry]:
        return self._log_entries[-count:]

    def get_all_logs(self) -> List[LogEntry]:
        return self._log_entries.copy()

    def clear_logs(self) -> None:
        self._log_entries.clear()
        self.log_info("Log history cleared")

    def attach(self, player: MacroPlayer) -> None:
        """Record status strings and progress transitions of `player`."""
        player.register_status_callback(self.update_status)
        player.add_listener(self.record_progress)

    def record_progress(self, progress: PlaybackProgress) -> None:
        """Log state changes only; per-action updates would flood the history."""
        if progress.state == self._last_state:
            return
        self._last_state = progress.state

        if progress.error_message:
            self.log_error(progress.error_message)
            return

        if progress.is_infinite:
            loops = f"loop {progress.current_loop}/inf"
        else:
            loops = f"loop {progress.current_loop}/{progress.total_loops}"
        self.log_info(
            f"State {progress.state.value}: {loops}, "
            f"action {progress.current_action}/{progress.total_actions}"
        )

    def _add_entry(self, message: str, level: str) -> None:
        entry = LogEntry(
            timestamp=datetime.now(),
            message=message,
            level=level
        )

        self._log_entries.append(entry)
        self._forward.log(_LEVELS.get(level, logging.INFO), message)

        # Trim old entries if we exceed max
        if len(self._log_entries) > self._max_entries:
            self._log_entries = self._log_entries[-self._max_entries:]

    def export_logs_to_file(self, filepath: str) -> bool:
        """
        Export all logs to a text file.

        Args:
            filepath: Path where the log file should be saved

        Returns:
            bool: True if export was successful
        """
        try:
            with open(filepath, 'w', encoding='utf-8') as f:
                f.write("Macro Player - Log Export\n")
                f.write(f"Generated: {datetime.now()}\n")
                f.write("=" * 50 + "\n\n")

                for entry in self._log_entries:
                    time_str = entry.timestamp.strftime("%Y-%m-%d %H:%M:%S")
                    f.write(f"[{time_str}] {entry.level}: {entry.message}\n")

            return True
        except OSError as e:
            self._forward.error("Failed to export logs: %s", e)
            return False
