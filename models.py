"""
Configuration models for the macro recorder & player.
"""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class ApplicationSettings:
    """Persisted application preferences."""

    macros_path: str = "macros.json"
    pause_tick_ms: int = 100
    action_gap_ms: int = 100
    pause_hotkey: str = "F7"
    stop_hotkey: str = "F8"
    log_max_entries: int = 100
    capture_long_press_ms: int = 600
    capture_swipe_threshold_px: int = 20

    def __post_init__(self):
        """Validate timing parameters."""
        if self.pause_tick_ms <= 0:
            raise ValueError("Pause tick must be positive")

        if self.action_gap_ms < 0:
            raise ValueError("Action gap cannot be negative")

        if self.log_max_entries <= 0:
            raise ValueError("Log history size must be positive")

    def to_dict(self) -> Dict[str, Any]:
        """Serialize settings to primitive types for JSON storage."""
        return {
            "macros_path": self.macros_path,
            "pause_tick_ms": self.pause_tick_ms,
            "action_gap_ms": self.action_gap_ms,
            "pause_hotkey": self.pause_hotkey,
            "stop_hotkey": self.stop_hotkey,
            "log_max_entries": self.log_max_entries,
            "capture_long_press_ms": self.capture_long_press_ms,
            "capture_swipe_threshold_px": self.capture_swipe_threshold_px,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "ApplicationSettings":
        """Create settings instance from JSON dictionary."""
        return ApplicationSettings(
            macros_path=str(data.get("macros_path", "macros.json") or "macros.json"),
            pause_tick_ms=int(data.get("pause_tick_ms", 100) or 100),
            action_gap_ms=int(data.get("action_gap_ms", 100) or 0),
            pause_hotkey=str(data.get("pause_hotkey", "F7")),
            stop_hotkey=str(data.get("stop_hotkey", "F8")),
            log_max_entries=int(data.get("log_max_entries", 100) or 100),
            capture_long_press_ms=int(data.get("capture_long_press_ms", 600) or 600),
            capture_swipe_threshold_px=int(data.get("capture_swipe_threshold_px", 20) or 20),
        )
