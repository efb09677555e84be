"""
Macro package: record on-device interaction steps and replay them.

Key parts
---------
- actions:      Action / ActionType data model and agent-action mapping
- script_model: Script data class & tolerant JSON parser
- device:       DeviceController protocol the player drives
- engine:       MacroPlayer state machine (worker thread, pause/resume/stop)
- recorder:     MacroRecorder turning live actions into a Script
- repository:   MacroRepository JSON collection store (search, tags, import/export)
"""

from .actions import Action, ActionError, ActionType, AgentAction, UnmappedAction
from .engine import MacroPlayer, PlaybackProgress, PlaybackState
from .recorder import MacroRecorder
from .repository import MacroRepository
from .script_model import Script

__all__ = [
    "Action",
    "ActionError",
    "ActionType",
    "AgentAction",
    "MacroPlayer",
    "MacroRecorder",
    "MacroRepository",
    "PlaybackProgress",
    "PlaybackState",
    "Script",
    "UnmappedAction",
]
