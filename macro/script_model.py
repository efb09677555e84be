"""
Macro script data model and JSON parser.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from .actions import Action, ActionError, ActionType

logger = logging.getLogger(__name__)

DEFAULT_SCRIPT_NAME = "Untitled script"


def now_ms() -> int:
    return int(time.time() * 1000)


def new_script_id() -> str:
    return str(uuid.uuid4())


def parse_actions(raw_actions: Any) -> Tuple[List[Action], List[Any]]:
    """Decode a list of action documents.

    Returns (actions, rejected). Entries that are not objects or carry an
    unknown type end up in `rejected` instead of failing the whole list.
    """
    actions: List[Action] = []
    rejected: List[Any] = []
    if not isinstance(raw_actions, list):
        return actions, rejected
    for raw in raw_actions:
        if not isinstance(raw, dict):
            rejected.append(raw)
            continue
        try:
            actions.append(Action.from_dict(raw))
        except (ActionError, ValueError, TypeError):
            rejected.append(raw)
    return actions, rejected


@dataclass(frozen=True)
class Script:
    id: str
    name: str
    description: str = ""
    created_at: int = field(default_factory=now_ms)
    updated_at: int = field(default_factory=now_ms)
    actions: Tuple[Action, ...] = ()
    tags: Tuple[str, ...] = ()
    source_instruction: str = ""
    # 0 means repeat until stopped; N > 0 runs the sequence exactly N times
    loop_count: int = 1
    loop_delay: int = 0  # ms between iterations, not after the last one

    @staticmethod
    def create(name: str, **kwargs: Any) -> "Script":
        """Build a new script with a fresh id and current timestamps."""
        stamp = now_ms()
        kwargs.setdefault("created_at", stamp)
        kwargs.setdefault("updated_at", stamp)
        if "actions" in kwargs:
            kwargs["actions"] = tuple(kwargs["actions"])
        if "tags" in kwargs:
            kwargs["tags"] = tuple(kwargs["tags"])
        return Script(id=new_script_id(), name=name, **kwargs)

    @property
    def action_count(self) -> int:
        return len(self.actions)

    @property
    def estimated_duration_ms(self) -> int:
        total = 0
        for action in self.actions:
            total += action.delay
            if action.type is ActionType.WAIT:
                total += (action.duration or 0) * 1000
            elif action.type is ActionType.LONG_PRESS:
                total += (action.duration or 1) * 1000
            elif action.type is ActionType.SWIPE:
                total += 500
            else:
                total += 200
        return total

    @property
    def formatted_estimated_duration(self) -> str:
        seconds = self.estimated_duration_ms // 1000
        if seconds < 60:
            return f"{seconds}s"
        if seconds < 3600:
            return f"{seconds // 60}m {seconds % 60}s"
        return f"{seconds // 3600}h {(seconds % 3600) // 60}m"

    @property
    def formatted_created_at(self) -> str:
        return datetime.fromtimestamp(self.created_at / 1000).strftime("%Y-%m-%d %H:%M")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "actions": [action.to_dict() for action in self.actions],
            "tags": list(self.tags),
            "sourceInstruction": self.source_instruction,
            "loopCount": self.loop_count,
            "loopDelay": self.loop_delay,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Script":
        actions, rejected = parse_actions(data.get("actions", []) or [])
        if rejected:
            logger.warning(
                "Script %r: skipped %d unrecognised action(s): %s",
                data.get("name"),
                len(rejected),
                [r.get("type") if isinstance(r, dict) else r for r in rejected],
            )

        tags_data = data.get("tags", []) or []
        tags: List[str] = []
        if isinstance(tags_data, list):
            tags = [str(tag) for tag in tags_data if tag is not None]

        stamp = now_ms()
        raw_id = data.get("id")
        raw_name = data.get("name")
        return Script(
            id=new_script_id() if raw_id is None else str(raw_id),
            name=DEFAULT_SCRIPT_NAME if raw_name is None else str(raw_name),
            description=str(data.get("description", "") or ""),
            created_at=_int_field(data, "createdAt", stamp),
            updated_at=_int_field(data, "updatedAt", stamp),
            actions=tuple(actions),
            tags=tuple(tags),
            source_instruction=str(data.get("sourceInstruction", "") or ""),
            loop_count=_int_field(data, "loopCount", 1),
            loop_delay=_int_field(data, "loopDelay", 0),
        )


def _int_field(data: Dict[str, Any], key: str, default: int) -> int:
    raw = data.get(key)
    return int(raw) if raw is not None else default


def describe_script(script: Optional[Script]) -> str:
    if script is None:
        return "<no script>"
    return (
        f"{script.name} ({script.action_count} actions, "
        f"~{script.formatted_estimated_duration}, loops={script.loop_count or 'inf'})"
    )
