"""
Macro actions: one recorded interaction step each.

Supported actions (type field in JSON):
- CLICK: tap an element by index or a point (x, y)
- LONG_PRESS: hold an element or a point for `duration` seconds
- DOUBLE_TAP: double tap at (x, y)
- SWIPE: drag from (x, y) to (x2, y2)
- TYPE: enter `text`, optionally into the element at `index`
- SYSTEM_BUTTON: press a system key (`button`: back | home)
- WAIT: pause for `duration` seconds
- OPEN_APP: launch an application by name (`text`)

Notes
-----
- When `index` is present the action targets an element from an externally
  supplied element list; `x`/`y` are then only a hint for the backend.
- The agent loop speaks a lower-case vocabulary (`click`, `long_press`, ...).
  `from_agent_action` / `to_agent_action` translate between the two.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional, Union


class ActionError(Exception):
    pass


class ActionType(Enum):
    CLICK = "CLICK"
    LONG_PRESS = "LONG_PRESS"
    DOUBLE_TAP = "DOUBLE_TAP"
    SWIPE = "SWIPE"
    TYPE = "TYPE"
    SYSTEM_BUTTON = "SYSTEM_BUTTON"
    WAIT = "WAIT"
    OPEN_APP = "OPEN_APP"


# Agent vocabulary <-> ActionType
AGENT_TYPE_NAMES: Dict[str, ActionType] = {
    "click": ActionType.CLICK,
    "long_press": ActionType.LONG_PRESS,
    "double_tap": ActionType.DOUBLE_TAP,
    "swipe": ActionType.SWIPE,
    "type": ActionType.TYPE,
    "system_button": ActionType.SYSTEM_BUTTON,
    "wait": ActionType.WAIT,
    "open_app": ActionType.OPEN_APP,
}
_AGENT_NAMES_BY_TYPE: Dict[ActionType, str] = {v: k for k, v in AGENT_TYPE_NAMES.items()}

_OPTIONAL_INT_FIELDS = ("x", "y", "x2", "y2", "index", "duration")
_OPTIONAL_STR_FIELDS = ("text", "button")


@dataclass(frozen=True)
class Action:
    type: ActionType
    x: Optional[int] = None
    y: Optional[int] = None
    x2: Optional[int] = None  # swipe end point
    y2: Optional[int] = None
    index: Optional[int] = None
    text: Optional[str] = None  # typed text or app name
    button: Optional[str] = None
    duration: Optional[int] = None  # seconds: wait length or long-press hold
    delay: int = 0  # ms before this action runs
    description: str = ""

    @property
    def is_index_mode(self) -> bool:
        return self.index is not None

    def with_delay(self, delay: int) -> "Action":
        return replace(self, delay=int(delay))

    def short_description(self) -> str:
        """Human label; derived from type and fields when `description` is empty."""
        if self.description:
            return self.description
        t = self.type
        if t is ActionType.CLICK:
            if self.index is not None:
                return f"Tap element #{self.index}"
            return f"Tap ({self.x}, {self.y})"
        if t is ActionType.LONG_PRESS:
            if self.index is not None:
                return f"Long press element #{self.index}"
            return f"Long press ({self.x}, {self.y})"
        if t is ActionType.DOUBLE_TAP:
            return f"Double tap ({self.x}, {self.y})"
        if t is ActionType.SWIPE:
            return f"Swipe ({self.x}, {self.y}) -> ({self.x2}, {self.y2})"
        if t is ActionType.TYPE:
            text = self.text or ""
            suffix = "..." if len(text) > 20 else ""
            return f"Type: {text[:20]}{suffix}"
        if t is ActionType.SYSTEM_BUTTON:
            return f"Button: {self.button}"
        if t is ActionType.WAIT:
            return f"Wait {self.duration}s"
        return f"Open: {self.text}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the action for JSON storage; null fields are omitted."""
        data: Dict[str, Any] = {"type": self.type.value}
        for name in _OPTIONAL_INT_FIELDS + _OPTIONAL_STR_FIELDS:
            value = getattr(self, name)
            if value is not None:
                data[name] = value
        data["delay"] = self.delay
        data["description"] = self.description
        return data

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Action":
        raw_type = str(data.get("type", "")).strip().upper()
        try:
            action_type = ActionType(raw_type)
        except ValueError:
            raise ActionError(f"Unknown action type: {data.get('type')!r}")

        kwargs: Dict[str, Any] = {}
        for name in _OPTIONAL_INT_FIELDS:
            raw = data.get(name)
            kwargs[name] = int(raw) if raw is not None else None
        for name in _OPTIONAL_STR_FIELDS:
            raw = data.get(name)
            kwargs[name] = str(raw) if raw is not None else None

        return Action(
            type=action_type,
            delay=int(data.get("delay", 0) or 0),
            description=str(data.get("description", "") or ""),
            **kwargs,
        )


@dataclass(frozen=True)
class AgentAction:
    """Generic action record exchanged with the agent loop."""

    type: str
    x: Optional[int] = None
    y: Optional[int] = None
    x2: Optional[int] = None
    y2: Optional[int] = None
    index: Optional[int] = None
    text: Optional[str] = None
    button: Optional[str] = None
    duration: Optional[int] = None


@dataclass(frozen=True)
class UnmappedAction:
    """Result of `from_agent_action` for a type name outside the table."""

    type_name: str


def from_agent_action(
    agent: AgentAction, description: str = "", delay: int = 0
) -> Union[Action, UnmappedAction]:
    action_type = AGENT_TYPE_NAMES.get(agent.type)
    if action_type is None:
        return UnmappedAction(type_name=agent.type)
    return Action(
        type=action_type,
        x=agent.x,
        y=agent.y,
        x2=agent.x2,
        y2=agent.y2,
        index=agent.index,
        text=agent.text,
        button=agent.button,
        duration=agent.duration,
        delay=delay,
        description=description,
    )


def to_agent_action(action: Action) -> AgentAction:
    return AgentAction(
        type=_AGENT_NAMES_BY_TYPE[action.type],
        x=action.x,
        y=action.y,
        x2=action.x2,
        y2=action.y2,
        index=action.index,
        text=action.text,
        button=action.button,
        duration=action.duration,
    )
