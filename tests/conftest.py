"""
Shared fixtures: a recording fake device, script factories and a temp repository.
"""

from __future__ import annotations

import itertools
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pytest

from macro import Action, ActionType, MacroRepository, Script
from macro.script_model import now_ms


class FakeDevice:
    """Device controller stub that records every call.

    `results` overrides the return value per method name; a value that is an
    exception instance is raised instead.
    """

    def __init__(self, results: Optional[Dict[str, Any]] = None) -> None:
        self.calls: List[Tuple[str, tuple]] = []
        self.results = dict(results or {})
        self._lock = threading.Lock()
        self.called = threading.Event()

    def _call(self, name: str, *args: Any) -> Any:
        with self._lock:
            self.calls.append((name, args))
        self.called.set()
        result = self.results.get(name)
        if isinstance(result, BaseException):
            raise result
        return result

    @property
    def names(self) -> List[str]:
        with self._lock:
            return [name for name, _ in self.calls]

    def tap(self, x, y):
        return self._call("tap", x, y)

    def smart_tap(self, index, x, y):
        return self._call("smart_tap", index, x, y)

    def long_press(self, x, y, ms):
        return self._call("long_press", x, y, ms)

    def long_press_by_index(self, index, ms):
        return self._call("long_press_by_index", index, ms)

    def double_tap(self, x, y):
        return self._call("double_tap", x, y)

    def swipe(self, x1, y1, x2, y2):
        return self._call("swipe", x1, y1, x2, y2)

    def type(self, text):
        return self._call("type", text)

    def smart_type(self, index, text):
        return self._call("smart_type", index, text)

    def back(self):
        return self._call("back")

    def home(self):
        return self._call("home")

    def open_app(self, name):
        return self._call("open_app", name)


@pytest.fixture
def device() -> FakeDevice:
    return FakeDevice()


@pytest.fixture
def repository(tmp_path: Path) -> MacroRepository:
    base = now_ms() + 10**6  # ahead of any script created during the test
    counter = itertools.count(1)
    return MacroRepository(tmp_path / "macros.json", clock=lambda: base + next(counter))


def click(x: int, y: int, delay: int = 0, description: str = "") -> Action:
    return Action(type=ActionType.CLICK, x=x, y=y, delay=delay, description=description)


def make_script(name: str = "demo", actions=None, **kwargs: Any) -> Script:
    if actions is None:
        actions = [click(1, 2), click(3, 4)]
    return Script.create(name, actions=actions, **kwargs)
