"""
Device-control contract consumed by the player.

The player never talks to hardware itself. Backends (see
`desktop_controller.DesktopDeviceController`) implement this protocol; each
call either returns a success flag or returns None, which counts as success.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol


class DeviceController(Protocol):
    def tap(self, x: int, y: int) -> Optional[bool]: ...

    def smart_tap(self, index: int, x: Optional[int], y: Optional[int]) -> Optional[bool]: ...

    def long_press(self, x: int, y: int, ms: int) -> Optional[bool]: ...

    def long_press_by_index(self, index: int, ms: int) -> Optional[bool]: ...

    def double_tap(self, x: int, y: int) -> Optional[bool]: ...

    def swipe(self, x1: int, y1: int, x2: int, y2: int) -> Optional[bool]: ...

    def type(self, text: str) -> Optional[bool]: ...

    def smart_type(self, index: int, text: str) -> Optional[bool]: ...

    def back(self) -> Optional[bool]: ...

    def home(self) -> Optional[bool]: ...

    def open_app(self, name: str) -> Optional[bool]: ...


def succeeded(result: Any) -> bool:
    """Normalise a backend result: None means the call did not signal failure."""
    if result is None:
        return True
    return bool(result)
