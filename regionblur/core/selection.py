"""Drag-to-select state machine."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Union

from .geometry import Point, Rect

log = logging.getLogger(__name__)


class InvalidSelection(Exception):
    pass


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Dragging:
    anchor: Point
    rect: Rect


@dataclass(frozen=True)
class Ready:
    rect: Rect


SelectionState = Union[Idle, Dragging, Ready]


class SelectionMachine:
    """
    Tracks one rectangular selection from drag start to commit.

    ``is_locked`` is consulted before every pointer transition; while it
    reports True (a commit is running, or there is no image) pointer input is
    ignored. ``clear`` and ``take_ready`` are driven by editor actions and are
    not subject to the lock.
    """

    def __init__(self, is_locked: Callable[[], bool]) -> None:
        self._is_locked = is_locked
        self._state: SelectionState = Idle()

    @property
    def state(self) -> SelectionState:
        return self._state

    @property
    def rect(self) -> Optional[Rect]:
        if isinstance(self._state, (Dragging, Ready)):
            return self._state.rect
        return None

    @property
    def is_ready(self) -> bool:
        return isinstance(self._state, Ready)

    def start(self, point: Point) -> bool:
        if self._is_locked():
            return False
        self._state = Dragging(anchor=point, rect=Rect(point.x, point.y, 0, 0))
        return True

    def move(self, point: Point) -> Optional[Rect]:
        if self._is_locked() or not isinstance(self._state, Dragging):
            return None
        rect = Rect.from_points(self._state.anchor, point)
        self._state = Dragging(anchor=self._state.anchor, rect=rect)
        return rect

    def end(self) -> Optional[Rect]:
        if self._is_locked() or not isinstance(self._state, Dragging):
            return None
        rect = self._state.rect
        if rect.is_empty:
            log.debug("Drag ended without area, selection dropped")
            self._state = Idle()
            return None
        self._state = Ready(rect)
        return rect

    def take_ready(self) -> Rect:
        if not isinstance(self._state, Ready):
            raise InvalidSelection(f"No selection ready to apply (state={self._state})")
        rect = self._state.rect
        self._state = Idle()
        return rect

    def clear(self) -> None:
        self._state = Idle()
