"""
Pointer and rectangle geometry for the blur editor.

Display space is the on-screen canvas in widget pixels; buffer space is the
pixel grid of the image itself. Everything past the UI boundary works in
buffer space.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple


@dataclass(frozen=True)
class Point:
    x: int
    y: int


@dataclass(frozen=True)
class PointerEvent:
    """A mouse or touch position in display space."""

    x: float
    y: float

    @staticmethod
    def from_touches(points: Sequence[Tuple[float, float]]) -> "PointerEvent":
        # Only the first touch point drives the selection.
        if not points:
            raise ValueError("Touch event without touch points")
        x, y = points[0]
        return PointerEvent(float(x), float(y))


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def fits_within(self, width: int, height: int) -> bool:
        return (
            self.x >= 0
            and self.y >= 0
            and self.width >= 0
            and self.height >= 0
            and self.right <= width
            and self.bottom <= height
        )

    def as_slices(self) -> Tuple[slice, slice]:
        return slice(self.y, self.bottom), slice(self.x, self.right)

    @staticmethod
    def from_points(a: Point, b: Point) -> "Rect":
        return Rect(
            x=min(a.x, b.x),
            y=min(a.y, b.y),
            width=abs(b.x - a.x),
            height=abs(b.y - a.y),
        )


class CoordinateMapper:
    def __init__(self, display_width: float, display_height: float, buffer_width: int, buffer_height: int) -> None:
        if display_width <= 0 or display_height <= 0:
            raise ValueError(f"Invalid display size {display_width}x{display_height}")
        if buffer_width <= 0 or buffer_height <= 0:
            raise ValueError(f"Invalid buffer size {buffer_width}x{buffer_height}")
        self.display_width = float(display_width)
        self.display_height = float(display_height)
        self.buffer_width = int(buffer_width)
        self.buffer_height = int(buffer_height)

    @property
    def scale(self) -> Tuple[float, float]:
        return (
            self.buffer_width / self.display_width,
            self.buffer_height / self.display_height,
        )

    def to_buffer(self, event: PointerEvent) -> Point:
        """The pixel under the pointer, clamped to ``[0, width) x [0, height)``."""
        corner = self.to_corner(event)
        return Point(
            x=min(self.buffer_width - 1, corner.x),
            y=min(self.buffer_height - 1, corner.y),
        )

    def to_corner(self, event: PointerEvent) -> Point:
        """
        The pixel boundary nearest the pointer, clamped to
        ``[0, width] x [0, height]``.

        Selection corners are boundaries, so a drag across the whole canvas
        covers the last column and row.
        """
        sx, sy = self.scale
        x = int(round(event.x * sx))
        y = int(round(event.y * sy))
        return Point(
            x=max(0, min(self.buffer_width, x)),
            y=max(0, min(self.buffer_height, y)),
        )

    def to_display(self, point: Point) -> PointerEvent:
        sx, sy = self.scale
        return PointerEvent(point.x / sx, point.y / sy)

    def rect_to_display(self, rect: Rect) -> Tuple[float, float, float, float]:
        sx, sy = self.scale
        return rect.x / sx, rect.y / sy, rect.width / sx, rect.height / sy
