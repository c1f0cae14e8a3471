"""
Editor controller: the single owner of session, selection and commits.

Every user action enters through one of the ``on_*`` methods. Listeners
registered with ``subscribe`` receive a fresh ``EditorSnapshot`` whenever the
working buffer, the selection or the processing flag changes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from .compositor import PendingBlur, ProcessingError, RegionCompositor
from .effects.blur import DEFAULT_BLUR_RADIUS, validate_radius
from .geometry import CoordinateMapper, Point, PointerEvent, Rect
from .raster import RasterBuffer
from .scheduling import ManualScheduler, Scheduler
from .selection import InvalidSelection, SelectionMachine
from .session import ImageSession

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class EditorSnapshot:
    current: Optional[RasterBuffer]
    selection: Optional[Rect]
    selection_ready: bool
    processing: bool
    modified: bool
    radius: int


class EditorController:
    def __init__(
        self,
        scheduler: Optional[Scheduler] = None,
        compositor: Optional[RegionCompositor] = None,
        default_radius: int = DEFAULT_BLUR_RADIUS,
    ) -> None:
        self.scheduler = scheduler or ManualScheduler()
        self.compositor = compositor or RegionCompositor()
        self.default_radius = validate_radius(default_radius)
        self.selection = SelectionMachine(is_locked=self._pointer_locked)
        self._session: Optional[ImageSession] = None
        self._importing = False
        self._display_size: Optional[tuple[float, float]] = None
        self._mapper: Optional[CoordinateMapper] = None
        self._listeners: List[Callable[[EditorSnapshot], None]] = []
        self._error_listeners: List[Callable[[ProcessingError], None]] = []

    # ------------------------------------------------------------- state ----------
    @property
    def session(self) -> Optional[ImageSession]:
        return self._session

    @property
    def has_image(self) -> bool:
        return self._session is not None and not self._session.closed

    @property
    def processing(self) -> bool:
        if self._importing:
            return True
        return self._session is not None and self._session.processing

    @property
    def mapper(self) -> Optional[CoordinateMapper]:
        return self._mapper

    def snapshot(self) -> EditorSnapshot:
        session = self._session if self.has_image else None
        return EditorSnapshot(
            current=session.current if session else None,
            selection=self.selection.rect,
            selection_ready=self.selection.is_ready,
            processing=self.processing,
            modified=session.is_modified if session else False,
            radius=session.radius if session else self.default_radius,
        )

    def subscribe(self, callback: Callable[[EditorSnapshot], None]) -> None:
        self._listeners.append(callback)

    def subscribe_errors(self, callback: Callable[[ProcessingError], None]) -> None:
        self._error_listeners.append(callback)

    def _publish(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)

    def _pointer_locked(self) -> bool:
        return self.processing or not self.has_image

    # ----------------------------------------------------- display mapping --------
    def set_display_size(self, width: float, height: float) -> None:
        self._display_size = (width, height)
        self._rebuild_mapper()

    def _rebuild_mapper(self) -> None:
        if not self.has_image or self._display_size is None:
            self._mapper = None
            return
        current = self._session.current
        width, height = self._display_size
        if width <= 0 or height <= 0:
            self._mapper = None
            return
        self._mapper = CoordinateMapper(width, height, current.width, current.height)

    # ------------------------------------------------------------ import ----------
    def on_import(self, data: bytes) -> Optional[ImageSession]:
        if self.processing:
            log.debug("Import ignored while processing")
            return None
        self._importing = True
        try:
            session = ImageSession.load(data, default_radius=self.default_radius)
        finally:
            self._importing = False

        if self._session is not None and not self._session.closed:
            self._session.discard()
        self._session = session
        self.selection.clear()
        self._rebuild_mapper()
        self._publish()
        return session

    def on_new_image(self) -> bool:
        if self.processing:
            log.debug("New image ignored while processing")
            return False
        if self._session is not None:
            self._session.discard()
        self._session = None
        self.selection.clear()
        self._rebuild_mapper()
        self._publish()
        return True

    # ----------------------------------------------------------- pointer ----------
    def _to_corner(self, event: PointerEvent) -> Point:
        if self._mapper is None:
            current = self._session.current
            return CoordinateMapper(current.width, current.height, current.width, current.height).to_corner(event)
        return self._mapper.to_corner(event)

    def on_drag_start(self, event: PointerEvent) -> bool:
        if self._pointer_locked():
            return False
        started = self.selection.start(self._to_corner(event))
        if started:
            self._publish()
        return started

    def on_drag_move(self, event: PointerEvent) -> Optional[Rect]:
        if self._pointer_locked():
            return None
        rect = self.selection.move(self._to_corner(event))
        if rect is not None:
            self._publish()
        return rect

    def on_drag_end(self) -> Optional[Rect]:
        if self._pointer_locked():
            return None
        had_selection = self.selection.rect is not None
        rect = self.selection.end()
        if rect is not None or had_selection:
            self._publish()
        return rect

    # ------------------------------------------------------------ commit ----------
    def on_apply(self, radius: Optional[int] = None) -> Optional[PendingBlur]:
        if self.processing or not self.has_image:
            log.debug("Apply ignored: busy or no image")
            return None
        if radius is not None:
            validate_radius(radius)
        try:
            rect = self.selection.take_ready()
        except InvalidSelection as exc:
            log.debug(f"Apply ignored: {exc}")
            return None

        session = self._session
        if radius is not None:
            session.set_radius(radius)
        pending = self.compositor.begin(session, rect, session.radius)
        # Selection is already Idle; listeners see it cleared before any blur work.
        self._publish()
        if pending is None:
            return None
        self.scheduler.call_soon(lambda: self._complete(pending))
        return pending

    def _complete(self, pending: PendingBlur) -> None:
        try:
            pending.complete()
        except ProcessingError as exc:
            for listener in list(self._error_listeners):
                listener(exc)
        finally:
            self.selection.clear()
            self._publish()

    # ------------------------------------------------------ reset / export --------
    def on_reset(self) -> bool:
        if self.processing or not self.has_image:
            return False
        if not self._session.reset():
            return False
        self.selection.clear()
        self._publish()
        return True

    def on_export(self) -> Optional[bytes]:
        if self.processing or not self.has_image:
            log.debug("Export ignored: busy or no image")
            return None
        return self._session.export()

    def set_radius(self, radius: int) -> None:
        if self.has_image:
            self._session.set_radius(radius)
            self._publish()
        else:
            validate_radius(radius)
