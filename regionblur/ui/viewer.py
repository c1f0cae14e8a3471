from __future__ import annotations

from typing import Optional, Tuple

from PySide6.QtCore import QEvent, QRectF, Qt, QTimer, Signal
from PySide6.QtGui import QColor, QImage, QPainter, QPen
from PySide6.QtWidgets import QWidget

from ..config import AppSettings
from ..core.controller import EditorSnapshot
from ..core.geometry import CoordinateMapper, PointerEvent, Rect
from ..core.raster import RasterBuffer


# About one frame at 60 Hz, so pending repaints go out before the callback.
FRAME_DELAY_MS = 16


class QtScheduler:
    """Runs callbacks after the Qt event loop has had a chance to repaint."""

    def call_soon(self, fn) -> None:
        QTimer.singleShot(FRAME_DELAY_MS, fn)


def buffer_to_qimage(buffer: RasterBuffer) -> QImage:
    pixels = buffer.pixels
    data = pixels.tobytes()
    image = QImage(
        data,
        buffer.width,
        buffer.height,
        pixels.strides[0],
        QImage.Format_ARGB32,
    )
    # QImage does not own the byte string it wraps.
    return image.copy()


class BlurCanvas(QWidget):
    drag_started = Signal(object)
    drag_moved = Signal(object)
    drag_ended = Signal()
    display_resized = Signal(float, float)

    def __init__(self, settings: AppSettings, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.settings = settings
        self.setMinimumSize(480, 360)
        self.setAttribute(Qt.WA_AcceptTouchEvents, True)
        self._image: Optional[QImage] = None
        self._buffer: Optional[RasterBuffer] = None
        self._selection: Optional[Rect] = None
        self._processing = False
        self._dragging = False

    # ------------------------------------------------------------ state -----------
    def update_state(self, snapshot: EditorSnapshot) -> None:
        if snapshot.current is not self._buffer:
            self._buffer = snapshot.current
            self._image = buffer_to_qimage(snapshot.current) if snapshot.current is not None else None
            self._emit_display_size()
        self._selection = snapshot.selection
        self._processing = snapshot.processing
        self.setCursor(Qt.WaitCursor if self._processing else Qt.CrossCursor)
        self.update()

    def image_rect(self) -> Optional[QRectF]:
        if self._image is None:
            return None
        area = self.rect()
        scale = min(area.width() / self._image.width(), area.height() / self._image.height(), 1.0)
        width = self._image.width() * scale
        height = self._image.height() * scale
        left = area.left() + (area.width() - width) / 2.0
        top = area.top() + (area.height() - height) / 2.0
        return QRectF(left, top, width, height)

    def _emit_display_size(self) -> None:
        target = self.image_rect()
        if target is not None and target.width() > 0 and target.height() > 0:
            self.display_resized.emit(target.width(), target.height())

    def _to_local(self, x: float, y: float) -> Optional[PointerEvent]:
        target = self.image_rect()
        if target is None:
            return None
        return PointerEvent(x - target.left(), y - target.top())

    # --------------------------------------------------------- painting -----------
    def paintEvent(self, event) -> None:  # type: ignore[override]
        painter = QPainter(self)
        painter.fillRect(self.rect(), QColor(20, 20, 20))
        target = self.image_rect()
        if self._image is None or target is None:
            painter.setPen(QColor(200, 200, 200))
            painter.drawText(self.rect(), Qt.AlignCenter, "Open or drop an image (PNG, JPG)")
            return

        painter.setRenderHint(QPainter.SmoothPixmapTransform, True)
        painter.drawImage(target, self._image)
        if self._selection is not None and not self._selection.is_empty:
            self._draw_selection(painter, target)

    def _draw_selection(self, painter: QPainter, target: QRectF) -> None:
        mapper = CoordinateMapper(target.width(), target.height(), self._image.width(), self._image.height())
        x, y, width, height = mapper.rect_to_display(self._selection)
        overlay = QRectF(target.left() + x, target.top() + y, width, height)
        pen = QPen(QColor(*self.settings.overlay_color), self.settings.overlay_width)
        pen.setDashPattern(list(self._dash_pattern()))
        painter.setPen(pen)
        painter.drawRect(overlay)

    def _dash_pattern(self) -> Tuple[float, float]:
        # QPen dash lengths are in units of the pen width.
        dash, gap = self.settings.overlay_dash
        width = max(self.settings.overlay_width, 1.0)
        return dash / width, gap / width

    # ----------------------------------------------------------- input ------------
    def mousePressEvent(self, event) -> None:  # type: ignore[override]
        if event.button() != Qt.LeftButton:
            return
        pointer = self._to_local(event.position().x(), event.position().y())
        if pointer is not None:
            self._dragging = True
            self.drag_started.emit(pointer)

    def mouseMoveEvent(self, event) -> None:  # type: ignore[override]
        if not self._dragging:
            return
        pointer = self._to_local(event.position().x(), event.position().y())
        if pointer is not None:
            self.drag_moved.emit(pointer)

    def mouseReleaseEvent(self, event) -> None:  # type: ignore[override]
        if event.button() != Qt.LeftButton or not self._dragging:
            return
        self._dragging = False
        self.drag_ended.emit()

    def event(self, event) -> bool:  # type: ignore[override]
        kind = event.type()
        if kind in (QEvent.TouchBegin, QEvent.TouchUpdate, QEvent.TouchEnd, QEvent.TouchCancel):
            self._handle_touch(event)
            return True
        return super().event(event)

    def _handle_touch(self, event) -> None:
        kind = event.type()
        if kind in (QEvent.TouchEnd, QEvent.TouchCancel):
            if self._dragging:
                self._dragging = False
                self.drag_ended.emit()
            event.accept()
            return
        points = [(p.position().x(), p.position().y()) for p in event.points()]
        if not points:
            return
        first = PointerEvent.from_touches(points)
        pointer = self._to_local(first.x, first.y)
        if pointer is None:
            return
        if kind == QEvent.TouchBegin:
            self._dragging = True
            self.drag_started.emit(pointer)
        elif self._dragging:
            self.drag_moved.emit(pointer)
        event.accept()

    def resizeEvent(self, event) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self._emit_display_size()
