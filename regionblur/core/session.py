"""
Editing session for a single imported image.

The session owns the pristine original and the working buffer. ``current`` is
replaced wholesale on every commit or reset, so callers must re-read it after
any of those operations instead of keeping the old object around.
"""

from __future__ import annotations

import logging
from typing import Optional

from .effects.blur import DEFAULT_BLUR_RADIUS, validate_radius
from .raster import RasterBuffer, decode_image, encode_png

log = logging.getLogger(__name__)


class SessionClosed(Exception):
    pass


class ImageSession:
    def __init__(self, original: RasterBuffer, default_radius: int = DEFAULT_BLUR_RADIUS) -> None:
        self._default_radius = validate_radius(default_radius)
        self._original: Optional[RasterBuffer] = original
        self._current: Optional[RasterBuffer] = original
        self._radius = self._default_radius
        self._processing = False

    @classmethod
    def load(cls, data: bytes, default_radius: int = DEFAULT_BLUR_RADIUS) -> "ImageSession":
        buffer = decode_image(data)
        log.info(f"Started session for {buffer}")
        return cls(buffer, default_radius=default_radius)

    # ------------------------------------------------------------- state ----------
    @property
    def original(self) -> RasterBuffer:
        if self._original is None:
            raise SessionClosed("Session has been discarded")
        return self._original

    @property
    def current(self) -> RasterBuffer:
        if self._current is None:
            raise SessionClosed("Session has been discarded")
        return self._current

    @property
    def closed(self) -> bool:
        return self._original is None

    @property
    def processing(self) -> bool:
        return self._processing

    @property
    def radius(self) -> int:
        return self._radius

    @property
    def default_radius(self) -> int:
        return self._default_radius

    @property
    def is_modified(self) -> bool:
        if self.closed:
            return False
        return self._current is not self._original

    def set_radius(self, radius: int) -> None:
        self._radius = validate_radius(radius)

    # ----------------------------------------------------------- actions ----------
    def reset(self) -> bool:
        if self._processing:
            log.debug("Reset ignored while a blur is being applied")
            return False
        if self.closed:
            return False
        self._current = self._original
        self._radius = self._default_radius
        log.info("Session reset to the original image")
        return True

    def export(self) -> bytes:
        return encode_png(self.current)

    def discard(self) -> bool:
        if self._processing:
            log.debug("Discard ignored while a blur is being applied")
            return False
        self._original = None
        self._current = None
        log.info("Session discarded")
        return True

    # ------------------------------------------------- commit bookkeeping ---------
    def begin_processing(self) -> bool:
        if self._processing or self.closed:
            return False
        self._processing = True
        return True

    def install(self, buffer: RasterBuffer) -> None:
        if not self._processing:
            raise RuntimeError("Buffers can only be installed while processing")
        current = self.current
        if (buffer.width, buffer.height) != (current.width, current.height):
            raise ValueError(f"{buffer} does not match the working buffer {current}")
        self._current = buffer

    def end_processing(self) -> None:
        self._processing = False
