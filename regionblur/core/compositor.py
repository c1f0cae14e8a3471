"""
Region compositor for the blur editor.

A commit runs in two phases. ``begin`` validates the request and raises the
session's processing flag; an empty or out-of-bounds rect, or a busy session,
makes it a no-op that returns None. ``PendingBlur.complete`` later extracts
the region from the working buffer, blurs it and installs a new full-size
buffer. The caller clears the selection between the two, so the overlay is
gone before any pixel work starts.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future
from typing import Callable, Optional

import numpy as np

from .effects.blur import blur_pixels, validate_radius
from .geometry import Rect
from .raster import RasterBuffer
from .session import ImageSession

log = logging.getLogger(__name__)

Kernel = Callable[[np.ndarray, int], np.ndarray]


class ProcessingError(Exception):
    pass


class PendingBlur:
    def __init__(self, session: ImageSession, rect: Rect, radius: int, kernel: Kernel) -> None:
        self.session = session
        self.rect = rect
        self.radius = radius
        self._kernel = kernel
        self.future: "Future[RasterBuffer]" = Future()
        self.future.set_running_or_notify_cancel()

    @property
    def done(self) -> bool:
        return self.future.done()

    def complete(self) -> RasterBuffer:
        if self.future.done():
            return self.future.result()

        session = self.session
        try:
            source = session.current
            region = source.crop(self.rect)
            blurred = self._kernel(region, self.radius)
            if blurred.shape != region.shape:
                raise ValueError(f"Kernel returned shape {blurred.shape}, expected {region.shape}")
            composed = source.with_region(self.rect, blurred)
            session.install(composed)
        except Exception as exc:
            session.end_processing()
            error = ProcessingError(f"Failed to blur {self.rect} at radius {self.radius}: {exc}")
            log.exception(str(error))
            self.future.set_exception(error)
            raise error from exc

        session.end_processing()
        log.info(f"Blurred {self.rect} at radius {self.radius}")
        self.future.set_result(composed)
        return composed


class RegionCompositor:
    def __init__(self, kernel: Kernel = blur_pixels) -> None:
        self.kernel = kernel

    def begin(self, session: ImageSession, rect: Rect, radius: int) -> Optional[PendingBlur]:
        if session.processing or session.closed:
            log.debug("Blur request ignored: session busy or closed")
            return None
        radius = validate_radius(radius)
        current = session.current
        if rect.is_empty or not rect.fits_within(current.width, current.height):
            log.debug(f"Blur request ignored: {rect} is not a usable region of {current}")
            return None
        if not session.begin_processing():
            return None
        return PendingBlur(session, rect, radius, self.kernel)

    def apply_blur(self, session: ImageSession, rect: Rect, radius: int) -> Optional[RasterBuffer]:
        pending = self.begin(session, rect, radius)
        if pending is None:
            return None
        return pending.complete()
