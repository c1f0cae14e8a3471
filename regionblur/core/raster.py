"""
Immutable pixel buffers plus the decode/encode boundary.

Buffers are BGRA, 8 bits per channel, matching OpenCV's native channel
order. A buffer never changes after construction; edits produce new buffers.
"""

from __future__ import annotations

import logging

import cv2
import numpy as np

from .geometry import Rect

log = logging.getLogger(__name__)

CHANNELS = 4


class DecodeError(Exception):
    pass


class RasterBuffer:
    __slots__ = ("_pixels",)

    def __init__(self, pixels: np.ndarray) -> None:
        if pixels.ndim != 3 or pixels.shape[2] != CHANNELS:
            raise ValueError(f"Expected (h, w, {CHANNELS}) pixels, got shape {pixels.shape}")
        if pixels.dtype != np.uint8:
            raise ValueError(f"Expected uint8 pixels, got {pixels.dtype}")
        if pixels.shape[0] <= 0 or pixels.shape[1] <= 0:
            raise ValueError("Raster buffers must have a positive size")
        owned = np.array(pixels, dtype=np.uint8, copy=True, order="C")
        owned.flags.writeable = False
        self._pixels = owned

    @property
    def pixels(self) -> np.ndarray:
        return self._pixels

    @property
    def width(self) -> int:
        return int(self._pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self._pixels.shape[0])

    def crop(self, rect: Rect) -> np.ndarray:
        if rect.is_empty or not rect.fits_within(self.width, self.height):
            raise ValueError(f"{rect} is not a region of a {self.width}x{self.height} buffer")
        rows, cols = rect.as_slices()
        return self._pixels[rows, cols].copy()

    def with_region(self, rect: Rect, region: np.ndarray) -> "RasterBuffer":
        if region.shape != (rect.height, rect.width, CHANNELS):
            raise ValueError(f"Region shape {region.shape} does not match {rect}")
        if not rect.fits_within(self.width, self.height):
            raise ValueError(f"{rect} is outside a {self.width}x{self.height} buffer")
        composed = self._pixels.copy()
        rows, cols = rect.as_slices()
        composed[rows, cols] = region
        return RasterBuffer(composed)

    def same_pixels(self, other: "RasterBuffer") -> bool:
        return self._pixels.shape == other._pixels.shape and np.array_equal(self._pixels, other._pixels)

    def __repr__(self) -> str:
        return f"RasterBuffer({self.width}x{self.height})"


def _to_bgra8(image: np.ndarray) -> np.ndarray:
    if image.dtype == np.uint16:
        image = (image >> 8).astype(np.uint8)
    elif image.dtype != np.uint8:
        raise DecodeError(f"Unsupported sample type {image.dtype}")

    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGRA)
    channels = image.shape[2]
    if channels == 1:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGRA)
    if channels == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2BGRA)
    if channels == 4:
        return image
    raise DecodeError(f"Unsupported channel count {channels}")


def decode_image(data: bytes) -> RasterBuffer:
    if not data:
        raise DecodeError("No image data")
    raw = np.frombuffer(data, dtype=np.uint8)
    try:
        image = cv2.imdecode(raw, cv2.IMREAD_UNCHANGED)
    except cv2.error as exc:
        raise DecodeError(f"Failed to decode image: {exc}") from exc
    if image is None:
        raise DecodeError("Unrecognised or corrupt image data")
    buffer = RasterBuffer(_to_bgra8(image))
    log.info(f"Decoded {len(data)} bytes into {buffer}")
    return buffer


def encode_png(buffer: RasterBuffer) -> bytes:
    ok, encoded = cv2.imencode(".png", buffer.pixels)
    if not ok:
        raise RuntimeError(f"PNG encoding failed for {buffer}")
    return encoded.tobytes()
