"""Gaussian blur kernel for rectangular regions."""

from __future__ import annotations

import cv2
import numpy as np

BLUR_RADIUS_OPTIONS = (5, 10, 15, 20, 25, 30, 40, 50, 60, 70, 80, 90, 100)
DEFAULT_BLUR_RADIUS = 15


def validate_radius(radius: int) -> int:
    if isinstance(radius, bool) or not isinstance(radius, int) or radius not in BLUR_RADIUS_OPTIONS:
        raise ValueError(f"Unsupported blur radius {radius!r}; expected one of {BLUR_RADIUS_OPTIONS}")
    return radius


def blur_pixels(pixels: np.ndarray, radius: int) -> np.ndarray:
    """
    Separable Gaussian blur of a whole sub-buffer.

    The radius is used as the standard deviation in pixels and OpenCV derives
    the kernel size from it. Edges are clamped, so nothing outside ``pixels``
    contributes to the result.
    """
    if pixels.size == 0:
        raise ValueError("Cannot blur an empty region")
    sigma = float(max(1, radius))
    return cv2.GaussianBlur(
        pixels,
        (0, 0),
        sigmaX=sigma,
        sigmaY=sigma,
        borderType=cv2.BORDER_REPLICATE,
    )
