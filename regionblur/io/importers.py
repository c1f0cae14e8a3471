"""Import helpers for image files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

from ..core.raster import DecodeError

log = logging.getLogger(__name__)

IMAGE_EXT = {".png", ".jpg", ".jpeg", ".bmp", ".webp", ".tif", ".tiff"}


def is_supported(path: Path) -> bool:
    return path.suffix.lower() in IMAGE_EXT


def first_supported(paths: Iterable[Path]) -> Optional[Path]:
    for path in paths:
        if is_supported(path):
            return path
    return None


def read_image_file(path: Path) -> bytes:
    if not is_supported(path):
        raise DecodeError(f"Unsupported image type for {path}")
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise DecodeError(f"Could not read {path}: {exc}") from exc
    log.info(f"Read {len(data)} bytes from {path}")
    return data
