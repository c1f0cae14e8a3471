"""Writes exported PNG bytes to disk under the configured file name."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from ..config import AppSettings

log = logging.getLogger(__name__)


def export_filename(settings: Optional[AppSettings] = None) -> str:
    return (settings or AppSettings()).export_filename


def export_path(directory: Path, settings: Optional[AppSettings] = None) -> Path:
    return directory / export_filename(settings)


def write_export(data: bytes, target: Path) -> Path:
    if not data:
        raise ValueError("Nothing to export")
    if target.suffix.lower() != ".png":
        target = target.with_suffix(".png")
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)
    log.info(f"Exported {len(data)} bytes to {target}")
    return target
