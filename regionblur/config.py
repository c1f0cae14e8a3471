"""Persistent user settings stored as JSON in the app data directory."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .core.effects.blur import BLUR_RADIUS_OPTIONS, DEFAULT_BLUR_RADIUS
from .logging_setup import get_app_data_dir

log = logging.getLogger(__name__)

SETTINGS_FILENAME = "settings.json"
DEFAULT_EXPORT_FILENAME = "image-confidentielle.png"


@dataclass
class AppSettings:
    default_radius: int = DEFAULT_BLUR_RADIUS
    radius_options: List[int] = field(default_factory=lambda: list(BLUR_RADIUS_OPTIONS))
    export_filename: str = DEFAULT_EXPORT_FILENAME
    overlay_color: Tuple[int, int, int] = (59, 130, 246)
    overlay_width: float = 3.0
    overlay_dash: Tuple[float, float] = (10.0, 5.0)
    last_directory: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "default_radius": self.default_radius,
            "radius_options": list(self.radius_options),
            "export_filename": self.export_filename,
            "overlay": {
                "color": list(self.overlay_color),
                "width": self.overlay_width,
                "dash": list(self.overlay_dash),
            },
            "last_directory": self.last_directory,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "AppSettings":
        defaults = AppSettings()

        options = [int(r) for r in data.get("radius_options", []) if int(r) in BLUR_RADIUS_OPTIONS]
        if not options:
            options = list(defaults.radius_options)
        options.sort()

        radius = int(data.get("default_radius", defaults.default_radius))
        if radius not in options:
            log.warning(f"Default radius {radius} is not an available option; using {defaults.default_radius}")
            radius = defaults.default_radius if defaults.default_radius in options else options[0]

        overlay = data.get("overlay", {})
        color = overlay.get("color", defaults.overlay_color)
        dash = overlay.get("dash", defaults.overlay_dash)
        width = float(overlay.get("width", defaults.overlay_width))

        filename = str(data.get("export_filename") or defaults.export_filename)
        if not filename.lower().endswith(".png"):
            filename = f"{filename}.png"

        return AppSettings(
            default_radius=radius,
            radius_options=options,
            export_filename=filename,
            overlay_color=tuple(int(c) for c in color[:3]) if len(color) >= 3 else defaults.overlay_color,
            overlay_width=width if width > 0 else defaults.overlay_width,
            overlay_dash=tuple(float(d) for d in dash[:2]) if len(dash) >= 2 else defaults.overlay_dash,
            last_directory=str(data.get("last_directory", "")),
        )

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict(), indent=2))

    @staticmethod
    def load(path: Path) -> "AppSettings":
        return AppSettings.from_dict(json.loads(path.read_text()))


def default_settings_path() -> Path:
    return get_app_data_dir() / SETTINGS_FILENAME


def load_settings(path: Optional[Path] = None) -> AppSettings:
    """Loads settings, creating the file with defaults if it doesn't exist."""
    path = path or default_settings_path()
    if not path.exists():
        log.info(f"Creating default settings at {path}")
        settings = AppSettings()
        try:
            settings.save(path)
        except OSError as e:
            log.error(f"Failed to save settings to {path}: {e}")
        return settings

    log.info(f"Loading settings from {path}")
    try:
        return AppSettings.load(path)
    except (OSError, ValueError, TypeError, AttributeError) as e:
        log.warning(f"Unreadable settings at {path}, using defaults: {e}")
        return AppSettings()
