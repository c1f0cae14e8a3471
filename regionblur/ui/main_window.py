from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QAction, QCloseEvent
from PySide6.QtWidgets import (
    QFileDialog,
    QHBoxLayout,
    QMainWindow,
    QMenuBar,
    QMessageBox,
    QStatusBar,
    QWidget,
)

from ..config import AppSettings
from ..core.compositor import ProcessingError
from ..core.controller import EditorController, EditorSnapshot
from ..core.raster import DecodeError
from ..io.exporter import export_path, write_export
from ..io.importers import IMAGE_EXT, first_supported, read_image_file
from .controls import ControlPanel
from .viewer import BlurCanvas, QtScheduler

log = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """
    Main application window: canvas on the left, blur controls on the right.
    """

    def __init__(
        self,
        settings: AppSettings,
        settings_path: Optional[Path] = None,
        *args,
        **kwargs,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.settings = settings
        self.settings_path = settings_path
        self.controller = EditorController(
            scheduler=QtScheduler(),
            default_radius=settings.default_radius,
        )

        self.setWindowTitle("Region Blur")
        self.resize(1280, 860)
        self.setAcceptDrops(True)

        self._build_ui()
        self._create_actions()
        self._create_menus()
        self._connect_signals()
        self._on_state_changed(self.controller.snapshot())

    # ------------------------------------------------------------------ UI setup ---
    def _build_ui(self) -> None:
        central = QWidget(self)
        layout = QHBoxLayout(central)
        layout.setContentsMargins(8, 8, 8, 8)
        layout.setSpacing(8)

        self.canvas = BlurCanvas(self.settings, self)
        layout.addWidget(self.canvas, 1)

        self.controls = ControlPanel(self)
        self.controls.setFixedWidth(220)
        self.controls.set_radius_options(self.settings.radius_options, self.settings.default_radius)
        layout.addWidget(self.controls)

        self.setCentralWidget(central)

        self.status = QStatusBar(self)
        self.setStatusBar(self.status)
        self.status.showMessage("Ready")

    def _create_actions(self) -> None:
        self.open_action = QAction("Open Image...", self)
        self.open_action.setShortcut("Ctrl+O")
        self.export_action = QAction("Download...", self)
        self.export_action.setShortcut("Ctrl+S")
        self.reset_action = QAction("Reset", self)
        self.exit_action = QAction("Exit", self)

    def _create_menus(self) -> None:
        menubar: QMenuBar = self.menuBar()
        file_menu = menubar.addMenu("&File")
        file_menu.addAction(self.open_action)
        file_menu.addAction(self.export_action)
        file_menu.addSeparator()
        file_menu.addAction(self.reset_action)
        file_menu.addSeparator()
        file_menu.addAction(self.exit_action)

    def _connect_signals(self) -> None:
        self.controller.subscribe(self._on_state_changed)
        self.controller.subscribe_errors(self._on_processing_error)

        self.canvas.drag_started.connect(self.controller.on_drag_start)
        self.canvas.drag_moved.connect(self.controller.on_drag_move)
        self.canvas.drag_ended.connect(self.controller.on_drag_end)
        self.canvas.display_resized.connect(self.controller.set_display_size)

        self.controls.apply_requested.connect(self._apply)
        self.controls.download_requested.connect(self._export_image)
        self.controls.reset_requested.connect(self._reset)
        self.controls.new_image_requested.connect(self._new_image)
        self.controls.radius_changed.connect(self._on_radius_changed)

        self.open_action.triggered.connect(self._open_image)
        self.export_action.triggered.connect(self._export_image)
        self.reset_action.triggered.connect(self._reset)
        self.exit_action.triggered.connect(self.close)

    # ------------------------------------------------------------ image import -----
    def _open_image(self) -> None:
        if self.controller.processing:
            return
        patterns = " ".join(f"*{ext}" for ext in sorted(IMAGE_EXT))
        path_str, _ = QFileDialog.getOpenFileName(
            self,
            "Open Image",
            self.settings.last_directory,
            f"Images ({patterns});;All Files (*.*)",
        )
        if not path_str:
            return
        self._load_path(Path(path_str))

    def _load_path(self, path: Path) -> None:
        try:
            data = read_image_file(path)
            self.controller.on_import(data)
        except DecodeError as exc:
            log.warning(f"Could not open {path}: {exc}")
            QMessageBox.critical(self, "Failed to open image", str(exc))
            return
        self._remember_directory(path.parent)
        self._notify(f"Loaded {path.name}")

    def dragEnterEvent(self, event) -> None:  # type: ignore[override]
        if event.mimeData().hasUrls() and not self.controller.processing:
            event.acceptProposedAction()

    def dropEvent(self, event) -> None:  # type: ignore[override]
        paths = [Path(url.toLocalFile()) for url in event.mimeData().urls() if url.isLocalFile()]
        path = first_supported(paths)
        if path is None:
            self._notify("Dropped file is not a supported image")
            return
        event.acceptProposedAction()
        self._load_path(path)

    # ------------------------------------------------------------------ editing ----
    def _apply(self, radius: int) -> None:
        pending = self.controller.on_apply(radius)
        if pending is not None:
            self._notify(f"Blurring {pending.rect.width}x{pending.rect.height} px at {radius} px")

    def _on_radius_changed(self, radius: int) -> None:
        if self.controller.has_image and not self.controller.processing:
            self.controller.set_radius(radius)

    def _reset(self) -> None:
        if self.controller.on_reset():
            self._notify("Original image restored")

    def _new_image(self) -> None:
        if self.controller.on_new_image():
            self._notify("Ready")

    def _on_processing_error(self, error: ProcessingError) -> None:
        QMessageBox.critical(self, "Blur failed", str(error))

    def _on_state_changed(self, snapshot: EditorSnapshot) -> None:
        self.canvas.update_state(snapshot)
        self.controls.update_state(snapshot)
        has_image = snapshot.current is not None
        self.export_action.setEnabled(snapshot.modified and not snapshot.processing)
        self.reset_action.setEnabled(snapshot.modified and not snapshot.processing)
        self.open_action.setEnabled(not snapshot.processing)
        if not has_image:
            self.canvas.setCursor(Qt.ArrowCursor)

    # ------------------------------------------------------------------- export ----
    def _export_image(self) -> None:
        data = self.controller.on_export()
        if data is None:
            return
        start_dir = Path(self.settings.last_directory) if self.settings.last_directory else Path.home()
        default_target = export_path(start_dir, self.settings)
        path_str, _ = QFileDialog.getSaveFileName(
            self,
            "Download Image",
            str(default_target),
            "PNG Image (*.png);;All Files (*.*)",
        )
        if not path_str:
            return
        try:
            target = write_export(data, Path(path_str))
        except OSError as exc:
            QMessageBox.critical(self, "Failed to save image", str(exc))
            return
        self._remember_directory(target.parent)
        self._notify(f"Saved {target.name}")

    # -------------------------------------------------------------- utilities -----
    def _remember_directory(self, directory: Path) -> None:
        self.settings.last_directory = str(directory)
        if self.settings_path is None:
            return
        try:
            self.settings.save(self.settings_path)
        except OSError as e:
            log.error(f"Failed to save settings to {self.settings_path}: {e}")

    def _notify(self, message: str) -> None:
        self.status.showMessage(message, 4000)

    # ---------------------------------------------------------------- lifecycle ---
    def closeEvent(self, event: QCloseEvent) -> None:  # type: ignore[override]
        if self.controller.processing:
            event.ignore()
            return
        super().closeEvent(event)
