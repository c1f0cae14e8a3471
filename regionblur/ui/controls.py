from __future__ import annotations

from typing import Iterable

from PySide6.QtCore import Signal
from PySide6.QtWidgets import (
    QComboBox,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from ..core.controller import EditorSnapshot


class ControlPanel(QWidget):
    apply_requested = Signal(int)
    download_requested = Signal()
    reset_requested = Signal()
    new_image_requested = Signal()
    radius_changed = Signal(int)

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(8)

        title = QLabel("Blur", self)
        title.setStyleSheet("font-weight: bold;")
        layout.addWidget(title)

        layout.addWidget(QLabel("Intensity", self))
        self.radius_combo = QComboBox(self)
        self.radius_combo.currentIndexChanged.connect(self._on_radius_changed)
        layout.addWidget(self.radius_combo)

        self.apply_button = QPushButton("Blur selection", self)
        self.apply_button.clicked.connect(lambda: self.apply_requested.emit(self.current_radius()))
        layout.addWidget(self.apply_button)

        layout.addSpacing(12)

        self.download_button = QPushButton("Download", self)
        self.download_button.clicked.connect(self.download_requested.emit)
        layout.addWidget(self.download_button)

        self.reset_button = QPushButton("Reset", self)
        self.reset_button.clicked.connect(self.reset_requested.emit)
        layout.addWidget(self.reset_button)

        self.new_image_button = QPushButton("New image", self)
        self.new_image_button.clicked.connect(self.new_image_requested.emit)
        layout.addWidget(self.new_image_button)

        self.hint_label = QLabel("Drag on the image to select an area.", self)
        self.hint_label.setWordWrap(True)
        layout.addWidget(self.hint_label)

        layout.addStretch(1)

    def set_radius_options(self, options: Iterable[int], current: int) -> None:
        self.radius_combo.blockSignals(True)
        self.radius_combo.clear()
        for value in options:
            self.radius_combo.addItem(f"{value} px", value)
        self.radius_combo.blockSignals(False)
        self.set_radius(current)

    def set_radius(self, radius: int) -> None:
        index = self.radius_combo.findData(radius)
        if index == -1 and self.radius_combo.count() > 0:
            index = 0
        if index >= 0 and index != self.radius_combo.currentIndex():
            self.radius_combo.blockSignals(True)
            self.radius_combo.setCurrentIndex(index)
            self.radius_combo.blockSignals(False)

    def current_radius(self) -> int:
        return int(self.radius_combo.currentData())

    def update_state(self, snapshot: EditorSnapshot) -> None:
        has_image = snapshot.current is not None
        busy = snapshot.processing
        self.radius_combo.setEnabled(has_image and not busy)
        self.apply_button.setEnabled(snapshot.selection_ready and not busy)
        self.download_button.setEnabled(snapshot.modified and not busy)
        self.reset_button.setEnabled(snapshot.modified and not busy)
        self.new_image_button.setEnabled(has_image and not busy)
        self.set_radius(snapshot.radius)
        if busy:
            self.hint_label.setText("Applying blur...")
        elif snapshot.selection_ready:
            self.hint_label.setText("Selection ready. Choose an intensity and blur it.")
        else:
            self.hint_label.setText("Drag on the image to select an area.")

    def _on_radius_changed(self, _: int) -> None:
        data = self.radius_combo.currentData()
        if isinstance(data, int):
            self.radius_changed.emit(data)
