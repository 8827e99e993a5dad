"""Component listing learning materials by education level."""

from __future__ import annotations

from PySide6.QtWidgets import (
    QComboBox,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QVBoxLayout,
    QWidget,
)

from ges_annex.core.materials import MaterialsCatalog


class MaterialsPanel(QWidget):
    def __init__(self, materials: MaterialsCatalog, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.materials = materials
        self._build_ui()
        self.refresh()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        level_row = QHBoxLayout()
        level_row.addWidget(QLabel("Level:", self))
        self.level_combo = QComboBox(self)
        self.level_combo.addItem("All levels", userData=None)
        for level in self.materials.levels():
            self.level_combo.addItem(level, userData=level)
        self.level_combo.currentIndexChanged.connect(lambda _: self.refresh())
        level_row.addWidget(self.level_combo)
        level_row.addStretch()
        layout.addLayout(level_row)

        self.material_list = QListWidget(self)
        self.material_list.setAlternatingRowColors(True)
        self.material_list.setWordWrap(True)
        layout.addWidget(self.material_list, stretch=1)

    def refresh(self) -> None:
        self.material_list.clear()
        for material in self.materials.list_materials(self.level_combo.currentData()):
            QListWidgetItem(
                f"[{material.level}] {material.subject}: {material.title}\n{material.description}",
                self.material_list,
            )
