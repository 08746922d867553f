# Copyright 2026 Marc-Antoine Desjardins
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Side panel with the camera list, camera properties and vocabularies."""

from __future__ import annotations

from PySide6 import QtWidgets, QtCore

from .camera_store import CameraStore
from .settings import format_vocabulary_text, parse_vocabulary_text

KEY_ROLE = QtCore.Qt.ItemDataRole.UserRole


class CameraPanel(QtWidgets.QWidget):
    """Camera list, property editor and vocabulary editors.

    Every edit goes through the camera store, which clamps values, so the
    spin boxes accept any number and show the stored value afterwards.
    """

    def __init__(self, store: CameraStore, parent: QtWidgets.QWidget | None = None) -> None:
        """Initialize the camera panel.

        Args:
            store: Camera store to display and edit.
            parent: Parent widget.
        """
        super().__init__(parent)
        self._store = store
        self._analysis_checkboxes: list[QtWidgets.QCheckBox] = []
        # Spin box values as last shown, to skip patches for unedited fields
        self._loaded_values: dict[str, float] = {}

        layout = QtWidgets.QVBoxLayout(self)

        # Camera list
        list_group = QtWidgets.QGroupBox("Cameras")
        list_layout = QtWidgets.QVBoxLayout(list_group)
        self.camera_list = QtWidgets.QListWidget()
        self.camera_list.currentItemChanged.connect(self._on_current_item_changed)
        list_layout.addWidget(self.camera_list)
        self.empty_label = QtWidgets.QLabel("No cameras yet, click the floor plan to add one")
        self.empty_label.setWordWrap(True)
        list_layout.addWidget(self.empty_label)
        layout.addWidget(list_group)

        # Properties
        self.properties_group = QtWidgets.QGroupBox("Properties")
        form_layout = QtWidgets.QFormLayout(self.properties_group)

        self.name_input = QtWidgets.QLineEdit()
        self.name_input.textEdited.connect(self._on_name_edited)
        form_layout.addRow("Name:", self.name_input)

        self.status_combo = QtWidgets.QComboBox()
        self.status_combo.activated.connect(self._on_status_activated)
        form_layout.addRow("Status:", self.status_combo)

        self.analyses_widget = QtWidgets.QWidget()
        self.analyses_layout = QtWidgets.QVBoxLayout(self.analyses_widget)
        self.analyses_layout.setContentsMargins(0, 0, 0, 0)
        form_layout.addRow("AI analyses:", self.analyses_widget)

        self.rotation_spin = self._create_spin_box(-3600, 3600)
        self.rotation_spin.editingFinished.connect(
            lambda: self._on_spin_edited('rotation_deg', self.rotation_spin)
        )
        form_layout.addRow("Direction (°):", self.rotation_spin)

        self.angle_spin = self._create_spin_box(0, 360)
        self.angle_spin.editingFinished.connect(
            lambda: self._on_spin_edited('fov_angle_deg', self.angle_spin)
        )
        form_layout.addRow("Cone angle (°):", self.angle_spin)

        self.radius_spin = self._create_spin_box(0, 5000)
        self.radius_spin.editingFinished.connect(
            lambda: self._on_spin_edited('fov_radius', self.radius_spin)
        )
        form_layout.addRow("Radius (px):", self.radius_spin)

        self.delete_button = QtWidgets.QPushButton("Delete")
        self.delete_button.clicked.connect(self._on_delete_clicked)
        form_layout.addRow(self.delete_button)

        self.no_selection_label = QtWidgets.QLabel("Select a camera")
        layout.addWidget(self.no_selection_label)
        layout.addWidget(self.properties_group)

        # Vocabularies
        config_group = QtWidgets.QGroupBox("Configuration (one item per line)")
        config_layout = QtWidgets.QFormLayout(config_group)
        self.statuses_edit = QtWidgets.QPlainTextEdit()
        config_layout.addRow("Statuses:", self.statuses_edit)
        self.analysis_types_edit = QtWidgets.QPlainTextEdit()
        config_layout.addRow("Analysis types:", self.analysis_types_edit)
        apply_button = QtWidgets.QPushButton("Apply")
        apply_button.clicked.connect(self._on_apply_vocabularies)
        config_layout.addRow(apply_button)
        layout.addWidget(config_group)

        layout.addStretch()

        # Store signals
        self._store.camera_added.connect(self._refresh_list)
        self._store.camera_removed.connect(self._refresh_list)
        self._store.camera_updated.connect(self._on_camera_updated)
        self._store.selection_changed.connect(self._on_selection_changed)
        self._store.vocabulary_changed.connect(self._on_vocabulary_changed)
        self._store.project_reset.connect(self._refresh_list)

        self._on_vocabulary_changed()
        self._refresh_list()

    def _create_spin_box(self, minimum: float, maximum: float) -> QtWidgets.QDoubleSpinBox:
        spin = QtWidgets.QDoubleSpinBox()
        spin.setDecimals(1)
        spin.setRange(minimum, maximum)
        spin.setKeyboardTracking(False)
        return spin

    # -- store -> widgets --------------------------------------------------------

    def _refresh_list(self, *args) -> None:
        """Rebuild the camera list from the store."""
        self.camera_list.blockSignals(True)
        self.camera_list.clear()
        for camera in self._store.get_all_cameras():
            item = QtWidgets.QListWidgetItem(camera.name)
            item.setData(KEY_ROLE, camera.key)
            self.camera_list.addItem(item)
            if camera.key == self._store.selected_key:
                self.camera_list.setCurrentItem(item)
        self.camera_list.blockSignals(False)
        self.empty_label.setVisible(self.camera_list.count() == 0)
        self._refresh_properties()

    @QtCore.Slot(str)
    def _on_camera_updated(self, key: str) -> None:
        for row in range(self.camera_list.count()):
            item = self.camera_list.item(row)
            if item.data(KEY_ROLE) == key:
                item.setText(self._store.get_camera(key).name)
        if key == self._store.selected_key:
            self._refresh_properties()

    @QtCore.Slot(object)
    def _on_selection_changed(self, key: str | None) -> None:
        self.camera_list.blockSignals(True)
        self.camera_list.setCurrentItem(None)
        for row in range(self.camera_list.count()):
            item = self.camera_list.item(row)
            if item.data(KEY_ROLE) == key:
                self.camera_list.setCurrentItem(item)
        self.camera_list.blockSignals(False)
        self._refresh_properties()

    @QtCore.Slot()
    def _on_vocabulary_changed(self) -> None:
        self.statuses_edit.setPlainText(format_vocabulary_text(self._store.statuses))
        self.analysis_types_edit.setPlainText(format_vocabulary_text(self._store.analysis_types))

        for checkbox in self._analysis_checkboxes:
            self.analyses_layout.removeWidget(checkbox)
            checkbox.deleteLater()
        self._analysis_checkboxes = []
        for label in self._store.analysis_types:
            checkbox = QtWidgets.QCheckBox(label)
            checkbox.clicked.connect(lambda checked, text=label: self._on_analysis_clicked(text))
            self.analyses_layout.addWidget(checkbox)
            self._analysis_checkboxes.append(checkbox)

        self._refresh_properties()

    def _refresh_properties(self) -> None:
        """Show the selected camera's attributes."""
        camera = self._store.selected_camera()
        self.properties_group.setVisible(camera is not None)
        self.no_selection_label.setVisible(camera is None)
        if camera is None:
            return

        if self.name_input.text() != camera.name:
            self.name_input.setText(camera.name)

        # Status outside the vocabulary is still shown as is
        self.status_combo.clear()
        self.status_combo.addItem("Unset", None)
        for status in self._store.statuses:
            self.status_combo.addItem(status, status)
        if camera.status is not None and camera.status not in self._store.statuses:
            self.status_combo.addItem(camera.status, camera.status)
        self.status_combo.setCurrentIndex(max(0, self.status_combo.findData(camera.status)))

        for checkbox in self._analysis_checkboxes:
            checkbox.setChecked(checkbox.text() in camera.analyses)

        for field, spin, value in (
            ('rotation_deg', self.rotation_spin, camera.rotation_deg),
            ('fov_angle_deg', self.angle_spin, camera.fov_angle_deg),
            ('fov_radius', self.radius_spin, camera.fov_radius),
        ):
            spin.blockSignals(True)
            spin.setValue(value)
            spin.blockSignals(False)
            self._loaded_values[field] = spin.value()

    # -- widgets -> store --------------------------------------------------------

    def _patch_selected(self, patch: dict) -> None:
        key = self._store.selected_key
        if key is None:
            return
        self._store.patch(key, patch)

    def _on_spin_edited(self, field: str, spin: QtWidgets.QDoubleSpinBox) -> None:
        if spin.value() == self._loaded_values.get(field):
            return
        self._patch_selected({field: spin.value()})

    def _on_current_item_changed(self, current, previous) -> None:
        self._store.select(current.data(KEY_ROLE) if current is not None else None)

    @QtCore.Slot(str)
    def _on_name_edited(self, text: str) -> None:
        self._patch_selected({'name': text})

    @QtCore.Slot(int)
    def _on_status_activated(self, index: int) -> None:
        self._patch_selected({'status': self.status_combo.itemData(index)})

    def _on_analysis_clicked(self, label: str) -> None:
        key = self._store.selected_key
        if key is None:
            return
        self._store.toggle_analysis(key, label)

    @QtCore.Slot()
    def _on_delete_clicked(self) -> None:
        key = self._store.selected_key
        if key is not None:
            self._store.remove(key)

    @QtCore.Slot()
    def _on_apply_vocabularies(self) -> None:
        statuses = parse_vocabulary_text(self.statuses_edit.toPlainText())
        analysis_types = parse_vocabulary_text(self.analysis_types_edit.toPlainText())
        if statuses != self._store.statuses:
            self._store.set_statuses(statuses)
        if analysis_types != self._store.analysis_types:
            self._store.set_analysis_types(analysis_types)
