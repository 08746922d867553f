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

"""Main window module for the FOV survey application.

This module contains the MainWindow class which lays out the camera panel
and the floor plan canvas and provides the File menu.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from PySide6 import QtWidgets, QtCore, QtGui

from .camera_panel import CameraPanel
from .constants import SAVED_PROJECTS_DIR_PATH
from .floorplan_canvas import FloorplanCanvas
from .project_file import ProjectFormatError, read_project_file, write_project_file

if TYPE_CHECKING:
    from .main_core import MainCore

logger = logging.getLogger(__name__)

IMAGE_FILE_FILTER = "Images (*.png *.jpg *.jpeg *.bmp *.gif *.webp)"


class MainWindow(QtWidgets.QMainWindow):
    """Main application window."""

    def __init__(self, core: MainCore) -> None:
        """Initialize the main window.

        Args:
            core: Main core instance managing application state.
        """
        super().__init__()

        self.core = core

        self.setWindowTitle("FOV Survey")
        self.resize(1400, 900)

        self._setup_menu_bar()
        self._setup_ui()

        self.core.store.floorplan_changed.connect(self._on_floorplan_changed)
        if self.core.repository is not None:
            self.core.repository.request_failed.connect(self._on_request_failed)

        # Show the restored floor plan, if any
        self._on_floorplan_changed(self.core.store.floorplan)

    def _setup_menu_bar(self) -> None:
        """Set up the menu bar."""
        menu_bar = self.menuBar()

        # File menu
        file_menu = menu_bar.addMenu("&File")

        load_floorplan_action = QtGui.QAction("Load &Floor Plan...", self)
        load_floorplan_action.setShortcut("Ctrl+O")
        load_floorplan_action.triggered.connect(self._on_load_floorplan)
        file_menu.addAction(load_floorplan_action)

        file_menu.addSeparator()

        export_action = QtGui.QAction("&Export Project...", self)
        export_action.setShortcut("Ctrl+S")
        export_action.triggered.connect(self._on_export_project)
        file_menu.addAction(export_action)

        import_action = QtGui.QAction("&Import Project...", self)
        import_action.triggered.connect(self._on_import_project)
        file_menu.addAction(import_action)

        file_menu.addSeparator()

        # Quit action
        quit_action = QtGui.QAction("&Quit", self)
        quit_action.setShortcut("Ctrl+Q")
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)

    def _setup_ui(self) -> None:
        """Set up the main user interface."""
        splitter = QtWidgets.QSplitter(QtCore.Qt.Orientation.Horizontal)

        self.panel = CameraPanel(self.core.store)
        self.panel.setMinimumWidth(280)
        splitter.addWidget(self.panel)

        self.canvas = FloorplanCanvas(self.core.store, self.core.session, self.core.repository)
        splitter.addWidget(self.canvas)

        splitter.setStretchFactor(0, 0)
        splitter.setStretchFactor(1, 1)
        splitter.setSizes([320, 1080])
        self.setCentralWidget(splitter)

        self.statusBar()

    @QtCore.Slot(object)
    def _on_floorplan_changed(self, location: str | None) -> None:
        if location and location.startswith('data:'):
            self.statusBar().showMessage("Floor plan: embedded image")
        elif location:
            self.statusBar().showMessage(f"Floor plan: {location}")
        else:
            self.statusBar().showMessage("No floor plan loaded")

    @QtCore.Slot(str)
    def _on_request_failed(self, message: str) -> None:
        self.statusBar().showMessage(f"Server request failed: {message}", 5000)

    @QtCore.Slot()
    def _on_load_floorplan(self) -> None:
        """Handle load floor plan menu action."""
        start_dir = os.path.expanduser("~")
        current = self.core.store.floorplan
        if current and os.path.isfile(current):
            start_dir = os.path.dirname(current)
        file_path, _ = QtWidgets.QFileDialog.getOpenFileName(
            self,
            "Load Floor Plan",
            start_dir,
            IMAGE_FILE_FILTER
        )
        if not file_path:
            return

        if QtGui.QImage(file_path).isNull():
            QtWidgets.QMessageBox.critical(
                self,
                "Invalid Image",
                f"Could not read an image from '{file_path}'."
            )
            return

        self.core.store.upload_floorplan(file_path)

    @QtCore.Slot()
    def _on_export_project(self) -> None:
        """Handle export project menu action."""
        os.makedirs(SAVED_PROJECTS_DIR_PATH, exist_ok=True)

        file_path, _ = QtWidgets.QFileDialog.getSaveFileName(
            self,
            "Export Project",
            os.path.join(SAVED_PROJECTS_DIR_PATH, "survey-project.json"),
            "JSON Files (*.json)"
        )
        if not file_path:
            return

        project = self.core.store.export_project()
        try:
            write_project_file(file_path, project)
        except OSError as e:
            QtWidgets.QMessageBox.critical(
                self,
                "Error Exporting Project",
                f"Failed to export project: {e}"
            )
            return

        logger.info("Exported %d camera(s) to %s", len(project.cameras), file_path)
        self.statusBar().showMessage(f"Exported {len(project.cameras)} camera(s) to {file_path}", 5000)

    @QtCore.Slot()
    def _on_import_project(self) -> None:
        """Handle import project menu action."""
        os.makedirs(SAVED_PROJECTS_DIR_PATH, exist_ok=True)

        file_path, _ = QtWidgets.QFileDialog.getOpenFileName(
            self,
            "Import Project",
            SAVED_PROJECTS_DIR_PATH,
            "JSON Files (*.json)"
        )
        if not file_path:
            return

        try:
            project = read_project_file(file_path)
        except ProjectFormatError as e:
            QtWidgets.QMessageBox.critical(
                self,
                "Invalid Project File",
                str(e)
            )
            return
        except OSError as e:
            QtWidgets.QMessageBox.critical(
                self,
                "Error Importing Project",
                f"Failed to read '{file_path}': {e}"
            )
            return

        self.core.store.import_project(project)
        logger.info("Imported %d camera(s) from %s", len(project.cameras), file_path)
        self.statusBar().showMessage(f"Imported {len(project.cameras)} camera(s)", 5000)

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:
        """Handle window close event.

        Args:
            event: Close event.
        """
        self.core.release_all()
        event.accept()
