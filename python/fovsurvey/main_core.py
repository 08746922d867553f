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

"""Main core module for the FOV survey application.

This module contains the MainCore class which wires the settings, the
remote repository, the camera store and the interaction session together.
"""

from __future__ import annotations

import logging
from typing import Optional

from PySide6 import QtCore

from .camera_repository import CameraRepository, HttpCameraRepository
from .camera_store import CameraStore
from .project_file import read_autosave
from .session import InteractionSession
from .settings import SurveySettings

logger = logging.getLogger(__name__)


class MainCore(QtCore.QObject):
    """Central coordinator of the survey application.

    Attributes:
        settings: Application settings.
        repository: Remote repository (None when working offline).
        store: Camera store of the current project.
        session: Interaction session of the floor plan canvas.
    """

    def __init__(self, settings: Optional[SurveySettings] = None,
                 repository: Optional[CameraRepository] = None) -> None:
        """Initialize the main core.

        Args:
            settings: Application settings (defaults if None).
            repository: Remote repository overriding the one built from settings.
        """
        super().__init__()
        self.settings = settings if settings is not None else SurveySettings()

        if repository is None and not self.settings.is_offline:
            repository = HttpCameraRepository(self.settings.api_base, parent=self)
        self.repository = repository
        if self.repository is None:
            logger.info("No survey server configured, working offline")

        self.store = CameraStore(
            repository=self.repository,
            project_id=self.settings.project_id,
            autosave_path=self.settings.autosave_path,
            statuses=self.settings.statuses,
            analysis_types=self.settings.analysis_types,
            parent=self,
        )

        autosaved = read_autosave(self.settings.autosave_path)
        if autosaved is not None:
            logger.info("Restoring %d camera(s) from %s", len(autosaved.cameras), self.settings.autosave_path)
            self.store.import_project(autosaved)

        self.session = InteractionSession(self.store, background_click=self.settings.background_click)

    def start(self) -> None:
        """Fetch the remote project, replacing the autosaved one when it arrives."""
        self.store.load_from_repository()

    def release_all(self) -> None:
        """Release all resources."""
        self.session.cancel_touch()
        self.store.select(None)
        self.store.flush_autosave()
