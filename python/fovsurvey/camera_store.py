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

"""Camera store holding the surveyed cameras of a project.

Every mutation is applied locally first, scheduled for autosave, and then forwarded to
the remote repository without waiting for it. The only remote data ever
folded back into local state is the identifier assigned on creation and
the initial project load.
"""

from __future__ import annotations

import logging

from PySide6 import QtCore

from .camera import SurveyCamera, new_camera_key, patch_to_payload, sanitize_patch
from .camera_repository import CameraRepository
from .constants import AUTOSAVE_DELAY_MS, DEFAULT_ANALYSIS_TYPES, DEFAULT_STATUSES
from .project_file import ProjectData, write_project_file

logger = logging.getLogger(__name__)


class CameraStore(QtCore.QObject):
    """Authoritative list of cameras, selection and vocabularies.

    Cameras are indexed by their stable local key. The remote identifier is
    attached once known and never changes the key, so selection and lists
    are unaffected by reconciliation.

    Signals:
        camera_added: Emitted when a camera is added (key: str).
        camera_updated: Emitted when a camera changes (key: str).
        camera_removed: Emitted when a camera is removed (key: str).
        selection_changed: Emitted when the selection changes (key: str or None).
        vocabulary_changed: Emitted when statuses or analysis types change.
        floorplan_changed: Emitted when the floor plan changes (location: str or None).
        project_reset: Emitted when the whole project is replaced.
    """

    camera_added = QtCore.Signal(str)
    camera_updated = QtCore.Signal(str)
    camera_removed = QtCore.Signal(str)
    selection_changed = QtCore.Signal(object)
    vocabulary_changed = QtCore.Signal()
    floorplan_changed = QtCore.Signal(object)
    project_reset = QtCore.Signal()

    def __init__(
        self,
        repository: CameraRepository | None = None,
        project_id: str = "default",
        autosave_path: str | None = None,
        statuses: list[str] | None = None,
        analysis_types: list[str] | None = None,
        parent: QtCore.QObject | None = None,
    ) -> None:
        """Initialize the camera store.

        Args:
            repository: Remote repository, None to work offline.
            project_id: Remote project identifier.
            autosave_path: File mirroring the project after each change, None to disable.
            statuses: Initial status vocabulary.
            analysis_types: Initial analysis-type vocabulary.
            parent: Parent QObject.
        """
        super().__init__(parent)
        self._repository = repository
        self.project_id = project_id
        self._autosave_path = autosave_path
        self._autosave_timer = QtCore.QTimer(self)
        self._autosave_timer.setSingleShot(True)
        self._autosave_timer.setInterval(AUTOSAVE_DELAY_MS)
        self._autosave_timer.timeout.connect(self._write_autosave)

        self._cameras: dict[str, SurveyCamera] = {}
        self._selected_key: str | None = None
        self._statuses = list(statuses if statuses is not None else DEFAULT_STATUSES)
        self._analysis_types = list(analysis_types if analysis_types is not None else DEFAULT_ANALYSIS_TYPES)
        self._floorplan: str | None = None

        # Remote payloads waiting for a camera's remote id
        self._pending_updates: dict[str, list[dict]] = {}
        # Keys removed locally before their remote id was known
        self._pending_deletes: set[str] = set()

    # -- queries ---------------------------------------------------------------

    def get_camera(self, key: str) -> SurveyCamera:
        """Get a camera by key.

        Raises:
            KeyError: If the camera doesn't exist.
        """
        return self._cameras[key]

    def get_all_cameras(self) -> list[SurveyCamera]:
        """Get all cameras in drawing order."""
        return list(self._cameras.values())

    def has_camera(self, key: str) -> bool:
        return key in self._cameras

    def find_camera(self, identifier: str) -> SurveyCamera | None:
        """Find a camera by local key or remote id."""
        if identifier in self._cameras:
            return self._cameras[identifier]
        for camera in self._cameras.values():
            if camera.remote_id == identifier:
                return camera
        return None

    @property
    def selected_key(self) -> str | None:
        return self._selected_key

    def selected_camera(self) -> SurveyCamera | None:
        if self._selected_key is None:
            return None
        return self._cameras.get(self._selected_key)

    @property
    def statuses(self) -> list[str]:
        return list(self._statuses)

    @property
    def analysis_types(self) -> list[str]:
        return list(self._analysis_types)

    @property
    def floorplan(self) -> str | None:
        return self._floorplan

    # -- camera lifecycle ------------------------------------------------------

    def add_camera_at(self, x: float, y: float) -> str:
        """Create a camera at a scene point and select it.

        The camera is inserted immediately under a local key; the remote
        identifier is attached when the repository answers.

        Args:
            x: Scene X coordinate.
            y: Scene Y coordinate.

        Returns:
            Local key of the new camera.
        """
        camera = SurveyCamera(
            key=new_camera_key(),
            x=x,
            y=y,
            status=self._statuses[0] if self._statuses else None,
        )
        key = camera.key
        self._cameras[key] = camera
        logger.info("Added camera %s at (%.1f, %.1f)", key, camera.x, camera.y)
        self.camera_added.emit(key)
        self.select(key)
        self._autosave()

        if self._repository is not None:
            payload = camera.to_dict()
            del payload['id']
            self._pending_updates[key] = []
            self._repository.create_camera(
                self.project_id, payload,
                lambda remote_id: self._on_remote_created(key, remote_id)
            )

        return key

    def patch(self, key: str, patch: dict) -> None:
        """Apply an attribute patch to a camera.

        Values are clamped before they are stored. Patches are applied in
        call order, the last write winning per attribute.

        Args:
            key: Camera key.
            patch: Attribute patch (see camera.PATCH_FIELDS).

        Raises:
            KeyError: If the camera doesn't exist.
            ValueError: If the patch has unknown fields.
        """
        if key not in self._cameras:
            raise KeyError(f"Camera '{key}' not found")

        clean = sanitize_patch(patch)
        if not clean:
            return

        camera = self._cameras[key]
        camera.apply(clean)
        self.camera_updated.emit(key)
        self._autosave()
        self._push_update(camera, patch_to_payload(clean))

    def toggle_analysis(self, key: str, label: str) -> None:
        """Add or remove an analysis label on a camera.

        Raises:
            KeyError: If the camera doesn't exist.
        """
        camera = self.get_camera(key)
        if label in camera.analyses:
            analyses = [a for a in camera.analyses if a != label]
        else:
            analyses = camera.analyses + [label]
        self.patch(key, {'analyses': analyses})

    def remove(self, key: str) -> None:
        """Remove a camera, clearing the selection if it was selected.

        Raises:
            KeyError: If the camera doesn't exist.
        """
        if key not in self._cameras:
            raise KeyError(f"Camera '{key}' not found")

        camera = self._cameras.pop(key)
        if self._selected_key == key:
            self.select(None)
        logger.info("Removed camera %s", camera.id)
        self.camera_removed.emit(key)
        self._autosave()

        if self._repository is None:
            return
        if camera.remote_id is not None:
            self._repository.delete_camera(camera.remote_id)
        elif key in self._pending_updates:
            self._pending_deletes.add(key)
            del self._pending_updates[key]

    def select(self, key: str | None) -> None:
        """Select a camera, or clear the selection with None.

        Raises:
            KeyError: If the camera doesn't exist.
        """
        if key is not None and key not in self._cameras:
            raise KeyError(f"Camera '{key}' not found")
        if key == self._selected_key:
            return
        self._selected_key = key
        self.selection_changed.emit(key)

    # -- vocabularies and floor plan --------------------------------------------

    def set_statuses(self, items: list[str]) -> None:
        """Replace the status vocabulary.

        Existing camera statuses are left untouched even if no longer listed.
        """
        self._statuses = list(items)
        self.vocabulary_changed.emit()
        self._autosave()
        if self._repository is not None:
            self._repository.update_config(self.project_id, statuses=self._statuses)

    def set_analysis_types(self, items: list[str]) -> None:
        """Replace the analysis-type vocabulary."""
        self._analysis_types = list(items)
        self.vocabulary_changed.emit()
        self._autosave()
        if self._repository is not None:
            self._repository.update_config(self.project_id, analysis_types=self._analysis_types)

    def set_floorplan(self, location: str | None) -> None:
        """Set the floor plan location and store it on the remote project."""
        self._floorplan = location
        self.floorplan_changed.emit(location)
        self._autosave()
        if self._repository is not None and location:
            self._repository.update_project(self.project_id, location)

    def upload_floorplan(self, file_path: str) -> None:
        """Use a local image as floor plan, uploading it first when online.

        The floor plan location becomes the URL returned by the server, so
        other clients of the project can load it too.

        Args:
            file_path: Local image file.
        """
        if self._repository is None:
            self.set_floorplan(file_path)
            return
        logger.info("Uploading floor plan %s", file_path)
        self._repository.upload_floorplan(file_path, self.set_floorplan)

    # -- whole project ---------------------------------------------------------

    def export_project(self) -> ProjectData:
        return ProjectData(
            floorplan=self._floorplan,
            cameras=self.get_all_cameras(),
            statuses=self.statuses,
            analysis_types=self.analysis_types,
        )

    def import_project(self, project: ProjectData) -> None:
        """Replace the whole project and clear the selection.

        Args:
            project: Project to load.
        """
        self._replace(project)
        self._autosave()

    def load_from_repository(self) -> None:
        """Replace local state with the remote project once it is fetched."""
        if self._repository is None:
            return
        self._repository.fetch_project(self.project_id, self._on_project_loaded)

    def _on_project_loaded(self, project: dict, cameras: list[dict]) -> None:
        loaded = ProjectData.from_dict({
            'floorplanDataUrl': project.get('floorplanUrl'),
            'cameras': cameras,
            'statuses': project.get('statuses'),
            'analysisTypes': project.get('analysisTypes'),
        })
        logger.info("Loaded project '%s' with %d camera(s)", self.project_id, len(loaded.cameras))
        self._replace(loaded)
        self._autosave()

    def _replace(self, project: ProjectData) -> None:
        self._selected_key = None
        self._cameras = {camera.key: camera for camera in project.cameras}
        self._statuses = list(project.statuses)
        self._analysis_types = list(project.analysis_types)
        self._floorplan = project.floorplan
        self._pending_updates.clear()
        self._pending_deletes.clear()
        self.project_reset.emit()
        self.selection_changed.emit(None)
        self.vocabulary_changed.emit()
        self.floorplan_changed.emit(self._floorplan)

    # -- remote synchronization ------------------------------------------------

    def _push_update(self, camera: SurveyCamera, payload: dict) -> None:
        if self._repository is None:
            return
        if camera.remote_id is not None:
            self._repository.update_camera(camera.remote_id, payload)
        elif camera.key in self._pending_updates:
            self._pending_updates[camera.key].append(payload)

    def _on_remote_created(self, key: str, remote_id: str) -> None:
        """Attach the remote id of a camera created locally.

        Queued updates are sent in order; a camera deleted in the meantime
        is deleted remotely instead.
        """
        if key in self._pending_deletes:
            self._pending_deletes.discard(key)
            logger.info("Camera %s was removed before creation completed", remote_id)
            self._repository.delete_camera(remote_id)
            return

        camera = self._cameras.get(key)
        if camera is None:
            # Project replaced while the request was in flight
            return

        camera.remote_id = remote_id
        logger.info("Camera %s confirmed as %s", key, remote_id)
        for payload in self._pending_updates.pop(key, []):
            self._repository.update_camera(remote_id, payload)
        self.camera_updated.emit(key)
        self._autosave()

    def _autosave(self) -> None:
        if self._autosave_path:
            self._autosave_timer.start()

    def flush_autosave(self) -> None:
        """Write a scheduled autosave now."""
        if not self._autosave_timer.isActive():
            return
        self._autosave_timer.stop()
        self._write_autosave()

    def _write_autosave(self) -> None:
        try:
            write_project_file(self._autosave_path, self.export_project())
        except OSError as e:
            logger.warning("Autosave to %s failed: %s", self._autosave_path, e)
