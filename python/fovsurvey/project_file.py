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

"""Project data and its JSON file format.

Project files use the application's save envelope
{"type": "survey_project", "version": "1.0", "data": {...}}. A bare
project object (without envelope) is accepted on import as well.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field

from .camera import SurveyCamera
from .constants import (
    DEFAULT_ANALYSIS_TYPES,
    DEFAULT_STATUSES,
    PROJECT_FILE_TYPE,
    PROJECT_FILE_VERSION,
)

logger = logging.getLogger(__name__)


class ProjectFormatError(ValueError):
    """Raised when project data cannot be read."""


@dataclass
class ProjectData:
    """Everything a survey project holds.

    Attributes:
        floorplan: Floor plan location (file path or URL), or None.
        cameras: Cameras in drawing order.
        statuses: Status vocabulary.
        analysis_types: Analysis-type vocabulary.
    """
    floorplan: str | None = None
    cameras: list[SurveyCamera] = field(default_factory=list)
    statuses: list[str] = field(default_factory=lambda: list(DEFAULT_STATUSES))
    analysis_types: list[str] = field(default_factory=lambda: list(DEFAULT_ANALYSIS_TYPES))

    def to_dict(self) -> dict:
        return {
            'floorplanDataUrl': self.floorplan,
            'cameras': [camera.to_dict() for camera in self.cameras],
            'statuses': list(self.statuses),
            'analysisTypes': list(self.analysis_types),
        }

    @staticmethod
    def from_dict(data: dict) -> 'ProjectData':
        """Deserialize project data.

        Empty or missing vocabularies fall back to the defaults.

        Args:
            data: Bare project dictionary.

        Returns:
            ProjectData instance.

        Raises:
            ProjectFormatError: If the structure is invalid.
        """
        if not isinstance(data, dict):
            raise ProjectFormatError("Project data must be a JSON object")

        cameras_data = data.get('cameras') or []
        if not isinstance(cameras_data, list):
            raise ProjectFormatError("'cameras' must be a list")

        cameras = []
        for index, entry in enumerate(cameras_data):
            if not isinstance(entry, dict):
                raise ProjectFormatError(f"Camera #{index} is not an object")
            try:
                cameras.append(SurveyCamera.from_dict(entry))
            except (TypeError, ValueError) as e:
                raise ProjectFormatError(f"Camera #{index} is invalid: {e}") from e

        return ProjectData(
            floorplan=data.get('floorplanDataUrl') or None,
            cameras=cameras,
            statuses=list(data.get('statuses') or DEFAULT_STATUSES),
            analysis_types=list(data.get('analysisTypes') or DEFAULT_ANALYSIS_TYPES),
        )


def unwrap_project(file_data) -> dict:
    """Return the bare project dictionary from file content.

    Raises:
        ProjectFormatError: If the envelope type or version is wrong.
    """
    if not isinstance(file_data, dict):
        raise ProjectFormatError(
            "The file format is invalid. Expected a JSON object with 'type', 'version', and 'data' fields."
        )
    if 'type' not in file_data:
        return file_data
    if file_data['type'] != PROJECT_FILE_TYPE:
        raise ProjectFormatError(f"Cannot load a project from a '{file_data['type']}' file")
    if 'version' not in file_data:
        raise ProjectFormatError("The file is missing the required 'version' field")
    if file_data['version'] != PROJECT_FILE_VERSION:
        raise ProjectFormatError(
            f"Unknown file version '{file_data['version']}'. "
            f"This application only supports version '{PROJECT_FILE_VERSION}'."
        )
    if 'data' not in file_data:
        raise ProjectFormatError("The file is missing the required 'data' field")
    return file_data['data']


def read_project_file(path: str) -> ProjectData:
    """Read a project file.

    Args:
        path: JSON file path.

    Returns:
        ProjectData instance.

    Raises:
        ProjectFormatError: If the file is not valid JSON or not a project.
        OSError: If the file cannot be read.
    """
    with open(path, 'r', encoding='utf-8') as f:
        try:
            file_data = json.load(f)
        except json.JSONDecodeError as e:
            raise ProjectFormatError(f"Invalid JSON: {e}") from e
    return ProjectData.from_dict(unwrap_project(file_data))


def write_project_file(path: str, project: ProjectData) -> None:
    """Write a project file in the save envelope.

    Raises:
        OSError: If the file cannot be written.
    """
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    save_data = {
        'type': PROJECT_FILE_TYPE,
        'version': PROJECT_FILE_VERSION,
        'data': project.to_dict(),
    }
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(save_data, f, indent=2, ensure_ascii=False)


def read_autosave(path: str) -> ProjectData | None:
    """Read the autosave file, returning None when missing or unreadable."""
    if not path or not os.path.exists(path):
        return None
    try:
        return read_project_file(path)
    except (OSError, ProjectFormatError) as e:
        logger.warning("Ignoring unreadable autosave %s: %s", path, e)
        return None
