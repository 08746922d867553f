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

"""Application settings loaded from a YAML file."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .constants import (
    AUTOSAVE_FILE_PATH,
    BACKGROUND_CLICK_DESELECT_AND_ADD,
    BACKGROUND_CLICK_DESELECT_ONLY,
    DEFAULT_ANALYSIS_TYPES,
    DEFAULT_STATUSES,
)

logger = logging.getLogger(__name__)

VALID_BACKGROUND_CLICK = [BACKGROUND_CLICK_DESELECT_AND_ADD, BACKGROUND_CLICK_DESELECT_ONLY]
VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR']


class SettingsError(ValueError):
    """Raised when the settings file cannot be used."""


def parse_vocabulary_text(text: str) -> list[str]:
    """Split vocabulary text into items.

    One item per line, surrounding whitespace stripped, blank lines dropped.
    Order and duplicates are kept.

    Args:
        text: Free text as typed by the user.

    Returns:
        List of vocabulary items.
    """
    return [line.strip() for line in text.splitlines() if line.strip()]


def format_vocabulary_text(items: list[str]) -> str:
    return "\n".join(items)


@dataclass
class SurveySettings:
    """Settings of the survey application.

    Attributes:
        api_base: Survey server root URL, empty to work offline.
        project_id: Remote project identifier.
        statuses: Default status vocabulary.
        analysis_types: Default analysis-type vocabulary.
        background_click: What a click on empty canvas does while a camera is selected.
        autosave_path: Local file mirroring the current project.
        log_level: Logging level name.
    """
    api_base: str = ""
    project_id: str = "default"
    statuses: list[str] = field(default_factory=lambda: list(DEFAULT_STATUSES))
    analysis_types: list[str] = field(default_factory=lambda: list(DEFAULT_ANALYSIS_TYPES))
    background_click: str = BACKGROUND_CLICK_DESELECT_AND_ADD
    autosave_path: str = AUTOSAVE_FILE_PATH
    log_level: str = "INFO"

    @property
    def is_offline(self) -> bool:
        return not self.api_base

    @staticmethod
    def from_dict(data: dict) -> 'SurveySettings':
        """Build settings from a parsed YAML mapping.

        Args:
            data: Mapping read from the settings file.

        Returns:
            SurveySettings instance, defaults filling missing keys.

        Raises:
            SettingsError: If a value has the wrong type or is not allowed.
        """
        defaults = SurveySettings()

        def text(key: str, default: str) -> str:
            value = data.get(key, default)
            if value is None:
                return default
            if not isinstance(value, (str, int)):
                raise SettingsError(f"Setting '{key}' must be a string")
            return str(value)

        def items(key: str, default: list[str]) -> list[str]:
            value = data.get(key)
            if not value:
                return list(default)
            if isinstance(value, str):
                return parse_vocabulary_text(value)
            if not isinstance(value, list):
                raise SettingsError(f"Setting '{key}' must be a list")
            return [str(v).strip() for v in value if str(v).strip()]

        settings = SurveySettings(
            api_base=text('api_base', defaults.api_base),
            project_id=text('project_id', defaults.project_id),
            statuses=items('statuses', defaults.statuses),
            analysis_types=items('analysis_types', defaults.analysis_types),
            background_click=text('background_click', defaults.background_click),
            autosave_path=text('autosave_path', defaults.autosave_path),
            log_level=text('log_level', defaults.log_level).upper(),
        )

        if settings.background_click not in VALID_BACKGROUND_CLICK:
            raise SettingsError(
                f"Setting 'background_click' must be one of {', '.join(VALID_BACKGROUND_CLICK)}"
            )
        if settings.log_level not in VALID_LOG_LEVELS:
            raise SettingsError(f"Setting 'log_level' must be one of {', '.join(VALID_LOG_LEVELS)}")

        return settings


def load_settings(path: str | Path | None) -> SurveySettings:
    """Load settings from a YAML file.

    Args:
        path: Settings file path. None or a missing file gives defaults.

    Returns:
        SurveySettings instance.

    Raises:
        SettingsError: If the file is not valid YAML or holds invalid values.
    """
    if path is None:
        return SurveySettings()

    path = Path(path)
    if not path.exists():
        logger.info("No settings file at %s, using defaults", path)
        return SurveySettings()

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise SettingsError(f"Invalid settings file {path}: {e}") from e

    if data is None:
        return SurveySettings()
    if not isinstance(data, dict):
        raise SettingsError(f"Settings file {path} must contain a mapping")

    return SurveySettings.from_dict(data)
