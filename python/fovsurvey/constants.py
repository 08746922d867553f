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

"""Shared constants for the FOV survey application."""

import os

# Viewport
MIN_SCALE = 0.2
MAX_SCALE = 5.0
WHEEL_ZOOM_STEP = 0.1
PINCH_MIN_DISTANCE = 1e-6
CLICK_SLOP_PX = 3.0
DEFAULT_CONTAINER_SIZE = (800, 600)

# Field of view limits
MIN_FOV_ANGLE_DEG = 10.0
MAX_FOV_ANGLE_DEG = 180.0
MIN_FOV_RADIUS = 40.0
MAX_FOV_RADIUS = 1000.0

# New camera defaults
DEFAULT_CAMERA_NAME = "Camera"
DEFAULT_ROTATION_DEG = 0.0
DEFAULT_FOV_ANGLE_DEG = 70.0
DEFAULT_FOV_RADIUS = 220.0

DEFAULT_STATUSES = ["Clear", "Blurry", "Damaged", "Obstructed"]
DEFAULT_ANALYSIS_TYPES = ["Phone use", "Smoking", "Rodents", "No mask"]

# Marker drawing, in scene units
BODY_RADIUS = 10.0
CORNER_HANDLE_RADIUS = 6.0
ARROW_LENGTH_RATIO = 0.8
ARROW_HIT_TOLERANCE = 6.0
WEDGE_SEGMENTS = 48

# Background click policies
BACKGROUND_CLICK_DESELECT_AND_ADD = "deselect_and_add"
BACKGROUND_CLICK_DESELECT_ONLY = "deselect_only"

# Paths
USER_DIR_PATH = os.path.join(os.path.expanduser("~"), ".fovsurvey")
SETTINGS_FILE_PATH = os.path.join(USER_DIR_PATH, "settings.yaml")
AUTOSAVE_FILE_PATH = os.path.join(USER_DIR_PATH, "autosave.json")
SAVED_PROJECTS_DIR_PATH = os.path.join(USER_DIR_PATH, "projects")

# Delay grouping rapid edits into a single autosave write
AUTOSAVE_DELAY_MS = 500

PROJECT_FILE_TYPE = "survey_project"
PROJECT_FILE_VERSION = "1.0"
