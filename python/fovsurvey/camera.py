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

"""Survey camera record and attribute clamping helpers."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field

from .constants import (
    DEFAULT_CAMERA_NAME,
    DEFAULT_FOV_ANGLE_DEG,
    DEFAULT_FOV_RADIUS,
    DEFAULT_ROTATION_DEG,
    MAX_FOV_ANGLE_DEG,
    MAX_FOV_RADIUS,
    MIN_FOV_ANGLE_DEG,
    MIN_FOV_RADIUS,
)

# Patch field name -> serialized (API) field name
PATCH_FIELDS = {
    'name': 'name',
    'x': 'x',
    'y': 'y',
    'rotation_deg': 'rotationDeg',
    'fov_angle_deg': 'fovAngleDeg',
    'fov_radius': 'fovRadius',
    'status': 'status',
    'analyses': 'analyses',
}


def normalize_rotation(angle_deg: float) -> float:
    """Normalize an angle in degrees to [0, 360)."""
    angle = float(angle_deg) % 360.0
    # -1e-17 % 360 rounds to 360.0
    if angle >= 360.0:
        angle = 0.0
    return angle


def clamp_fov_angle(angle_deg: float) -> float:
    return max(MIN_FOV_ANGLE_DEG, min(MAX_FOV_ANGLE_DEG, float(angle_deg)))


def clamp_fov_radius(radius: float) -> float:
    return max(MIN_FOV_RADIUS, min(MAX_FOV_RADIUS, float(radius)))


def unique_analyses(analyses) -> list[str]:
    """Drop duplicate analysis labels, keeping first occurrences in order."""
    result = []
    for label in analyses:
        if label not in result:
            result.append(label)
    return result


def sanitize_patch(patch: dict) -> dict:
    """Clamp and normalize every field of an attribute patch.

    Args:
        patch: Mapping of patch field names (see PATCH_FIELDS) to values.

    Returns:
        New patch dictionary whose values satisfy the camera invariants.

    Raises:
        ValueError: If the patch contains an unknown field.
    """
    unknown = set(patch) - set(PATCH_FIELDS)
    if unknown:
        raise ValueError(f"Unknown camera field(s): {', '.join(sorted(unknown))}")

    clean = {}
    for name, value in patch.items():
        if name == 'rotation_deg':
            clean[name] = normalize_rotation(value)
        elif name == 'fov_angle_deg':
            clean[name] = clamp_fov_angle(value)
        elif name == 'fov_radius':
            clean[name] = clamp_fov_radius(value)
        elif name in ('x', 'y'):
            clean[name] = float(value)
        elif name == 'status':
            clean[name] = value if value else None
        elif name == 'analyses':
            clean[name] = unique_analyses(value)
        else:
            clean[name] = str(value)
    return clean


def patch_to_payload(patch: dict) -> dict:
    """Convert a sanitized patch to its serialized (camelCase) form."""
    payload = {}
    for name, value in patch.items():
        payload[PATCH_FIELDS[name]] = list(value) if name == 'analyses' else value
    return payload


def new_camera_key() -> str:
    return uuid.uuid4().hex


@dataclass(eq=False)
class SurveyCamera:
    """A surveyed camera placed on the floor plan.

    Attributes:
        key: Stable local identifier used by selection and lists.
        x: Scene-space X position.
        y: Scene-space Y position.
        name: Free-text label.
        rotation_deg: Facing direction in [0, 360).
        fov_angle_deg: Full cone angle in [10, 180].
        fov_radius: Coverage distance in [40, 1000] scene units.
        status: Status label or None.
        analyses: Selected analysis labels, unique, in selection order.
        remote_id: Identifier assigned by the repository, None until known.
    """
    key: str
    x: float
    y: float
    name: str = DEFAULT_CAMERA_NAME
    rotation_deg: float = DEFAULT_ROTATION_DEG
    fov_angle_deg: float = DEFAULT_FOV_ANGLE_DEG
    fov_radius: float = DEFAULT_FOV_RADIUS
    status: str | None = None
    analyses: list[str] = field(default_factory=list)
    remote_id: str | None = None

    def __post_init__(self) -> None:
        """Enforce attribute ranges on construction."""
        self.apply(sanitize_patch(self.attributes()))

    @property
    def id(self) -> str:
        """Identifier visible outside the application."""
        return self.remote_id if self.remote_id is not None else self.key

    def attributes(self) -> dict:
        """Return the editable attributes as a patch-shaped dictionary."""
        return {
            'name': self.name,
            'x': self.x,
            'y': self.y,
            'rotation_deg': self.rotation_deg,
            'fov_angle_deg': self.fov_angle_deg,
            'fov_radius': self.fov_radius,
            'status': self.status,
            'analyses': list(self.analyses),
        }

    def same_attributes(self, other: SurveyCamera) -> bool:
        """Compare editable attributes, ignoring analyses order."""
        mine = self.attributes()
        theirs = other.attributes()
        mine['analyses'] = set(mine['analyses'])
        theirs['analyses'] = set(theirs['analyses'])
        return mine == theirs

    def apply(self, patch: dict) -> None:
        """Merge an already sanitized patch into this camera."""
        for name, value in patch.items():
            setattr(self, name, list(value) if name == 'analyses' else value)

    def to_dict(self) -> dict:
        """Serialize camera to dictionary.

        Returns:
            Dictionary using the project file / API field names.
        """
        data = {'id': self.id}
        data.update(patch_to_payload(self.attributes()))
        return data

    @staticmethod
    def from_dict(data: dict, key: str | None = None) -> 'SurveyCamera':
        """Deserialize camera from dictionary.

        Args:
            data: Dictionary using the project file / API field names.
            key: Local key to use (a new one is generated when omitted).

        Returns:
            SurveyCamera instance with remote_id taken from 'id'.

        Raises:
            ValueError: If position fields are missing.
        """
        if 'x' not in data or 'y' not in data:
            raise ValueError("Camera entry is missing its position")

        remote_id = data.get('id')
        return SurveyCamera(
            key=key or new_camera_key(),
            x=data['x'],
            y=data['y'],
            name=data.get('name', DEFAULT_CAMERA_NAME),
            rotation_deg=data.get('rotationDeg', DEFAULT_ROTATION_DEG),
            fov_angle_deg=data.get('fovAngleDeg', DEFAULT_FOV_ANGLE_DEG),
            fov_radius=data.get('fovRadius', DEFAULT_FOV_RADIUS),
            status=data.get('status'),
            analyses=list(data.get('analyses') or []),
            remote_id=str(remote_id) if remote_id is not None else None,
        )
