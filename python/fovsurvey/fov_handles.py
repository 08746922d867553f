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

"""Field-of-view handles of a camera marker.

A marker exposes four affordances: the body dot (move), the direction
arrow (rotate), the corner handle on the trailing wedge edge (cone angle
and radius) and the wedge area itself (facing and radius). Handle positions
are always derived from the committed camera attributes, and every drag is
converted into a clamped attribute patch.

All handle math works in the marker's local frame: the scene point minus
the camera position, translated but never rotated.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass

import numpy as np

from .camera import SurveyCamera, clamp_fov_angle, clamp_fov_radius, normalize_rotation
from .constants import (
    ARROW_HIT_TOLERANCE,
    ARROW_LENGTH_RATIO,
    BODY_RADIUS,
    CORNER_HANDLE_RADIUS,
    WEDGE_SEGMENTS,
)
from .viewport import Point, ViewportState


class Handle(enum.Enum):
    """Draggable parts of a camera marker."""
    BODY = "body"
    ARROW = "arrow"
    CORNER = "corner"
    WEDGE = "wedge"


def polar(angle_deg: float, distance: float) -> Point:
    rad = math.radians(angle_deg)
    return (math.cos(rad) * distance, math.sin(rad) * distance)


def local_angle(local: Point) -> float:
    return math.degrees(math.atan2(local[1], local[0]))


def to_local(camera: SurveyCamera, scene_point: Point) -> Point:
    return (scene_point[0] - camera.x, scene_point[1] - camera.y)


def wedge_start_angle(camera: SurveyCamera) -> float:
    """Angle of the wedge's leading edge in degrees."""
    return camera.rotation_deg - camera.fov_angle_deg / 2.0


def arrow_tip(camera: SurveyCamera) -> Point:
    """Local position of the direction arrow tip."""
    return polar(camera.rotation_deg, camera.fov_radius * ARROW_LENGTH_RATIO)


def corner_point(camera: SurveyCamera) -> Point:
    """Local position of the angle/radius handle on the trailing edge."""
    return polar(wedge_start_angle(camera) + camera.fov_angle_deg, camera.fov_radius)


def handle_local_position(camera: SurveyCamera, handle: Handle) -> Point:
    if handle == Handle.ARROW:
        return arrow_tip(camera)
    if handle == Handle.CORNER:
        return corner_point(camera)
    return (0.0, 0.0)


# -- patches -----------------------------------------------------------------

def body_patch(start_position: Point, offset: Point) -> dict:
    """Reposition: drag offset added to the position at drag start."""
    return {'x': start_position[0] + offset[0], 'y': start_position[1] + offset[1]}


def arrow_patch(local: Point) -> dict:
    """Facing from the local arrow tip position."""
    return {'rotation_deg': normalize_rotation(local_angle(local))}


def wedge_patch(local: Point) -> dict:
    """Facing and radius from the local pointer position."""
    return {
        'rotation_deg': normalize_rotation(local_angle(local)),
        'fov_radius': clamp_fov_radius(math.hypot(local[0], local[1])),
    }


def corner_patch(camera: SurveyCamera, local: Point) -> dict:
    """Cone angle and radius from the local corner handle position.

    The cone angle is the pointer angle measured from the wedge's leading
    edge, wrapped to [0, 360) before clamping.
    """
    angle = (local_angle(local) - wedge_start_angle(camera) + 360.0) % 360.0
    return {
        'fov_angle_deg': clamp_fov_angle(angle),
        'fov_radius': clamp_fov_radius(math.hypot(local[0], local[1])),
    }


# -- hit testing -------------------------------------------------------------

def _distance_to_segment(p: Point, a: Point, b: Point) -> float:
    abx, aby = b[0] - a[0], b[1] - a[1]
    length_sq = abx * abx + aby * aby
    if length_sq == 0:
        return math.hypot(p[0] - a[0], p[1] - a[1])
    t = max(0.0, min(1.0, ((p[0] - a[0]) * abx + (p[1] - a[1]) * aby) / length_sq))
    return math.hypot(p[0] - (a[0] + t * abx), p[1] - (a[1] + t * aby))


def point_in_wedge(camera: SurveyCamera, local: Point) -> bool:
    if math.hypot(local[0], local[1]) > camera.fov_radius:
        return False
    offset = (local_angle(local) - wedge_start_angle(camera)) % 360.0
    return offset <= camera.fov_angle_deg


def hit_test(camera: SurveyCamera, scene_point: Point) -> Handle | None:
    """Find the handle of a marker under a scene point.

    Handles are tested top-most first: corner, body, arrow, wedge.

    Args:
        camera: Camera whose marker is tested.
        scene_point: Point in scene coordinates.

    Returns:
        The handle hit, or None.
    """
    local = to_local(camera, scene_point)
    corner = corner_point(camera)
    if math.hypot(local[0] - corner[0], local[1] - corner[1]) <= CORNER_HANDLE_RADIUS:
        return Handle.CORNER
    if math.hypot(local[0], local[1]) <= BODY_RADIUS:
        return Handle.BODY
    if _distance_to_segment(local, (0.0, 0.0), arrow_tip(camera)) <= ARROW_HIT_TOLERANCE:
        return Handle.ARROW
    if point_in_wedge(camera, local):
        return Handle.WEDGE
    return None


class HandleDrag:
    """An in-progress drag of one marker handle.

    Captures the pointer and handle positions at press time so every move
    is computed from the same reference, whatever the drag rate.
    """

    def __init__(self, camera: SurveyCamera, handle: Handle, press_scene: Point) -> None:
        """Initialize the drag.

        Args:
            camera: Camera being dragged, in its state at press time.
            handle: Handle that was pressed.
            press_scene: Pointer position at press time, in scene coordinates.
        """
        self.key = camera.key
        self.handle = handle
        self.press_scene = press_scene
        self.start_position = (camera.x, camera.y)
        self.start_handle = handle_local_position(camera, handle)
        self.moved = False

    def move(self, camera: SurveyCamera, scene_point: Point) -> dict:
        """Compute the attribute patch for the current pointer position.

        Args:
            camera: Camera in its current committed state.
            scene_point: Pointer position in scene coordinates.

        Returns:
            Clamped attribute patch.
        """
        self.moved = True
        offset = (scene_point[0] - self.press_scene[0], scene_point[1] - self.press_scene[1])

        if self.handle == Handle.BODY:
            return body_patch(self.start_position, offset)

        if self.handle == Handle.WEDGE:
            return wedge_patch(to_local(camera, scene_point))

        # Arrow and corner follow the grabbed point, not the raw pointer
        local = (self.start_handle[0] + offset[0], self.start_handle[1] + offset[1])
        if self.handle == Handle.ARROW:
            return arrow_patch(local)
        return corner_patch(camera, local)


# -- rendering ---------------------------------------------------------------

@dataclass
class MarkerGeometry:
    """Screen-space geometry of a camera marker for one frame.

    Attributes:
        origin: Camera position.
        start_angle_deg: Leading edge angle of the wedge.
        sweep_deg: Wedge angle.
        radius: Wedge radius in pixels.
        body: Body dot center (same as origin).
        arrow_tip: Direction arrow tip.
        corner: Angle/radius handle center.
        scale: Scene to screen factor used for handle sizes.
    """
    origin: Point
    start_angle_deg: float
    sweep_deg: float
    radius: float
    body: Point
    arrow_tip: Point
    corner: Point
    scale: float

    def wedge_polygon(self, segments: int = WEDGE_SEGMENTS) -> np.ndarray:
        """Return the wedge outline as an (N, 2) array of screen points."""
        angles = np.radians(np.linspace(self.start_angle_deg,
                                        self.start_angle_deg + self.sweep_deg,
                                        segments + 1))
        arc = np.column_stack((
            self.origin[0] + np.cos(angles) * self.radius,
            self.origin[1] + np.sin(angles) * self.radius,
        ))
        return np.vstack((np.array([self.origin], dtype=float), arc))


def marker_geometry(camera: SurveyCamera, viewport: ViewportState) -> MarkerGeometry:
    """Compute the screen geometry of a marker from committed attributes."""
    def screen(local: Point) -> Point:
        return viewport.to_screen((camera.x + local[0], camera.y + local[1]))

    origin = viewport.to_screen((camera.x, camera.y))
    return MarkerGeometry(
        origin=origin,
        start_angle_deg=wedge_start_angle(camera),
        sweep_deg=camera.fov_angle_deg,
        radius=camera.fov_radius * viewport.scale,
        body=origin,
        arrow_tip=screen(arrow_tip(camera)),
        corner=screen(corner_point(camera)),
        scale=viewport.scale,
    )
