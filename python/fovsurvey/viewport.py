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

"""Viewport transform and boundary clamping.

This module contains the pure math mapping between screen pixels and
scene (floor-plan) coordinates, and the clamp that keeps the floor plan
within the visible container.
"""

from __future__ import annotations

from dataclasses import dataclass

from .constants import DEFAULT_CONTAINER_SIZE, MAX_SCALE, MIN_SCALE

Point = tuple[float, float]
Size = tuple[float, float]


def to_scene(screen_point: Point, scale: float, translation: Point) -> Point:
    """Convert a screen point to scene coordinates.

    Args:
        screen_point: (x, y) in screen pixels.
        scale: Current zoom factor.
        translation: Screen position of the scene origin.

    Returns:
        (x, y) in scene coordinates.
    """
    return (
        (screen_point[0] - translation[0]) / scale,
        (screen_point[1] - translation[1]) / scale,
    )


def to_screen(scene_point: Point, scale: float, translation: Point) -> Point:
    """Convert a scene point to screen coordinates.

    Args:
        scene_point: (x, y) in scene coordinates.
        scale: Current zoom factor.
        translation: Screen position of the scene origin.

    Returns:
        (x, y) in screen pixels.
    """
    return (
        scene_point[0] * scale + translation[0],
        scene_point[1] * scale + translation[1],
    )


def clamp_scale(scale: float) -> float:
    return max(MIN_SCALE, min(MAX_SCALE, scale))


def _clamp_axis(candidate: float, scaled_size: float, container_size: float) -> float:
    if scaled_size <= container_size:
        # Image smaller than the viewport on this axis: keep it centered
        return (container_size - scaled_size) / 2.0
    min_translation = container_size - scaled_size
    return max(min_translation, min(0.0, candidate))


def clamp_translation(
    translation: Point,
    scale: float,
    image_size: Size | None,
    container_size: Size,
) -> Point:
    """Return a translation keeping the floor plan within the container.

    Each axis is handled independently. When the scaled image fits in the
    container it is centered and the candidate value is ignored, otherwise
    the translation is limited to [container - scaled_size, 0].

    Args:
        translation: Candidate translation.
        scale: Zoom factor the translation will be used with.
        image_size: Natural (width, height) of the floor plan, or None.
        container_size: (width, height) of the drawing surface.

    Returns:
        Corrected translation. Unchanged when no image is loaded.
    """
    if image_size is None:
        return (float(translation[0]), float(translation[1]))

    return (
        _clamp_axis(translation[0], image_size[0] * scale, container_size[0]),
        _clamp_axis(translation[1], image_size[1] * scale, container_size[1]),
    )


def fit_scale(image_size: Size, container_size: Size) -> float:
    """Scale at which the whole floor plan fits in the container."""
    if image_size[0] <= 0 or image_size[1] <= 0:
        return 1.0
    return clamp_scale(min(container_size[0] / image_size[0], container_size[1] / image_size[1]))


@dataclass
class ViewportState:
    """Ephemeral pan/zoom state of the floor-plan canvas.

    Attributes:
        scale: Zoom factor, always within [MIN_SCALE, MAX_SCALE].
        translation: Screen position of the scene origin.
        container_size: Size of the drawing surface in pixels.
        image_size: Natural size of the loaded floor plan, None when no image.
    """
    scale: float = 1.0
    translation: Point = (0.0, 0.0)
    container_size: Size = DEFAULT_CONTAINER_SIZE
    image_size: Size | None = None

    def __post_init__(self) -> None:
        self.scale = clamp_scale(self.scale)

    def to_scene(self, screen_point: Point) -> Point:
        return to_scene(screen_point, self.scale, self.translation)

    def to_screen(self, scene_point: Point) -> Point:
        return to_screen(scene_point, self.scale, self.translation)

    def commit(self, scale: float, translation: Point) -> None:
        """Clamp and store a new scale/translation pair."""
        self.scale = clamp_scale(scale)
        self.translation = clamp_translation(translation, self.scale, self.image_size, self.container_size)

    def set_container_size(self, size: Size) -> None:
        self.container_size = (float(size[0]), float(size[1]))
        self.commit(self.scale, self.translation)

    def set_image_size(self, size: Size | None) -> None:
        """Set the floor plan size and fit it in the container.

        Args:
            size: Natural (width, height) of the image, or None to unload.
        """
        if size is None:
            self.image_size = None
            return
        self.image_size = (float(size[0]), float(size[1]))
        self.commit(fit_scale(self.image_size, self.container_size), self.translation)
