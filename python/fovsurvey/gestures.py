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

"""Gesture controller for viewport zoom and pan.

Wheel zoom, two-finger pinch and single pointer drag all end up as a new
(scale, translation) pair committed to a ViewportState, which clamps it.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from .constants import PINCH_MIN_DISTANCE, WHEEL_ZOOM_STEP
from .viewport import Point, ViewportState, clamp_scale

logger = logging.getLogger(__name__)


def anchored_translation(anchor_scene: Point, screen_point: Point, scale: float) -> Point:
    """Translation placing a scene point under a screen point at a given scale."""
    return (
        screen_point[0] - anchor_scene[0] * scale,
        screen_point[1] - anchor_scene[1] * scale,
    )


def touch_distance(p1: Point, p2: Point) -> float:
    return math.hypot(p1[0] - p2[0], p1[1] - p2[1])


def touch_centroid(p1: Point, p2: Point) -> Point:
    return ((p1[0] + p2[0]) / 2.0, (p1[1] + p2[1]) / 2.0)


@dataclass
class PinchAnchor:
    """Latest two-finger distance and centroid, in screen pixels."""
    distance: float
    centroid: Point


class GestureController:
    """Turns wheel, pinch and drag input into viewport updates.

    The controller owns the transient gesture state (pinch anchor, drag
    start) while the ViewportState it updates is owned by the caller.
    """

    def __init__(self, viewport: ViewportState) -> None:
        """Initialize the gesture controller.

        Args:
            viewport: Viewport state updated by every gesture.
        """
        self.viewport = viewport
        self._pinch: PinchAnchor | None = None
        self._pan_start: tuple[Point, Point] | None = None  # (pointer, translation)

    @property
    def is_pinching(self) -> bool:
        return self._pinch is not None

    @property
    def is_panning(self) -> bool:
        return self._pan_start is not None

    def wheel(self, pointer: Point, delta: float) -> bool:
        """Zoom one step around the pointer.

        Args:
            pointer: Pointer position in screen pixels.
            delta: Vertical wheel delta, positive for zoom-in intent.

        Returns:
            True if the viewport was updated.
        """
        if delta == 0:
            return False

        direction = 1 if delta > 0 else -1
        scene_point = self.viewport.to_scene(pointer)
        new_scale = clamp_scale(self.viewport.scale * (1 + direction * WHEEL_ZOOM_STEP))
        self.viewport.commit(new_scale, anchored_translation(scene_point, pointer, new_scale))
        logger.debug("Wheel zoom to %.3f at %s", self.viewport.scale, pointer)
        return True

    def touches_changed(self, points: list[Point]) -> None:
        """Track the number of active touches.

        Starts a pinch on the transition to exactly two touches and clears it
        as soon as any other number of touches is active.

        Args:
            points: Positions of all active touches in screen pixels.
        """
        if len(points) != 2:
            if self._pinch is not None:
                logger.debug("Pinch ended")
            self._pinch = None
            return

        if self._pinch is None:
            self._pinch = PinchAnchor(touch_distance(*points), touch_centroid(*points))
            # A pinch supersedes any single pointer pan
            self._pan_start = None
            logger.debug("Pinch started at %s", self._pinch.centroid)

    def pinch_move(self, points: list[Point]) -> bool:
        """Apply a pinch update.

        The scene point under the previous centroid is placed under the new
        centroid at the new scale, which zooms and pans at once. The anchor
        is then replaced by the latest distance and centroid.

        Args:
            points: Positions of all active touches in screen pixels.

        Returns:
            True if the viewport was updated.
        """
        if len(points) != 2 or self._pinch is None:
            return False

        distance = touch_distance(*points)
        centroid = touch_centroid(*points)

        if self._pinch.distance < PINCH_MIN_DISTANCE:
            ratio = 1.0
        else:
            ratio = distance / self._pinch.distance

        scene_point = self.viewport.to_scene(self._pinch.centroid)
        new_scale = clamp_scale(self.viewport.scale * ratio)
        self.viewport.commit(new_scale, anchored_translation(scene_point, centroid, new_scale))

        self._pinch = PinchAnchor(distance, centroid)
        return True

    def begin_pan(self, pointer: Point) -> None:
        self._pan_start = (pointer, self.viewport.translation)

    def pan_to(self, pointer: Point) -> bool:
        """Move the scene with the pointer since begin_pan().

        Args:
            pointer: Current pointer position in screen pixels.

        Returns:
            True if the viewport was updated.
        """
        if self._pan_start is None:
            return False
        start_pointer, start_translation = self._pan_start
        self.viewport.commit(self.viewport.scale, (
            start_translation[0] + pointer[0] - start_pointer[0],
            start_translation[1] + pointer[1] - start_pointer[1],
        ))
        return True

    def end_pan(self) -> None:
        self._pan_start = None
