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

"""Interaction session routing pointer input to viewport and markers.

The session owns the viewport state and the in-progress drag, and reads
and writes selection through the camera store. It is toolkit independent:
the canvas widget converts Qt events into the plain screen points used here.
"""

from __future__ import annotations

import logging
import math

from .camera import SurveyCamera
from .camera_store import CameraStore
from .constants import (
    BACKGROUND_CLICK_DESELECT_AND_ADD,
    BACKGROUND_CLICK_DESELECT_ONLY,
    CLICK_SLOP_PX,
)
from .fov_handles import Handle, HandleDrag, MarkerGeometry, hit_test, marker_geometry
from .gestures import GestureController
from .viewport import Point, ViewportState

logger = logging.getLogger(__name__)


class InteractionSession:
    """Interaction state of one floor-plan canvas.

    Attributes:
        store: Camera store receiving selection changes and patches.
        viewport: Pan/zoom state.
        gestures: Gesture controller updating the viewport.
        background_click: Policy for a click on empty canvas while a camera is selected.
    """

    def __init__(
        self,
        store: CameraStore,
        viewport: ViewportState | None = None,
        background_click: str = BACKGROUND_CLICK_DESELECT_AND_ADD,
    ) -> None:
        """Initialize the interaction session.

        Args:
            store: Camera store.
            viewport: Initial viewport state (a default one is created if None).
            background_click: 'deselect_and_add' or 'deselect_only'.
        """
        self.store = store
        self.viewport = viewport if viewport is not None else ViewportState()
        self.gestures = GestureController(self.viewport)
        self.background_click = background_click

        self._drag: HandleDrag | None = None
        self._press_screen: Point | None = None
        self._background_press = False
        self._panned = False

        self._touch_count = 0
        self._last_touch: Point | None = None
        self._touch_suppressed = False

    @property
    def active_drag(self) -> HandleDrag | None:
        return self._drag

    # -- queries -----------------------------------------------------------------

    def marker_at(self, screen_point: Point) -> tuple[SurveyCamera, Handle] | None:
        """Find the top-most marker handle under a screen point."""
        scene_point = self.viewport.to_scene(screen_point)
        for camera in reversed(self.store.get_all_cameras()):
            handle = hit_test(camera, scene_point)
            if handle is not None:
                return camera, handle
        return None

    def geometries(self) -> list[tuple[SurveyCamera, MarkerGeometry]]:
        """Screen geometry of every marker, in drawing order."""
        return [(camera, marker_geometry(camera, self.viewport)) for camera in self.store.get_all_cameras()]

    # -- pointer -------------------------------------------------------------------

    def press(self, screen_point: Point) -> None:
        """Start a marker drag or a background press.

        Pressing a marker selects it and never turns into a background click.
        """
        if self.gestures.is_pinching:
            return

        self.cancel()
        self._press_screen = screen_point
        hit = self.marker_at(screen_point)
        if hit is not None:
            camera, handle = hit
            self.store.select(camera.key)
            self._drag = HandleDrag(camera, handle, self.viewport.to_scene(screen_point))
            logger.debug("Dragging %s of camera %s", handle.value, camera.key)
            return

        self._background_press = True
        self.gestures.begin_pan(screen_point)

    def move(self, screen_point: Point) -> None:
        """Continue the current drag or pan."""
        if self._drag is not None:
            if not self.store.has_camera(self._drag.key):
                self._drag = None
                return
            camera = self.store.get_camera(self._drag.key)
            patch = self._drag.move(camera, self.viewport.to_scene(screen_point))
            self.store.patch(camera.key, patch)
            return

        if self._background_press:
            self.gestures.pan_to(screen_point)
            start = self._press_screen
            if math.hypot(screen_point[0] - start[0], screen_point[1] - start[1]) > CLICK_SLOP_PX:
                self._panned = True

    def release(self, screen_point: Point) -> str | None:
        """Finish the current interaction.

        Args:
            screen_point: Pointer position at release.

        Returns:
            Key of the camera created by a background click, or None.
        """
        created = None
        if self._background_press and not self._panned:
            created = self.click_background(screen_point)
        self.cancel()
        return created

    def cancel(self) -> None:
        """Drop any drag or pan without producing a click."""
        self._drag = None
        self._press_screen = None
        self._background_press = False
        self._panned = False
        self.gestures.end_pan()

    def click_background(self, screen_point: Point) -> str | None:
        """Handle a click on empty canvas.

        Deselects the current camera, then adds a camera at the clicked scene
        point unless the 'deselect_only' policy applies.

        Returns:
            Key of the created camera, or None.
        """
        had_selection = self.store.selected_key is not None
        self.store.select(None)
        if had_selection and self.background_click == BACKGROUND_CLICK_DESELECT_ONLY:
            return None
        x, y = self.viewport.to_scene(screen_point)
        return self.store.add_camera_at(x, y)

    # -- wheel and touch -----------------------------------------------------------

    def wheel(self, screen_point: Point, delta: float) -> bool:
        return self.gestures.wheel(screen_point, delta)

    def touch(self, points: list[Point]) -> None:
        """Handle the full set of active touch points after a touch event.

        One finger behaves like a mouse pointer. Going to two fingers cancels
        the single-finger interaction and starts a pinch; the remaining finger
        of a pinch is ignored until every finger is lifted.

        Args:
            points: Screen positions of all active touches.
        """
        previous = self._touch_count
        self._touch_count = len(points)
        self.gestures.touches_changed(points)

        if len(points) >= 2:
            if previous < 2:
                self.cancel()
                self._touch_suppressed = True
            else:
                self.gestures.pinch_move(points)
            return

        if len(points) == 1:
            self._last_touch = points[0]
            if self._touch_suppressed:
                return
            if previous == 0:
                self.press(points[0])
            else:
                self.move(points[0])
            return

        if self._touch_suppressed:
            self._touch_suppressed = False
        elif previous == 1 and self._last_touch is not None:
            self.release(self._last_touch)
        self._last_touch = None

    def cancel_touch(self) -> None:
        """Abort the touch sequence, e.g. when the system takes it over."""
        self._touch_count = 0
        self._last_touch = None
        self._touch_suppressed = False
        self.gestures.touches_changed([])
        self.cancel()

    # -- container -----------------------------------------------------------------

    def set_container_size(self, size: tuple[float, float]) -> None:
        self.viewport.set_container_size(size)

    def set_image_size(self, size: tuple[float, float] | None) -> None:
        self.viewport.set_image_size(size)
