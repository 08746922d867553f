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

"""Floor plan canvas widget.

This module contains the FloorplanCanvas class which draws the floor plan
and the camera markers, and forwards mouse, wheel and touch input to the
interaction session.
"""

from __future__ import annotations

import base64
import binascii
import logging
import math
import os

from PySide6 import QtWidgets, QtCore, QtGui

from .camera import SurveyCamera
from .camera_repository import CameraRepository
from .camera_store import CameraStore
from .constants import BODY_RADIUS, CORNER_HANDLE_RADIUS
from .fov_handles import MarkerGeometry
from .session import InteractionSession

logger = logging.getLogger(__name__)

SELECTED_COLOR = QtGui.QColor(56, 189, 248)
NORMAL_COLOR = QtGui.QColor(34, 197, 94)
CORNER_COLOR = QtGui.QColor(245, 158, 11)
LABEL_COLOR = QtGui.QColor(229, 231, 235)
HINT_COLOR = QtGui.QColor(148, 163, 184)
BACKGROUND_COLOR = QtGui.QColor(15, 23, 42)

TOUCH_EVENT_TYPES = (
    QtCore.QEvent.Type.TouchBegin,
    QtCore.QEvent.Type.TouchUpdate,
    QtCore.QEvent.Type.TouchEnd,
)


def decode_data_url(url: str) -> QtGui.QImage:
    """Decode a base64 "data:image/...;base64," URL into an image.

    Returns a null image when the URL cannot be decoded.
    """
    header, _, encoded = url.partition(',')
    if not header.startswith('data:') or not header.endswith(';base64'):
        return QtGui.QImage()
    try:
        raw = base64.b64decode(encoded, validate=False)
    except (binascii.Error, ValueError):
        return QtGui.QImage()
    image = QtGui.QImage()
    image.loadFromData(raw)
    return image


class FloorplanCanvas(QtWidgets.QWidget):
    """Pannable, zoomable floor plan with editable camera markers."""

    def __init__(self, store: CameraStore, session: InteractionSession,
                 repository: CameraRepository | None = None,
                 parent: QtWidgets.QWidget | None = None) -> None:
        """Initialize the canvas.

        Args:
            store: Camera store providing the markers.
            session: Interaction session receiving the input.
            repository: Repository serving uploaded floor plans, None when offline.
            parent: Parent widget.
        """
        super().__init__(parent)
        self._store = store
        self._session = session
        self._repository = repository
        self._image: QtGui.QImage | None = None

        self.setMinimumSize(640, 480)
        self.setMouseTracking(True)
        self.setAttribute(QtCore.Qt.WidgetAttribute.WA_AcceptTouchEvents, True)
        self.setFocusPolicy(QtCore.Qt.FocusPolicy.StrongFocus)

        self._store.camera_added.connect(self._on_store_changed)
        self._store.camera_updated.connect(self._on_store_changed)
        self._store.camera_removed.connect(self._on_store_changed)
        self._store.selection_changed.connect(self._on_store_changed)
        self._store.project_reset.connect(self._on_store_changed)
        self._store.floorplan_changed.connect(self._on_floorplan_changed)

        if self._store.floorplan:
            self._on_floorplan_changed(self._store.floorplan)

    def has_image(self) -> bool:
        return self._image is not None

    @QtCore.Slot(object)
    def _on_floorplan_changed(self, location: str | None) -> None:
        """Load the floor plan image and fit it in the view.

        Args:
            location: Local image path, data URL or server URL, None to clear.
        """
        self._set_image(None)
        if not location:
            return

        if location.startswith('data:'):
            self._set_loaded_image(location, decode_data_url(location))
        elif os.path.isfile(location):
            self._set_loaded_image(location, QtGui.QImage(location))
        elif self._repository is not None:
            self._repository.fetch_bytes(
                location,
                lambda raw: self._on_floorplan_fetched(location, raw)
            )
        else:
            logger.warning("Floor plan %s is not a local file, not displayed", location)

    def _on_floorplan_fetched(self, location: str, raw: bytes) -> None:
        if location != self._store.floorplan:
            # Floor plan replaced while downloading
            return
        image = QtGui.QImage()
        image.loadFromData(raw)
        self._set_loaded_image(location, image)

    def _set_loaded_image(self, location: str, image: QtGui.QImage) -> None:
        if image.isNull():
            logger.warning("Could not read floor plan image %s", location[:80])
            return
        self._set_image(image)

    def _set_image(self, image: QtGui.QImage | None) -> None:
        self._image = image
        if image is not None:
            self._session.set_image_size((image.width(), image.height()))
        else:
            self._session.set_image_size(None)
        self.update()

    def _on_store_changed(self, *args) -> None:
        self.update()

    # -- painting --------------------------------------------------------------

    def paintEvent(self, event: QtGui.QPaintEvent) -> None:
        """Draw the floor plan and every camera marker."""
        painter = QtGui.QPainter(self)
        painter.setRenderHint(QtGui.QPainter.RenderHint.Antialiasing)
        painter.fillRect(self.rect(), BACKGROUND_COLOR)

        viewport = self._session.viewport
        if self._image is not None:
            painter.save()
            painter.translate(viewport.translation[0], viewport.translation[1])
            painter.scale(viewport.scale, viewport.scale)
            painter.drawImage(0, 0, self._image)
            painter.restore()
        else:
            painter.setPen(HINT_COLOR)
            font = painter.font()
            font.setPointSize(14)
            painter.setFont(font)
            painter.drawText(24, 36, "Load a floor plan from the File menu, then click to add cameras")

        selected_key = self._store.selected_key
        for camera, geometry in self._session.geometries():
            self._draw_marker(painter, camera, geometry, camera.key == selected_key)

        painter.end()

    def _draw_marker(self, painter: QtGui.QPainter, camera: SurveyCamera,
                     geometry: MarkerGeometry, selected: bool) -> None:
        color = SELECTED_COLOR if selected else NORMAL_COLOR
        fill = QtGui.QColor(color)
        fill.setAlphaF(0.15)

        # Wedge
        polygon = QtGui.QPolygonF([QtCore.QPointF(x, y) for x, y in geometry.wedge_polygon()])
        painter.setPen(QtGui.QPen(color, 1))
        painter.setBrush(fill)
        painter.drawPolygon(polygon)

        # Direction arrow
        origin = QtCore.QPointF(*geometry.origin)
        tip = QtCore.QPointF(*geometry.arrow_tip)
        painter.setPen(QtGui.QPen(color, 2 * geometry.scale))
        painter.drawLine(origin, tip)
        self._draw_arrow_head(painter, geometry, color)

        # Body
        painter.setPen(QtCore.Qt.PenStyle.NoPen)
        painter.setBrush(color)
        painter.drawEllipse(origin, BODY_RADIUS * geometry.scale, BODY_RADIUS * geometry.scale)

        # Label
        painter.setPen(LABEL_COLOR)
        font = painter.font()
        font.setPixelSize(max(1, int(round(14 * geometry.scale))))
        painter.setFont(font)
        painter.drawText(QtCore.QPointF(origin.x() + 12 * geometry.scale,
                                        origin.y() + 6 * geometry.scale), camera.name)

        # Angle and radius handle
        painter.setPen(QtCore.Qt.PenStyle.NoPen)
        painter.setBrush(CORNER_COLOR)
        radius = CORNER_HANDLE_RADIUS * geometry.scale
        painter.drawEllipse(QtCore.QPointF(*geometry.corner), radius, radius)

    def _draw_arrow_head(self, painter: QtGui.QPainter, geometry: MarkerGeometry,
                         color: QtGui.QColor) -> None:
        dx = geometry.arrow_tip[0] - geometry.origin[0]
        dy = geometry.arrow_tip[1] - geometry.origin[1]
        length = math.hypot(dx, dy)
        if length == 0:
            return
        ux, uy = dx / length, dy / length
        head = 8 * geometry.scale
        base_x = geometry.arrow_tip[0] - ux * head
        base_y = geometry.arrow_tip[1] - uy * head
        half = head / 2
        points = [
            QtCore.QPointF(*geometry.arrow_tip),
            QtCore.QPointF(base_x - uy * half, base_y + ux * half),
            QtCore.QPointF(base_x + uy * half, base_y - ux * half),
        ]
        painter.setPen(QtCore.Qt.PenStyle.NoPen)
        painter.setBrush(color)
        painter.drawPolygon(QtGui.QPolygonF(points))

    # -- input -----------------------------------------------------------------

    def resizeEvent(self, event: QtGui.QResizeEvent) -> None:
        self._session.set_container_size((self.width(), self.height()))
        super().resizeEvent(event)

    def mousePressEvent(self, event: QtGui.QMouseEvent) -> None:
        if event.button() == QtCore.Qt.MouseButton.LeftButton:
            pos = event.position()
            self._session.press((pos.x(), pos.y()))
            self.update()
            event.accept()
            return
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QtGui.QMouseEvent) -> None:
        if event.buttons() & QtCore.Qt.MouseButton.LeftButton:
            pos = event.position()
            self._session.move((pos.x(), pos.y()))
            self.update()
            event.accept()
            return
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event: QtGui.QMouseEvent) -> None:
        if event.button() == QtCore.Qt.MouseButton.LeftButton:
            pos = event.position()
            self._session.release((pos.x(), pos.y()))
            self.update()
            event.accept()
            return
        super().mouseReleaseEvent(event)

    def leaveEvent(self, event: QtCore.QEvent) -> None:
        self._session.cancel()
        super().leaveEvent(event)

    def wheelEvent(self, event: QtGui.QWheelEvent) -> None:
        """Zoom one step around the pointer."""
        pos = event.position()
        if self._session.wheel((pos.x(), pos.y()), event.angleDelta().y()):
            self.update()
        event.accept()

    def event(self, event: QtCore.QEvent) -> bool:
        """Route touch events to the session."""
        if event.type() in TOUCH_EVENT_TYPES:
            points = [
                (point.position().x(), point.position().y())
                for point in event.points()
                if point.state() != QtGui.QEventPoint.State.Released
            ]
            self._session.touch(points)
            self.update()
            event.accept()
            return True
        if event.type() == QtCore.QEvent.Type.TouchCancel:
            self._session.cancel_touch()
            self.update()
            event.accept()
            return True
        return super().event(event)
