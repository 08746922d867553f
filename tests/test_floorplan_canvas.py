"""Tests for floor plan loading in the canvas."""

import base64

import pytest
from PySide6 import QtCore, QtGui

from fovsurvey.camera_repository import CameraRepository
from fovsurvey.camera_store import CameraStore
from fovsurvey.floorplan_canvas import FloorplanCanvas, decode_data_url
from fovsurvey.session import InteractionSession


def png_bytes(width=40, height=30):
    image = QtGui.QImage(width, height, QtGui.QImage.Format.Format_RGB32)
    image.fill(QtGui.QColor(200, 200, 200))
    buffer = QtCore.QBuffer()
    buffer.open(QtCore.QIODevice.OpenModeFlag.WriteOnly)
    image.save(buffer, "PNG")
    return bytes(buffer.data().data())


def png_data_url(width=40, height=30):
    return "data:image/png;base64," + base64.b64encode(png_bytes(width, height)).decode('ascii')


class ServingRepository(CameraRepository):
    """Repository answering byte downloads on demand."""

    def __init__(self):
        super().__init__()
        self.downloads = []

    def fetch_bytes(self, url, on_loaded):
        self.downloads.append((url, on_loaded))

    def update_project(self, project_id, floorplan_url):
        pass


@pytest.fixture
def store():
    return CameraStore()


@pytest.fixture
def session(store):
    return InteractionSession(store)


def test_decode_data_url():
    image = decode_data_url(png_data_url(40, 30))
    assert (image.width(), image.height()) == (40, 30)


@pytest.mark.parametrize("url", [
    "data:image/png;base64,!!!not base64",
    "data:image/png,plain",
    "data:image/png;base64," + base64.b64encode(b"not an image").decode('ascii'),
])
def test_decode_bad_data_url(url):
    assert decode_data_url(url).isNull()


def test_data_url_floorplan_is_shown(store, session):
    canvas = FloorplanCanvas(store, session)
    store.set_floorplan(png_data_url(40, 30))
    assert canvas.has_image()
    assert session.viewport.image_size == (40, 30)


def test_imported_data_url_is_shown_on_creation(store, session):
    store.set_floorplan(png_data_url())
    canvas = FloorplanCanvas(store, session)
    assert canvas.has_image()


def test_local_file_floorplan_is_shown(store, session, tmp_path):
    path = tmp_path / "plan.png"
    path.write_bytes(png_bytes(64, 48))
    canvas = FloorplanCanvas(store, session)

    store.set_floorplan(str(path))

    assert canvas.has_image()
    assert session.viewport.image_size == (64, 48)


def test_server_floorplan_is_downloaded():
    repository = ServingRepository()
    store = CameraStore(repository=repository)
    canvas = FloorplanCanvas(store, InteractionSession(store), repository)

    store.set_floorplan("/uploads/plan.png")

    assert not canvas.has_image()
    url, on_loaded = repository.downloads[0]
    assert url == "/uploads/plan.png"

    on_loaded(png_bytes(20, 10))
    assert canvas.has_image()


def test_stale_download_is_ignored():
    repository = ServingRepository()
    store = CameraStore(repository=repository)
    canvas = FloorplanCanvas(store, InteractionSession(store), repository)

    store.set_floorplan("https://example.com/old.png")
    store.set_floorplan(None)
    repository.downloads[0][1](png_bytes())

    assert not canvas.has_image()


def test_remote_floorplan_offline_is_not_shown(store, session):
    canvas = FloorplanCanvas(store, session)
    store.set_floorplan("/uploads/plan.png")
    assert not canvas.has_image()
    assert session.viewport.image_size is None
