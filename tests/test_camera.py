"""Tests for the survey camera record and patch sanitizing."""

import pytest

from fovsurvey.camera import (
    SurveyCamera,
    normalize_rotation,
    patch_to_payload,
    sanitize_patch,
    unique_analyses,
)


@pytest.mark.parametrize("value, expected", [
    (0, 0.0),
    (360, 0.0),
    (-30, 330.0),
    (725, 5.0),
    (-1e-17, 0.0),
])
def test_normalize_rotation(value, expected):
    assert normalize_rotation(value) == pytest.approx(expected)
    assert 0.0 <= normalize_rotation(value) < 360.0


def test_sanitize_patch_clamps_values():
    clean = sanitize_patch({
        'rotation_deg': -90,
        'fov_angle_deg': 5,
        'fov_radius': 5000,
        'status': '',
        'analyses': ['Smoking', 'Rodents', 'Smoking'],
        'x': 3,
    })
    assert clean == {
        'rotation_deg': 270.0,
        'fov_angle_deg': 10.0,
        'fov_radius': 1000.0,
        'status': None,
        'analyses': ['Smoking', 'Rodents'],
        'x': 3.0,
    }


def test_sanitize_patch_rejects_unknown_fields():
    with pytest.raises(ValueError, match="colour"):
        sanitize_patch({'name': 'Lobby', 'colour': 'red'})


def test_unique_analyses_keeps_first_occurrence():
    assert unique_analyses(['b', 'a', 'b', 'c', 'a']) == ['b', 'a', 'c']


def test_patch_to_payload_uses_api_names():
    assert patch_to_payload({'rotation_deg': 10.0, 'fov_radius': 50.0, 'name': 'A'}) == {
        'rotationDeg': 10.0,
        'fovRadius': 50.0,
        'name': 'A',
    }


def test_new_camera_defaults():
    camera = SurveyCamera(key="k", x=1, y=2)
    assert camera.name == "Camera"
    assert camera.rotation_deg == 0.0
    assert camera.fov_angle_deg == 70.0
    assert camera.fov_radius == 220.0
    assert camera.status is None
    assert camera.analyses == []
    assert camera.id == "k"


def test_construction_enforces_ranges():
    camera = SurveyCamera(key="k", x=0, y=0, rotation_deg=400, fov_angle_deg=300, fov_radius=1)
    assert camera.rotation_deg == pytest.approx(40.0)
    assert camera.fov_angle_deg == 180.0
    assert camera.fov_radius == 40.0


def test_id_prefers_remote_id():
    camera = SurveyCamera(key="local", x=0, y=0)
    camera.remote_id = "42"
    assert camera.id == "42"


def test_to_dict_and_from_dict():
    camera = SurveyCamera(
        key="local", x=12.5, y=7.0, name="Dock", rotation_deg=90, fov_angle_deg=60,
        fov_radius=300, status="Clear", analyses=["Smoking"], remote_id="abc",
    )
    data = camera.to_dict()
    assert data == {
        'id': 'abc',
        'name': 'Dock',
        'x': 12.5,
        'y': 7.0,
        'rotationDeg': 90.0,
        'fovAngleDeg': 60.0,
        'fovRadius': 300.0,
        'status': 'Clear',
        'analyses': ['Smoking'],
    }

    restored = SurveyCamera.from_dict(data)
    assert restored.remote_id == "abc"
    assert restored.key != "local"
    assert restored.same_attributes(camera)


def test_from_dict_clamps_and_defaults():
    camera = SurveyCamera.from_dict({'id': 7, 'x': 1, 'y': 2, 'fovRadius': 9999}, key="given")
    assert camera.key == "given"
    assert camera.remote_id == "7"
    assert camera.fov_radius == 1000.0
    assert camera.name == "Camera"


def test_from_dict_requires_position():
    with pytest.raises(ValueError):
        SurveyCamera.from_dict({'name': 'Nowhere'})


def test_same_attributes_ignores_analyses_order():
    a = SurveyCamera(key="a", x=0, y=0, analyses=["Smoking", "Rodents"])
    b = SurveyCamera(key="b", x=0, y=0, analyses=["Rodents", "Smoking"])
    assert a.same_attributes(b)
    b.apply({'name': 'Other'})
    assert not a.same_attributes(b)
