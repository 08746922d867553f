"""Tests for the main core wiring."""

from fovsurvey.main_core import MainCore
from fovsurvey.project_file import read_project_file
from fovsurvey.settings import SurveySettings


def test_offline_core_restores_autosave(tmp_path):
    path = tmp_path / "autosave.json"
    core = MainCore(SurveySettings(autosave_path=str(path)))
    assert core.repository is None

    core.store.add_camera_at(5.0, 6.0)
    core.release_all()

    restored = MainCore(SurveySettings(autosave_path=str(path)))
    assert [(camera.x, camera.y) for camera in restored.store.get_all_cameras()] == [(5.0, 6.0)]


def test_release_all_flushes_pending_autosave(tmp_path):
    path = tmp_path / "autosave.json"
    core = MainCore(SurveySettings(autosave_path=str(path)))
    key = core.store.add_camera_at(1.0, 2.0)
    core.store.patch(key, {'name': 'Entrance'})
    assert not path.exists()

    core.release_all()

    assert core.store.selected_key is None
    assert [camera.name for camera in read_project_file(str(path)).cameras] == ['Entrance']
