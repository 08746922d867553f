"""Tests for the camera store, using a recording fake repository."""

import pytest

from fovsurvey.camera import SurveyCamera
from fovsurvey.camera_repository import CameraRepository
from fovsurvey.camera_store import CameraStore
from fovsurvey.project_file import ProjectData, read_project_file


class RecordingRepository(CameraRepository):
    """Repository recording every call; creations complete on demand."""

    def __init__(self):
        super().__init__()
        self.calls = []
        self.pending_creations = []

    def create_camera(self, project_id, payload, on_created):
        self.calls.append(('create', project_id, payload))
        self.pending_creations.append(on_created)

    def complete_creation(self, remote_id, index=0):
        self.pending_creations.pop(index)(remote_id)

    def update_camera(self, remote_id, payload):
        self.calls.append(('update', remote_id, payload))

    def delete_camera(self, remote_id):
        self.calls.append(('delete', remote_id))

    def update_config(self, project_id, statuses=None, analysis_types=None):
        self.calls.append(('config', project_id, statuses, analysis_types))

    def update_project(self, project_id, floorplan_url):
        self.calls.append(('project', project_id, floorplan_url))

    def fetch_project(self, project_id, on_loaded):
        self.calls.append(('fetch', project_id))
        self.on_loaded = on_loaded

    def upload_floorplan(self, file_path, on_uploaded):
        self.calls.append(('upload', file_path))
        self.on_uploaded = on_uploaded


@pytest.fixture
def repository():
    return RecordingRepository()


@pytest.fixture
def store(repository, tmp_path):
    return CameraStore(repository=repository, project_id="p1", autosave_path=str(tmp_path / "autosave.json"))


def test_add_camera_is_immediate_and_selected(store, repository):
    added = []
    selected = []
    store.camera_added.connect(added.append)
    store.selection_changed.connect(selected.append)

    key = store.add_camera_at(120.0, 80.0)

    camera = store.get_camera(key)
    assert (camera.x, camera.y) == (120.0, 80.0)
    assert camera.remote_id is None
    assert camera.status == "Clear"
    assert store.selected_key == key
    assert added == [key]
    assert selected == [key]

    kind, project_id, payload = repository.calls[0]
    assert (kind, project_id) == ('create', 'p1')
    assert 'id' not in payload
    assert payload['x'] == 120.0
    assert payload['fovAngleDeg'] == 70.0


def test_reconciliation_keeps_selection_and_attributes(store, repository):
    key = store.add_camera_at(10.0, 20.0)
    before = SurveyCamera(**{**store.get_camera(key).attributes(), 'key': 'copy'})
    selections = []
    store.selection_changed.connect(selections.append)

    repository.complete_creation("srv-1")

    camera = store.get_camera(key)
    assert camera.remote_id == "srv-1"
    assert camera.id == "srv-1"
    assert camera.same_attributes(before)
    assert store.selected_key == key
    assert selections == []
    assert len(store.get_all_cameras()) == 1
    assert store.find_camera("srv-1") is camera


def test_updates_before_creation_are_queued_in_order(store, repository):
    key = store.add_camera_at(0.0, 0.0)
    store.patch(key, {'name': 'Gate'})
    store.patch(key, {'rotation_deg': -30})
    assert [call[0] for call in repository.calls] == ['create']

    repository.complete_creation("srv-2")

    assert repository.calls[1:] == [
        ('update', 'srv-2', {'name': 'Gate'}),
        ('update', 'srv-2', {'rotationDeg': 330.0}),
    ]
    store.patch(key, {'fov_radius': 5})
    assert repository.calls[-1] == ('update', 'srv-2', {'fovRadius': 40.0})


def test_remove_before_creation_deletes_remotely_later(store, repository):
    key = store.add_camera_at(0.0, 0.0)
    store.remove(key)
    assert not store.has_camera(key)
    assert store.selected_key is None

    repository.complete_creation("srv-3")
    assert repository.calls[-1] == ('delete', 'srv-3')
    assert store.get_all_cameras() == []


def test_remove_after_creation(store, repository):
    key = store.add_camera_at(0.0, 0.0)
    repository.complete_creation("srv-4")
    removed = []
    store.camera_removed.connect(removed.append)

    store.remove(key)

    assert removed == [key]
    assert store.selected_key is None
    assert repository.calls[-1] == ('delete', 'srv-4')


def test_remove_keeps_other_selection(store):
    first = store.add_camera_at(0.0, 0.0)
    second = store.add_camera_at(50.0, 50.0)
    store.remove(first)
    assert store.selected_key == second


def test_patch_is_clamped_and_last_write_wins(store):
    key = store.add_camera_at(0.0, 0.0)
    store.patch(key, {'fov_angle_deg': 200})
    store.patch(key, {'fov_radius': 5})
    store.patch(key, {'fov_radius': 300})
    camera = store.get_camera(key)
    assert camera.fov_angle_deg == 180.0
    assert camera.fov_radius == 300.0


def test_unknown_camera_raises(store):
    with pytest.raises(KeyError):
        store.patch("missing", {'name': 'x'})
    with pytest.raises(KeyError):
        store.select("missing")
    with pytest.raises(KeyError):
        store.remove("missing")


def test_toggle_analysis(store, repository):
    key = store.add_camera_at(0.0, 0.0)
    store.toggle_analysis(key, "Smoking")
    store.toggle_analysis(key, "Rodents")
    assert store.get_camera(key).analyses == ["Smoking", "Rodents"]
    store.toggle_analysis(key, "Smoking")
    assert store.get_camera(key).analyses == ["Rodents"]


def test_select_emits_only_on_change(store):
    key = store.add_camera_at(0.0, 0.0)
    selections = []
    store.selection_changed.connect(selections.append)
    store.select(key)
    store.select(None)
    store.select(None)
    assert selections == [None]


def test_vocabulary_changes_are_pushed(store, repository):
    key = store.add_camera_at(0.0, 0.0)
    changes = []
    store.vocabulary_changed.connect(lambda: changes.append(True))

    store.set_statuses(["Ok", "Broken"])
    store.set_analysis_types(["Loitering"])

    assert store.statuses == ["Ok", "Broken"]
    assert store.analysis_types == ["Loitering"]
    assert len(changes) == 2
    assert ('config', 'p1', ["Ok", "Broken"], None) in repository.calls
    assert ('config', 'p1', None, ["Loitering"]) in repository.calls
    # Existing statuses are kept even when no longer listed
    assert store.get_camera(key).status == "Clear"


def test_set_floorplan(store, repository):
    locations = []
    store.floorplan_changed.connect(locations.append)
    store.set_floorplan("/plans/level1.png")
    assert store.floorplan == "/plans/level1.png"
    assert locations == ["/plans/level1.png"]
    assert repository.calls[-1] == ('project', 'p1', "/plans/level1.png")


def test_import_project_replaces_state(store):
    store.add_camera_at(0.0, 0.0)
    resets = []
    store.project_reset.connect(lambda: resets.append(True))
    project = ProjectData(
        floorplan="plan.png",
        cameras=[SurveyCamera(key="a", x=1, y=2, remote_id="r1")],
        statuses=["S"],
        analysis_types=["A"],
    )

    store.import_project(project)

    assert [camera.key for camera in store.get_all_cameras()] == ["a"]
    assert store.selected_key is None
    assert store.statuses == ["S"]
    assert store.analysis_types == ["A"]
    assert store.floorplan == "plan.png"
    assert resets == [True]


def test_load_from_repository(store, repository):
    store.load_from_repository()
    assert repository.calls[-1] == ('fetch', 'p1')

    repository.on_loaded(
        {'id': 'p1', 'floorplanUrl': 'https://example.com/plan.png', 'statuses': ['Up'], 'analysisTypes': []},
        [{'id': 'c1', 'x': 5, 'y': 6, 'name': 'Hall'}],
    )

    cameras = store.get_all_cameras()
    assert len(cameras) == 1
    assert cameras[0].remote_id == 'c1'
    assert cameras[0].name == 'Hall'
    assert store.statuses == ['Up']
    assert store.analysis_types == ["Phone use", "Smoking", "Rodents", "No mask"]
    assert store.floorplan == 'https://example.com/plan.png'


def test_late_creation_after_project_replaced_is_ignored(store, repository):
    store.add_camera_at(0.0, 0.0)
    store.import_project(ProjectData())
    repository.complete_creation("srv-late")
    assert store.get_all_cameras() == []
    assert [call[0] for call in repository.calls] == ['create']


def test_mutations_are_autosaved(store, tmp_path):
    key = store.add_camera_at(3.0, 4.0)
    store.patch(key, {'name': 'Saved'})
    store.flush_autosave()
    saved = read_project_file(str(tmp_path / "autosave.json"))
    assert [camera.name for camera in saved.cameras] == ['Saved']


def test_offline_store_makes_no_remote_calls():
    store = CameraStore()
    key = store.add_camera_at(1.0, 1.0)
    store.patch(key, {'name': 'Offline'})
    store.remove(key)
    store.load_from_repository()
    assert store.get_all_cameras() == []


def test_empty_status_vocabulary_gives_unset_status():
    store = CameraStore(statuses=[])
    key = store.add_camera_at(0.0, 0.0)
    assert store.get_camera(key).status is None


def test_autosave_is_deferred_until_flushed(store, tmp_path):
    path = tmp_path / "autosave.json"
    key = store.add_camera_at(3.0, 4.0)
    for index in range(5):
        store.patch(key, {'rotation_deg': float(index)})

    assert not path.exists()

    store.flush_autosave()
    saved = read_project_file(str(path))
    assert saved.cameras[0].rotation_deg == 4.0

    # Nothing left to write
    path.unlink()
    store.flush_autosave()
    assert not path.exists()


def test_upload_floorplan_stores_server_url(store, repository):
    locations = []
    store.floorplan_changed.connect(locations.append)

    store.upload_floorplan("/plans/level1.png")

    assert repository.calls[-1] == ('upload', "/plans/level1.png")
    assert store.floorplan is None

    repository.on_uploaded("/uploads/level1.png")

    assert store.floorplan == "/uploads/level1.png"
    assert locations == ["/uploads/level1.png"]
    assert repository.calls[-1] == ('project', 'p1', "/uploads/level1.png")


def test_upload_floorplan_offline_uses_local_file():
    store = CameraStore()
    store.upload_floorplan("/plans/level1.png")
    assert store.floorplan == "/plans/level1.png"
