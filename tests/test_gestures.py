"""Tests for wheel, pinch and pan gestures."""

import pytest

from fovsurvey.gestures import GestureController, anchored_translation, touch_centroid, touch_distance
from fovsurvey.viewport import ViewportState


@pytest.fixture
def viewport() -> ViewportState:
    return ViewportState(scale=1.0, translation=(0.0, 0.0), container_size=(800, 600))


@pytest.fixture
def controller(viewport) -> GestureController:
    return GestureController(viewport)


def assert_point_equal(actual, expected):
    assert actual[0] == pytest.approx(expected[0])
    assert actual[1] == pytest.approx(expected[1])


def test_touch_helpers():
    assert touch_distance((0, 0), (3, 4)) == 5.0
    assert touch_centroid((0, 0), (10, 20)) == (5.0, 10.0)
    assert anchored_translation((100, 50), (300, 200), 2.0) == (100.0, 100.0)


def test_wheel_zoom_in_keeps_point_under_pointer(controller, viewport):
    pointer = (200.0, 100.0)
    before = viewport.to_scene(pointer)
    assert controller.wheel(pointer, 120)
    assert viewport.scale == pytest.approx(1.1)
    assert_point_equal(viewport.to_scene(pointer), before)


def test_wheel_zoom_out(controller, viewport):
    pointer = (420.0, 310.0)
    before = viewport.to_scene(pointer)
    assert controller.wheel(pointer, -120)
    assert viewport.scale == pytest.approx(0.9)
    assert_point_equal(viewport.to_scene(pointer), before)


def test_wheel_zero_delta_is_ignored(controller, viewport):
    assert not controller.wheel((10, 10), 0)
    assert viewport.scale == 1.0
    assert viewport.translation == (0.0, 0.0)


@pytest.mark.parametrize("delta", [120, -120])
def test_wheel_scale_stays_in_range(controller, viewport, delta):
    pointer = (333.0, 222.0)
    for _ in range(60):
        before = viewport.to_scene(pointer)
        controller.wheel(pointer, delta)
        assert 0.2 <= viewport.scale <= 5.0
        assert_point_equal(viewport.to_scene(pointer), before)
    assert viewport.scale == pytest.approx(5.0 if delta > 0 else 0.2)


def test_pinch_zoom_anchors_centroid(controller, viewport):
    controller.touches_changed([(100, 100), (200, 100)])
    assert controller.is_pinching

    before = viewport.to_scene((150, 100))
    assert controller.pinch_move([(50, 100), (250, 100)])
    assert viewport.scale == pytest.approx(2.0)
    assert_point_equal(viewport.to_scene((150, 100)), before)


def test_pinch_moving_centroid_pans(controller, viewport):
    controller.touches_changed([(100, 100), (200, 100)])
    before = viewport.to_scene((150, 100))
    controller.pinch_move([(130, 110), (230, 110)])
    assert viewport.scale == pytest.approx(1.0)
    assert viewport.translation == pytest.approx((30.0, 10.0))
    assert_point_equal(viewport.to_scene((180, 110)), before)


def test_pinch_reanchors_on_every_move(controller, viewport):
    controller.touches_changed([(100, 100), (200, 100)])
    controller.pinch_move([(50, 100), (250, 100)])
    # Same distance as the latest move: no further zoom
    controller.pinch_move([(50, 100), (250, 100)])
    assert viewport.scale == pytest.approx(2.0)


def test_pinch_from_zero_distance_keeps_scale(controller, viewport):
    controller.touches_changed([(100, 100), (100, 100)])
    assert controller.pinch_move([(50, 100), (150, 100)])
    assert viewport.scale == 1.0

    # The next move is measured from the new, non-degenerate anchor
    controller.pinch_move([(0, 100), (200, 100)])
    assert viewport.scale == pytest.approx(2.0)


@pytest.mark.parametrize("points, expected", [
    ([(0, 300), (800, 300)], 5.0),
    ([(399.99, 300), (400.01, 300)], 0.2),
])
def test_pinch_scale_stays_in_range(controller, viewport, points, expected):
    controller.touches_changed([(390, 300), (410, 300)])
    before = viewport.to_scene((400, 300))
    controller.pinch_move(points)
    assert viewport.scale == pytest.approx(expected)
    assert_point_equal(viewport.to_scene((400, 300)), before)


def test_pinch_ends_below_two_touches(controller, viewport):
    controller.touches_changed([(100, 100), (200, 100)])
    controller.touches_changed([(100, 100)])
    assert not controller.is_pinching
    assert not controller.pinch_move([(0, 0), (300, 0)])
    assert viewport.scale == 1.0


def test_third_touch_clears_pinch(controller):
    controller.touches_changed([(100, 100), (200, 100)])
    controller.touches_changed([(100, 100), (200, 100), (300, 300)])
    assert not controller.is_pinching


def test_pan_follows_pointer(controller, viewport):
    controller.begin_pan((10, 10))
    assert controller.is_panning
    controller.pan_to((40, 30))
    assert viewport.translation == (30.0, 20.0)
    controller.pan_to((20, 20))
    assert viewport.translation == (10.0, 10.0)

    controller.end_pan()
    assert not controller.pan_to((500, 500))
    assert viewport.translation == (10.0, 10.0)


def test_pan_is_clamped_with_image(viewport, controller):
    viewport.set_image_size((1600, 1200))
    viewport.commit(1.0, (0.0, 0.0))
    controller.begin_pan((100, 100))
    controller.pan_to((300, 300))
    assert viewport.translation == (0.0, 0.0)


def test_pinch_start_cancels_pan(controller):
    controller.begin_pan((10, 10))
    controller.touches_changed([(100, 100), (200, 100)])
    assert not controller.is_panning
