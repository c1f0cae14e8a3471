import numpy as np
import pytest

from regionblur.core.compositor import ProcessingError, RegionCompositor
from regionblur.core.geometry import Rect
from regionblur.core.session import ImageSession


@pytest.fixture
def session(textured_png):
    return ImageSession.load(textured_png)


def outside(pixels, rect):
    mask = np.ones(pixels.shape[:2], dtype=bool)
    mask[rect.as_slices()] = False
    return pixels[mask]


@pytest.mark.parametrize("rect", [
    Rect(10, 10, 50, 50),
    Rect(0, 0, 100, 100),
    Rect(0, 0, 1, 1),
    Rect(99, 0, 1, 100),
    Rect(40, 70, 60, 30),
])
@pytest.mark.parametrize("radius", [5, 100])
def test_pixels_outside_rect_are_untouched(session, rect, radius):
    before = session.current
    after = RegionCompositor().apply_blur(session, rect, radius)
    assert after is session.current
    assert after is not before
    assert np.array_equal(outside(after.pixels, rect), outside(before.pixels, rect))


def test_region_inside_rect_changes(session):
    rect = Rect(10, 10, 50, 50)
    before = session.current
    after = RegionCompositor().apply_blur(session, rect, 15)
    assert not np.array_equal(after.crop(rect), before.crop(rect))
    assert session.is_modified
    assert not session.processing


def test_blur_compounds_on_repeated_application(session):
    rect = Rect(10, 10, 50, 50)
    compositor = RegionCompositor()
    once = compositor.apply_blur(session, rect, 5)
    twice = compositor.apply_blur(session, rect, 5)
    assert not np.array_equal(once.crop(rect), twice.crop(rect))


def test_saturated_region_does_not_regain_detail(session):
    rect = Rect(10, 10, 50, 50)
    compositor = RegionCompositor()
    once = compositor.apply_blur(session, rect, 100)
    twice = compositor.apply_blur(session, rect, 100)
    assert twice.crop(rect).std() <= once.crop(rect).std()


def test_overlapping_selections_read_the_composited_buffer(session):
    seen = []

    def recording_kernel(region, radius):
        seen.append(region.copy())
        return np.zeros_like(region)

    compositor = RegionCompositor(kernel=recording_kernel)
    compositor.apply_blur(session, Rect(0, 0, 50, 50), 5)
    compositor.apply_blur(session, Rect(25, 25, 50, 50), 5)
    # The overlap was zeroed by the first commit and must be seen as such.
    assert (seen[1][:25, :25] == 0).all()
    assert not (seen[1][25:, 25:] == 0).all()


def test_begin_is_lazy_until_complete(session):
    before = session.current
    pending = RegionCompositor().begin(session, Rect(10, 10, 20, 20), 15)
    assert pending is not None
    assert session.processing
    assert session.current is before
    assert not pending.done

    result = pending.complete()
    assert pending.done
    assert pending.future.result() is result
    assert pending.complete() is result
    assert not session.processing


def test_begin_while_processing_is_a_no_op(session):
    compositor = RegionCompositor()
    first = compositor.begin(session, Rect(10, 10, 20, 20), 15)
    assert compositor.begin(session, Rect(30, 30, 20, 20), 15) is None
    assert session.processing
    first.complete()


@pytest.mark.parametrize("rect", [
    Rect(10, 10, 0, 20),
    Rect(10, 10, 20, 0),
    Rect(90, 90, 20, 20),
    Rect(-1, 0, 10, 10),
])
def test_invalid_rect_is_a_no_op(session, rect):
    before = session.current
    compositor = RegionCompositor()
    assert compositor.begin(session, rect, 15) is None
    assert compositor.apply_blur(session, rect, 15) is None
    assert session.current is before
    assert not session.processing


def test_invalid_radius_is_rejected(session):
    with pytest.raises(ValueError):
        RegionCompositor().begin(session, Rect(0, 0, 10, 10), 3)
    assert not session.processing


def test_closed_session_is_ignored(session):
    session.discard()
    assert RegionCompositor().begin(session, Rect(0, 0, 10, 10), 15) is None


def test_kernel_failure_rolls_back(session):
    def broken_kernel(region, radius):
        raise RuntimeError("no compute context")

    before = session.current
    pending = RegionCompositor(kernel=broken_kernel).begin(session, Rect(0, 0, 10, 10), 15)
    with pytest.raises(ProcessingError):
        pending.complete()
    assert session.current is before
    assert not session.processing
    assert isinstance(pending.future.exception(), ProcessingError)


def test_kernel_with_wrong_shape_is_a_processing_error(session):
    def shrinking_kernel(region, radius):
        return region[:-1]

    before = session.current
    compositor = RegionCompositor(kernel=shrinking_kernel)
    with pytest.raises(ProcessingError):
        compositor.apply_blur(session, Rect(0, 0, 10, 10), 15)
    assert session.current is before
    assert not session.processing
