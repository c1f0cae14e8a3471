import numpy as np
import pytest

from regionblur.core.effects.blur import DEFAULT_BLUR_RADIUS
from regionblur.core.geometry import Rect
from regionblur.core.raster import DecodeError, RasterBuffer, decode_image, encode_png
from regionblur.core.session import ImageSession, SessionClosed


def test_load_sets_original_and_current(textured_png, textured_pixels):
    session = ImageSession.load(textured_png)
    assert session.current is session.original
    assert (session.original.width, session.original.height) == (100, 100)
    assert np.array_equal(session.original.pixels, textured_pixels)
    assert not session.is_modified
    assert not session.processing
    assert session.radius == DEFAULT_BLUR_RADIUS


@pytest.mark.parametrize("data", [b"", b"not an image", b"\x89PNG\r\n\x1a\ntruncated"])
def test_load_rejects_malformed_bytes(data):
    with pytest.raises(DecodeError):
        ImageSession.load(data)


def test_decode_normalizes_grey_and_bgr_to_bgra():
    import cv2

    grey = np.arange(64, dtype=np.uint8).reshape(8, 8)
    ok, data = cv2.imencode(".png", grey)
    assert ok
    buffer = decode_image(data.tobytes())
    assert buffer.pixels.shape == (8, 8, 4)
    assert np.array_equal(buffer.pixels[:, :, 0], grey)
    assert (buffer.pixels[:, :, 3] == 255).all()

    bgr = np.zeros((5, 7, 3), dtype=np.uint8)
    bgr[:, :, 2] = 200
    ok, data = cv2.imencode(".png", bgr)
    buffer = decode_image(data.tobytes())
    assert buffer.pixels.shape == (5, 7, 4)
    assert (buffer.pixels[:, :, 2] == 200).all()


def test_raster_buffer_is_read_only(textured_pixels):
    buffer = RasterBuffer(textured_pixels)
    with pytest.raises(ValueError):
        buffer.pixels[0, 0, 0] = 1
    textured_pixels[0, 0, 0] ^= 0xFF
    assert buffer.pixels[0, 0, 0] != textured_pixels[0, 0, 0]


def test_raster_buffer_validates_shape():
    with pytest.raises(ValueError):
        RasterBuffer(np.zeros((4, 4, 3), dtype=np.uint8))
    with pytest.raises(ValueError):
        RasterBuffer(np.zeros((4, 4, 4), dtype=np.float32))
    with pytest.raises(ValueError):
        RasterBuffer(np.zeros((0, 4, 4), dtype=np.uint8))


def test_with_region_returns_new_buffer(textured_pixels):
    buffer = RasterBuffer(textured_pixels)
    rect = Rect(1, 2, 3, 4)
    patch = np.zeros((4, 3, 4), dtype=np.uint8)
    updated = buffer.with_region(rect, patch)
    assert updated is not buffer
    assert np.array_equal(updated.crop(rect), patch)
    assert buffer.same_pixels(RasterBuffer(textured_pixels))
    with pytest.raises(ValueError):
        buffer.with_region(Rect(98, 98, 3, 4), patch)
    with pytest.raises(ValueError):
        buffer.crop(Rect(0, 0, 0, 5))


def test_export_is_lossless(textured_png):
    session = ImageSession.load(textured_png)
    exported = session.export()
    assert decode_image(exported).same_pixels(session.original)
    assert decode_image(encode_png(session.current)).same_pixels(session.current)


def test_reset_restores_original_and_radius(textured_png):
    session = ImageSession.load(textured_png)
    session.set_radius(60)
    assert session.begin_processing()
    session.install(session.current.with_region(Rect(0, 0, 10, 10), np.zeros((10, 10, 4), dtype=np.uint8)))
    session.end_processing()
    assert session.is_modified

    assert session.reset()
    assert session.current is session.original
    assert session.radius == DEFAULT_BLUR_RADIUS
    assert not session.is_modified


def test_reset_and_discard_are_rejected_while_processing(textured_png):
    session = ImageSession.load(textured_png)
    assert session.begin_processing()
    assert not session.begin_processing()
    assert session.reset() is False
    assert session.discard() is False
    assert not session.closed
    session.end_processing()
    assert session.discard()
    assert session.closed


def test_discarded_session_has_no_buffers(textured_png):
    session = ImageSession.load(textured_png)
    session.discard()
    assert not session.is_modified
    assert not session.begin_processing()
    with pytest.raises(SessionClosed):
        session.current
    with pytest.raises(SessionClosed):
        session.export()


def test_install_requires_processing_and_matching_size(textured_png):
    session = ImageSession.load(textured_png)
    with pytest.raises(RuntimeError):
        session.install(session.current)
    session.begin_processing()
    with pytest.raises(ValueError):
        session.install(RasterBuffer(np.zeros((10, 10, 4), dtype=np.uint8)))
    session.end_processing()


def test_set_radius_validates(textured_png):
    session = ImageSession.load(textured_png)
    with pytest.raises(ValueError):
        session.set_radius(12)
    session.set_radius(100)
    assert session.radius == 100
