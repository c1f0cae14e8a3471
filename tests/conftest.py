import cv2
import numpy as np
import pytest


def make_pixels(width=100, height=100, seed=0):
    rng = np.random.RandomState(seed)
    pixels = rng.randint(0, 256, size=(height, width, 4)).astype(np.uint8)
    pixels[:, :, 3] = 255
    return pixels


def encode(pixels, ext=".png"):
    ok, data = cv2.imencode(ext, pixels)
    assert ok
    return data.tobytes()


@pytest.fixture
def textured_pixels():
    return make_pixels()


@pytest.fixture
def textured_png(textured_pixels):
    return encode(textured_pixels)


@pytest.fixture
def png_factory():
    def factory(width=100, height=100, seed=0):
        pixels = make_pixels(width, height, seed)
        return pixels, encode(pixels)

    return factory
