"""
Tests for shell.py - GPU blur tier

Requires an OpenGL 3.3 capable standalone context; skipped otherwise.
"""

import numpy as np
import pytest
from PIL import Image

from glass_renderer.backends import HardwareBlurBackend, SoftwareBlurBackend
from glass_renderer.device import hardware_blur_works
from glass_renderer.shell import GpuBlurContext, blur_sigma

requires_gl = pytest.mark.skipif(not hardware_blur_works(), reason="No standalone OpenGL context")


def test_blur_sigma():
    assert blur_sigma(9.0) == pytest.approx(3.0)
    assert blur_sigma(0.0) == 0.5


@requires_gl
class TestGpuBlurContext:

    def test_constant_image_unchanged(self):
        pixels = np.zeros((24, 40, 4), dtype=np.uint8)
        pixels[:, :] = (90, 180, 30, 255)
        with GpuBlurContext() as gpu:
            out = gpu.blur(pixels, 6.0)

        assert out.shape == (24, 40, 4)
        assert np.abs(out.astype(int) - (90, 180, 30, 255)).max() <= 1

    def test_alpha_forced_opaque(self):
        pixels = np.zeros((8, 8, 4), dtype=np.uint8)
        with GpuBlurContext() as gpu:
            out = gpu.blur(pixels, 2.0)
        assert np.all(out[:, :, 3] == 255)

    def test_rows_not_flipped(self):
        pixels = np.zeros((20, 10, 4), dtype=np.uint8)
        pixels[:5, :, :3] = 255
        pixels[:, :, 3] = 255
        with GpuBlurContext() as gpu:
            out = gpu.blur(pixels, 1.0)
        assert out[0, 5, 0] > 200
        assert out[19, 5, 0] < 50

    def test_context_reusable(self):
        pixels = np.full((6, 6, 4), 255, dtype=np.uint8)
        with GpuBlurContext() as gpu:
            gpu.blur(pixels, 2.0)
            out = gpu.blur(pixels, 3.0)
        assert out.shape == (6, 6, 4)


@requires_gl
def test_hardware_and_software_look_alike():
    ramp = np.linspace(0, 255, 64).astype(np.uint8)
    img = Image.fromarray(np.stack([np.tile(ramp, (16, 1))] * 3, axis=2), 'RGB')

    backend = HardwareBlurBackend()
    try:
        gpu = np.asarray(backend.blur(img, 6.0)).astype(int)
    finally:
        backend.close()
    soft = np.asarray(SoftwareBlurBackend().blur(img, 6.0)).astype(int)

    interior = (slice(None), slice(12, -12), slice(0, 3))
    assert np.abs(gpu[interior] - soft[interior]).mean() < 4.0
