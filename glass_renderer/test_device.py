"""
Tests for device.py - device tier and capability detection
"""

from unittest import mock

import pytest

from glass_renderer.device import (
    GIB,
    DeviceProfile,
    DisplayMetrics,
    HostCapabilities,
    detect_capabilities,
    detect_total_memory,
)


class TestDisplayMetrics:

    def test_defaults(self):
        display = DisplayMetrics()
        assert display.pixel_count == 1080 * 2400
        assert display.dp_to_px(22) == 22

    def test_density_scales(self):
        assert DisplayMetrics(density=2.75).dp_to_px(4) == pytest.approx(11.0)


class TestDeviceProfile:
    """Memory tier thresholds"""

    @pytest.mark.parametrize('memory,low_ram,disable', [
        (1 * GIB, True, True),
        (2 * GIB + 1, True, False),
        (3 * GIB, False, False),
        (12 * GIB, False, False),
    ])
    def test_thresholds(self, memory, low_ram, disable):
        profile = DeviceProfile(memory)
        assert profile.is_low_ram_device is low_ram
        assert profile.should_disable_glass_effects() is disable
        assert profile.should_use_hardware_blur() is not low_ram

    def test_low_ram_caps_blur_radius(self):
        assert DeviceProfile(2 * GIB).recommended_blur_radius(25.0) == 15.0
        assert DeviceProfile(2 * GIB).recommended_blur_radius(10.0) == 10.0

    def test_normal_device_keeps_blur_radius(self):
        assert DeviceProfile(6 * GIB).recommended_blur_radius(25.0) == 25.0

    def test_noise_texture_size(self):
        assert DeviceProfile(1 * GIB).noise_texture_size == 32
        assert DeviceProfile(6 * GIB).noise_texture_size == 64

    def test_unknown_memory_is_normal_tier(self):
        profile = DeviceProfile(None)
        assert profile.is_low_ram_device is False
        assert profile.should_disable_glass_effects() is False
        assert profile.should_use_hardware_blur() is True
        assert profile.recommended_blur_radius(25.0) == 25.0
        assert profile.cache_size_multiplier == 1.0
        assert profile.noise_texture_size == 64

    def test_detect_uses_physical_memory(self):
        with mock.patch('glass_renderer.device.detect_total_memory', return_value=5 * GIB):
            assert DeviceProfile.detect().total_memory_bytes == 5 * GIB


class TestDetectTotalMemory:

    @pytest.mark.parametrize('error', [ValueError('unsupported'), AttributeError('sysconf'), OSError('denied')])
    def test_unreported_memory_is_unknown(self, error):
        with mock.patch('glass_renderer.device.os.sysconf', side_effect=error):
            assert detect_total_memory() is None

    def test_negative_page_count_is_unknown(self):
        values = {'SC_PAGE_SIZE': 4096, 'SC_PHYS_PAGES': -1}
        with mock.patch('glass_renderer.device.os.sysconf', side_effect=values.__getitem__):
            assert detect_total_memory() is None

    def test_product_of_page_size_and_count(self):
        values = {'SC_PAGE_SIZE': 4096, 'SC_PHYS_PAGES': 1000}
        with mock.patch('glass_renderer.device.os.sysconf', side_effect=values.__getitem__):
            assert detect_total_memory() == 4096 * 1000


class TestDetectCapabilities:
    """Capabilities are checked once and frozen"""

    def test_capable_host(self):
        with mock.patch('glass_renderer.device.hardware_blur_works', return_value=True), \
                mock.patch('glass_renderer.device.blur_intrinsic_works', return_value=True):
            caps = detect_capabilities(DeviceProfile(6 * GIB))
        assert caps == HostCapabilities(hardware_blur=True, blur_intrinsic=True, low_end=False)

    def test_low_ram_skips_gpu_check(self):
        with mock.patch('glass_renderer.device.hardware_blur_works', return_value=True) as gpu_check:
            caps = detect_capabilities(DeviceProfile(2 * GIB + 1))
        gpu_check.assert_not_called()
        assert caps.hardware_blur is False
        assert caps.low_end is False

    def test_very_low_ram_is_low_end(self):
        with mock.patch('glass_renderer.device.hardware_blur_works', return_value=False):
            caps = detect_capabilities(DeviceProfile(1 * GIB))
        assert caps.low_end is True

    def test_unreported_memory_keeps_full_pipeline(self):
        with mock.patch('glass_renderer.device.os.sysconf', side_effect=AttributeError('sysconf')), \
                mock.patch('glass_renderer.device.hardware_blur_works', return_value=True) as gpu_check:
            caps = detect_capabilities(DeviceProfile.detect())
        gpu_check.assert_called_once()
        assert caps.low_end is False
        assert caps.hardware_blur is True

    def test_capabilities_are_frozen(self):
        caps = HostCapabilities()
        with pytest.raises(Exception):
            caps.low_end = True  # type: ignore
