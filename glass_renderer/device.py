"""
Host Device Description - Imperative Shell

Capability flags and device tier that the glass pipeline reads but never sets.
Probing touches the host (memory query, GL context creation), so it lives
here rather than in the functional core.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

import cv2  # type: ignore
import moderngl

logger = logging.getLogger(__name__)

GIB = 1024 * 1024 * 1024

LOW_RAM_THRESHOLD_BYTES = 3 * GIB
DISABLE_GLASS_THRESHOLD_BYTES = 2 * GIB
HIGH_RAM_THRESHOLD_BYTES = 8 * GIB
LOW_RAM_MAX_BLUR_RADIUS = 15.0


@dataclass(frozen=True)
class DisplayMetrics:
    """Physical display size and density

    Attributes:
        width_pixels: Display width in pixels
        height_pixels: Display height in pixels
        density: Pixels per device-independent unit
    """
    width_pixels: int = 1080
    height_pixels: int = 2400
    density: float = 1.0

    @property
    def pixel_count(self) -> int:
        return self.width_pixels * self.height_pixels

    def dp_to_px(self, value: float) -> float:
        return value * self.density


@dataclass(frozen=True)
class HostCapabilities:
    """What the host offers to the blur cascade and renderer

    Attributes:
        hardware_blur: GPU shader blur can run
        blur_intrinsic: OpenCV blur intrinsic is present
        low_end: Device is too weak for the full glass pipeline
    """
    hardware_blur: bool = False
    blur_intrinsic: bool = True
    low_end: bool = False


@dataclass(frozen=True)
class DeviceProfile:
    """Memory-based device tier with rendering recommendations

    A total_memory_bytes of None means the host did not report its memory;
    such devices get the normal tier.
    """
    total_memory_bytes: Optional[int]

    @classmethod
    def detect(cls) -> 'DeviceProfile':
        """Profile the current machine from its physical memory size"""
        return cls(total_memory_bytes=detect_total_memory())

    @property
    def is_low_ram_device(self) -> bool:
        if self.total_memory_bytes is None:
            return False
        return self.total_memory_bytes < LOW_RAM_THRESHOLD_BYTES

    def should_disable_glass_effects(self) -> bool:
        """Devices under 2 GiB get the flat fallback instead of glass"""
        if self.total_memory_bytes is None:
            return False
        return self.total_memory_bytes < DISABLE_GLASS_THRESHOLD_BYTES

    def should_use_hardware_blur(self) -> bool:
        return not self.is_low_ram_device

    def recommended_blur_radius(self, requested_radius: float) -> float:
        """Cap blur radius on low-RAM devices for faster rendering"""
        if self.is_low_ram_device:
            return min(requested_radius, LOW_RAM_MAX_BLUR_RADIUS)
        return requested_radius

    @property
    def noise_texture_size(self) -> int:
        return 32 if self.is_low_ram_device else 64

    @property
    def cache_size_multiplier(self) -> float:
        """0.5 for low-RAM, 1.5 for devices above 8 GiB, 1.0 otherwise"""
        if self.is_low_ram_device:
            return 0.5
        if self.total_memory_bytes is not None and self.total_memory_bytes > HIGH_RAM_THRESHOLD_BYTES:
            return 1.5
        return 1.0


def detect_total_memory() -> Optional[int]:
    """Physical memory in bytes, or None when the host does not report it"""
    try:
        page_size = os.sysconf('SC_PAGE_SIZE')
        page_count = os.sysconf('SC_PHYS_PAGES')
    except (AttributeError, ValueError, OSError):
        logger.debug("Physical memory size not available on this host")
        return None
    if page_size <= 0 or page_count <= 0:
        return None
    return page_size * page_count


def hardware_blur_works() -> bool:
    """True if a standalone OpenGL context can be created"""
    try:
        ctx = moderngl.create_standalone_context()
    except Exception as e:
        logger.debug("No standalone GL context: %s", e)
        return False
    ctx.release()
    return True


def blur_intrinsic_works() -> bool:
    return hasattr(cv2, 'GaussianBlur')


def detect_capabilities(profile: DeviceProfile) -> HostCapabilities:
    """Check the host once and freeze the result

    Args:
        profile: Device tier used to gate expensive paths

    Returns:
        HostCapabilities for the current machine
    """
    hardware = profile.should_use_hardware_blur() and hardware_blur_works()
    capabilities = HostCapabilities(
        hardware_blur=hardware,
        blur_intrinsic=blur_intrinsic_works(),
        low_end=profile.should_disable_glass_effects(),
    )
    logger.info(
        "Host capabilities: hardware_blur=%s blur_intrinsic=%s low_end=%s",
        capabilities.hardware_blur, capabilities.blur_intrinsic, capabilities.low_end,
    )
    return capabilities
