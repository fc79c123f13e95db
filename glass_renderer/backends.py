"""
Blur Backends - Tiered Strategy

Three interchangeable implementations of blur(image, radius) -> image:

1. HardwareBlurBackend: GPU shader blur (ModernGL), clamp-to-edge sampling
2. IntrinsicBlurBackend: OpenCV Gaussian intrinsic, radius limited to [0, 25]
3. SoftwareBlurBackend: StackBlur in numpy, no host dependency

BlurCascade holds them in preference order. Capability predicates are
checked first; only a backend that is available and then fails at runtime
hands over to the next one. The software tier is terminal and is never
skipped.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

import cv2  # type: ignore
import numpy as np  # type: ignore
from PIL import Image  # type: ignore

from .config import DEFAULT_CONFIG
from .core import image_to_rgb_array, rgb_array_to_image
from .device import HostCapabilities
from .shell import GpuBlurContext
from .stackblur import stack_blur

logger = logging.getLogger(__name__)


class BlurBackend(ABC):
    """One blur implementation plus the capability check that gates it"""

    name = 'abstract'

    @abstractmethod
    def is_available(self, capabilities: HostCapabilities) -> bool:
        """True if the host offers what this backend needs"""

    @abstractmethod
    def blur(self, image: Image.Image, radius: float) -> Image.Image:
        """Blur an image, returning a new opaque RGBA image of the same size"""

    def close(self) -> None:
        """Release any host resources held by the backend"""


class HardwareBlurBackend(BlurBackend):
    """GPU shader blur; the GL context is created on first use

    A context that fails to come up is not retried, so later blurs skip
    straight to the next tier.
    """

    name = 'hardware'

    def __init__(self, context_factory=GpuBlurContext):
        self._context_factory = context_factory
        self._context: Optional[GpuBlurContext] = None
        self._lock = threading.Lock()
        self._failed = False

    def is_available(self, capabilities: HostCapabilities) -> bool:
        return capabilities.hardware_blur and not self._failed

    def blur(self, image: Image.Image, radius: float) -> Image.Image:
        pixels = np.asarray(rgb_array_to_image(image_to_rgb_array(image)))
        # A GL context is bound to one thread at a time
        with self._lock:
            if self._context is None:
                try:
                    self._context = self._context_factory()
                except Exception:
                    self._failed = True
                    raise
            blurred = self._context.blur(pixels, radius)
        return rgb_array_to_image(blurred)

    def close(self) -> None:
        with self._lock:
            if self._context is not None:
                self._context.cleanup()
                self._context = None


def intrinsic_sigma(radius: float) -> float:
    """Sigma matching the platform blur intrinsic (0.4 * r + 0.6)"""
    return radius * 0.4 + 0.6


class IntrinsicBlurBackend(BlurBackend):
    """OpenCV Gaussian blur with replicated borders"""

    name = 'intrinsic'

    def __init__(self, max_radius: float = DEFAULT_CONFIG.intrinsic_max_radius):
        self.max_radius = max_radius

    def clamp_radius(self, radius: float) -> float:
        return max(0.0, min(self.max_radius, radius))

    def is_available(self, capabilities: HostCapabilities) -> bool:
        return capabilities.blur_intrinsic

    def blur(self, image: Image.Image, radius: float) -> Image.Image:
        rgb = image_to_rgb_array(image)
        radius = self.clamp_radius(radius)
        if radius <= 0:
            return rgb_array_to_image(rgb)
        sigma = intrinsic_sigma(radius)
        blurred = cv2.GaussianBlur(rgb, (0, 0), sigmaX=sigma, sigmaY=sigma,
                                   borderType=cv2.BORDER_REPLICATE)
        return rgb_array_to_image(blurred)


class SoftwareBlurBackend(BlurBackend):
    """StackBlur; always available"""

    name = 'software'

    def is_available(self, capabilities: HostCapabilities) -> bool:
        return True

    def blur(self, image: Image.Image, radius: float) -> Image.Image:
        rgb = image_to_rgb_array(image)
        blurred = stack_blur(rgb, max(1, int(radius)))
        return Image.fromarray(blurred, 'RGBA')


def default_backends(config=DEFAULT_CONFIG) -> List[BlurBackend]:
    """Backends in preference order: hardware, intrinsic, software"""
    return [
        HardwareBlurBackend(),
        IntrinsicBlurBackend(max_radius=config.intrinsic_max_radius),
        SoftwareBlurBackend(),
    ]


class BlurCascade:
    """Ordered blur strategies with fault fallthrough

    Args:
        backends: Backends in preference order. A SoftwareBlurBackend is
                  appended when the list does not already end with one, so
                  the cascade always terminates in a backend with no host
                  dependency.
    """

    def __init__(self, backends: Optional[Sequence[BlurBackend]] = None):
        backends = list(backends) if backends is not None else default_backends()
        if not backends or not isinstance(backends[-1], SoftwareBlurBackend):
            backends.append(SoftwareBlurBackend())
        self.backends = backends
        self.last_backend: Optional[str] = None

    def blur(self, image: Image.Image, radius: float, capabilities: HostCapabilities) -> Image.Image:
        """Blur with the first backend that is available and succeeds

        Args:
            image: Working-resolution raster
            radius: Blur radius in working-resolution pixels
            capabilities: Host capability flags

        Returns:
            Blurred opaque RGBA image
        """
        terminal = self.backends[-1]
        for backend in self.backends[:-1]:
            if not backend.is_available(capabilities):
                logger.debug("Blur backend %s unavailable, skipping", backend.name)
                continue
            try:
                result = backend.blur(image, radius)
            except Exception as e:
                logger.warning("Blur backend %s failed, falling back: %s", backend.name, e)
                continue
            self.last_backend = backend.name
            return result

        result = terminal.blur(image, radius)
        self.last_backend = terminal.name
        return result

    def close(self) -> None:
        for backend in self.backends:
            backend.close()
