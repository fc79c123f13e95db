"""
Wallpaper Background Extractor - Imperative Shell

Turns the host wallpaper into a blurred backdrop for one glass panel:

1. Acquire the wallpaper (any failure → flat tint fallback)
2. Downscale to the working resolution
3. Blur through the backend cascade at a proportionally scaled radius
4. Upscale back to the panel size with bilinear filtering

The output is always exactly (width, height).
"""

import gc
import logging
from typing import Optional

from PIL import Image  # type: ignore

from .backends import BlurCascade
from .config import DEFAULT_CONFIG, GlassConfig
from .core import solid_layer, working_scale_factor, working_size
from .device import DisplayMetrics, HostCapabilities
from .material import BlurQuality, Color, WHITE
from .wallpaper import WallpaperSource

logger = logging.getLogger(__name__)


class BackgroundExtractor:
    """Produces blurred wallpaper backdrops

    Args:
        wallpaper_source: Host wallpaper boundary
        capabilities: Host capability flags for backend selection
        display: Display metrics (pixel count selects the working scale)
        cascade: Blur backends in preference order
        config: Rendering constants
    """

    def __init__(
        self,
        wallpaper_source: WallpaperSource,
        capabilities: HostCapabilities,
        display: Optional[DisplayMetrics] = None,
        cascade: Optional[BlurCascade] = None,
        config: GlassConfig = DEFAULT_CONFIG
    ):
        self.wallpaper_source = wallpaper_source
        self.capabilities = capabilities
        self.display = display or DisplayMetrics()
        self.cascade = cascade or BlurCascade()
        self.config = config

    def scale_factor(self, quality: BlurQuality = BlurQuality.HIGH) -> float:
        return working_scale_factor(
            self.display.pixel_count,
            self.config.working_scale,
            self.config.reduced_working_scale,
            self.config.large_display_pixels,
            quality.resolution_fraction,
        )

    def create_fallback(self, width: int, height: int, tint_color: Color, tint_opacity: float) -> Image.Image:
        """Flat tint raster used whenever the wallpaper cannot be blurred"""
        return solid_layer((width, height), tint_color, tint_opacity)

    def _acquire_wallpaper(self) -> Optional[Image.Image]:
        try:
            wallpaper = self.wallpaper_source.get_wallpaper()
            # Lazily decoded images fail here rather than mid-pipeline
            if wallpaper is not None:
                wallpaper.load()
        except PermissionError as e:
            logger.warning("Wallpaper access denied, using flat fallback: %s", e)
            return None
        except Exception as e:
            logger.warning("Wallpaper unavailable, using flat fallback: %s", e)
            return None
        if wallpaper is None:
            logger.warning("Host returned no wallpaper, using flat fallback")
        return wallpaper

    def create_glass_background(
        self,
        width: int,
        height: int,
        tint_color: Color = WHITE,
        tint_opacity: float = 0.15,
        blur_radius: float = 25.0,
        quality: BlurQuality = BlurQuality.HIGH
    ) -> Image.Image:
        """Create a blurred backdrop for a panel

        Side effects:
        - Reads the host wallpaper
        - Requests a garbage collection pass on allocation failure

        Args:
            width: Panel width in pixels
            height: Panel height in pixels
            tint_color: Fallback fill color
            tint_opacity: Fallback fill opacity
            blur_radius: Blur radius at panel resolution
            quality: Resolution fraction for the blur pass

        Returns:
            RGBA image of exactly (width, height)
        """
        wallpaper = self._acquire_wallpaper()
        if wallpaper is None:
            return self.create_fallback(width, height, tint_color, tint_opacity)

        scale = self.scale_factor(quality)
        target = working_size(width, height, scale, self.config.min_working_size)

        try:
            rgb = wallpaper.convert('RGB')
            working = rgb.resize(target, Image.BILINEAR)
            rgb.close()

            blurred = self.cascade.blur(working, blur_radius * scale, self.capabilities)
            working.close()
            logger.debug("Blurred %sx%s working raster with %s backend",
                         target[0], target[1], self.cascade.last_backend)

            result = blurred.resize((width, height), Image.BILINEAR)
            blurred.close()
        except MemoryError:
            gc.collect()
            logger.warning("Out of memory blurring wallpaper at %s, using flat fallback", target)
            return self.create_fallback(width, height, tint_color, tint_opacity)
        except Exception as e:
            logger.warning("Wallpaper processing failed at %s, using flat fallback: %s", target, e)
            return self.create_fallback(width, height, tint_color, tint_opacity)

        return result if result.mode == 'RGBA' else result.convert('RGBA')
