"""
Glass Renderer - Imperative Shell

Orchestrates one glass panel render:

1. Low-end devices get a flat rounded fill (no blur, grain or highlight)
2. Cache lookup by (consumer, size, blur radius, darkness)
3. Inside a rounded-rect clip: blurred backdrop, tint, grain, top highlight
4. Border stroke drawn on top, outside the clip
5. Cache store

The drop shadow is a separate, uncached raster drawn beneath the panel.
Pure layer math lives in core.py; this module owns sequencing, caching
and the renderer-scoped grain tile.
"""

import gc
import logging
import threading
from typing import Dict, Optional, Tuple

import numpy as np  # type: ignore
from PIL import Image  # type: ignore

from .backends import BlurCascade, default_backends
from .cache import GlassEffectCache
from .config import DEFAULT_CONFIG, GlassConfig
from .core import (
    apply_clip,
    border_geometry,
    composite,
    create_canvas,
    fallback_opacity,
    generate_noise_tile,
    highlight_layer,
    masked_color_layer,
    noise_layer,
    rounded_rect_mask,
    shadow_box,
    shadow_canvas_height,
    soften_mask,
    solid_layer,
    stroked_rounded_rect_mask,
)
from .device import DeviceProfile, DisplayMetrics, HostCapabilities, detect_capabilities
from .extractor import BackgroundExtractor
from .material import GlassMaterial
from .timing import StageTimings, format_timing_summary, time_stage

logger = logging.getLogger(__name__)


def _validate_size(width: int, height: int) -> None:
    if width < 1 or height < 1:
        raise ValueError(f"Raster size must be at least 1x1, got {width}x{height}")


class GlassRenderer:
    """Renders glass panels and their drop shadows

    Args:
        extractor: Produces the blurred wallpaper backdrop
        cache: Shared rendered-raster cache (owned by the caller)
        capabilities: Host flags; defaults to the extractor's
        display: Display metrics for density scaling; defaults to the extractor's
        profile: Optional device tier used to cap blur radius
        config: Rendering constants
        enable_timing: Record per-stage timings
    """

    def __init__(
        self,
        extractor: BackgroundExtractor,
        cache: GlassEffectCache,
        capabilities: Optional[HostCapabilities] = None,
        display: Optional[DisplayMetrics] = None,
        profile: Optional[DeviceProfile] = None,
        config: GlassConfig = DEFAULT_CONFIG,
        enable_timing: bool = False
    ):
        self.extractor = extractor
        self.cache = cache
        self.capabilities = capabilities or extractor.capabilities
        self.display = display or extractor.display
        self.profile = profile
        self.config = config
        self.timings = StageTimings() if enable_timing else None

        self._noise_tile: Optional[np.ndarray] = None
        self._noise_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Renderer-scoped resources
    # ------------------------------------------------------------------

    @property
    def noise_tile(self) -> np.ndarray:
        """Grain tile, built on first use and shared by every render"""
        if self._noise_tile is None:
            with self._noise_lock:
                if self._noise_tile is None:
                    self._noise_tile = generate_noise_tile(self.config.noise_tile_size, self.config.noise_seed)
        return self._noise_tile

    @property
    def corner_radius(self) -> float:
        return self.display.dp_to_px(self.config.panel_corner_radius_dp)

    @property
    def shadow_corner_radius(self) -> float:
        return self.display.dp_to_px(self.config.shadow_corner_radius_dp)

    # ------------------------------------------------------------------
    # Glass panel
    # ------------------------------------------------------------------

    def render_glass(self, material: GlassMaterial, width: int, height: int, consumer_id: int) -> Image.Image:
        """Render the complete glass panel (shadow excluded)

        Args:
            material: Visual style
            width: Panel width in pixels
            height: Panel height in pixels
            consumer_id: Cache partition of the caller (e.g. widget id)

        Returns:
            RGBA image of exactly (width, height). Cached results are shared;
            treat the image as read-only.
        """
        _validate_size(width, height)

        if self.capabilities.low_end:
            logger.debug("Low-end device, rendering flat fallback for consumer %s", consumer_id)
            return self.render_simple_fallback(material, width, height)

        key = GlassEffectCache.key(consumer_id, width, height, material.blur_radius, material.is_dark)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        with time_stage(self.timings, 'render_glass_total'):
            try:
                result = self._compose_glass(material, width, height)
            except MemoryError:
                gc.collect()
                logger.warning("Out of memory compositing %sx%s glass, using flat fallback", width, height)
                return self.render_simple_fallback(material, width, height)

        self.cache.put(key, result)
        return result

    def _backdrop_radius(self, material: GlassMaterial) -> float:
        if self.profile is None:
            return material.blur_radius
        return self.profile.recommended_blur_radius(material.blur_radius)

    def _compose_glass(self, material: GlassMaterial, width: int, height: int) -> Image.Image:
        size = (width, height)
        supersample = self.config.mask_supersample

        with time_stage(self.timings, 'extract_background'):
            backdrop = self.extractor.create_glass_background(
                width,
                height,
                tint_color=material.background_color,
                tint_opacity=material.background_opacity,
                blur_radius=self._backdrop_radius(material),
                quality=material.blur_quality,
            )

        with time_stage(self.timings, 'tint'):
            panel = composite(backdrop, solid_layer(size, material.background_color, material.background_opacity))
            backdrop.close()

        if material.has_noise:
            with time_stage(self.timings, 'noise'):
                panel = composite(panel, noise_layer(self.noise_tile, size, material.noise_opacity))

        if material.has_top_highlight:
            with time_stage(self.timings, 'highlight'):
                panel = composite(panel, highlight_layer(size, material.highlight_opacity,
                                                         self.config.highlight_extent))

        with time_stage(self.timings, 'clip'):
            clip = rounded_rect_mask(size, (0.0, 0.0, float(width), float(height)),
                                     self.corner_radius, supersample)
            panel = apply_clip(panel, clip)

        # Border goes on after the clip is released so its anti-aliased edge survives
        with time_stage(self.timings, 'border'):
            stroke = self.display.dp_to_px(material.border_width)
            panel = self._draw_border(panel, stroke, material.border_color, material.border_opacity)

        return panel

    def _draw_border(self, panel: Image.Image, stroke: float, color, opacity: float,
                     supersample: Optional[int] = None) -> Image.Image:
        if stroke <= 0 or opacity <= 0:
            return panel
        geometry = border_geometry(panel.width, panel.height, stroke, self.corner_radius)
        if geometry is None:
            return panel
        box, radius = geometry
        if supersample is None:
            supersample = self.config.mask_supersample
        mask = stroked_rounded_rect_mask(panel.size, box, radius, stroke, supersample)
        return composite(panel, masked_color_layer(mask, color, opacity))

    def render_simple_fallback(self, material: GlassMaterial, width: int, height: int) -> Image.Image:
        """Flat rounded fill plus a faint border, for low-end devices

        Tint opacity is boosted by 0.2 (clamped to 1.0) to stay legible
        without a backdrop; border opacity is halved. If the supersampled
        masks cannot be allocated, the shapes are drawn at panel resolution.
        """
        try:
            return self._flat_panel(material, width, height, self.config.mask_supersample)
        except MemoryError:
            gc.collect()
            logger.warning("Out of memory drawing %sx%s fallback, dropping supersampling", width, height)
            return self._flat_panel(material, width, height, 1)

    def _flat_panel(self, material: GlassMaterial, width: int, height: int, supersample: int) -> Image.Image:
        size = (width, height)
        fill_mask = rounded_rect_mask(size, (0.0, 0.0, float(width), float(height)),
                                      self.corner_radius, supersample)
        opacity = fallback_opacity(material.background_opacity, self.config.fallback_opacity_boost)
        image = masked_color_layer(fill_mask, material.background_color, opacity)

        stroke = self.display.dp_to_px(self.config.fallback_border_width_dp)
        return self._draw_border(image, stroke, material.border_color, material.border_opacity * 0.5,
                                 supersample)

    # ------------------------------------------------------------------
    # Drop shadow
    # ------------------------------------------------------------------

    def render_shadow(self, material: GlassMaterial, width: int, height: int) -> Image.Image:
        """Render the soft drop shadow drawn beneath a panel

        Never cached and independent of device tier. A transparent canvas
        of the same size is returned when the mask cannot be allocated.

        Returns:
            RGBA image of width `width` and height inflated by
            offset + 2 * blur so the blur can bleed past the panel edge
        """
        _validate_size(width, height)

        with time_stage(self.timings, 'render_shadow'):
            offset = self.display.dp_to_px(material.shadow_offset_y)
            blur = self.display.dp_to_px(material.shadow_blur)
            canvas_height = shadow_canvas_height(height, offset, blur)

            box = shadow_box(width, height, offset, blur)
            if box is None:
                return create_canvas(width, canvas_height)

            try:
                mask = rounded_rect_mask((width, canvas_height), box, self.shadow_corner_radius,
                                         self.config.mask_supersample)
                mask = soften_mask(mask, blur)
                return masked_color_layer(mask, material.shadow_color, material.shadow_opacity)
            except MemoryError:
                gc.collect()
                logger.warning("Out of memory drawing %sx%s shadow, leaving it transparent",
                               width, canvas_height)
                return create_canvas(width, canvas_height)

    def render_panel(
        self,
        material: GlassMaterial,
        width: int,
        height: int,
        consumer_id: int
    ) -> Tuple[Image.Image, Image.Image]:
        """Render (glass, shadow) for callers that layer both"""
        return (
            self.render_glass(material, width, height, consumer_id),
            self.render_shadow(material, width, height),
        )

    # ------------------------------------------------------------------
    # Timing
    # ------------------------------------------------------------------

    def timing_summary(self) -> Dict[str, Dict[str, float]]:
        if self.timings is None:
            return {}
        return self.timings.summary()

    def format_timing_summary(self, title: str = "Glass Render Timing") -> str:
        if self.timings is None:
            return f"{title}: Timing disabled"
        return format_timing_summary(self.timings.summary(), title)

    def reset_timing(self):
        if self.timings is not None:
            self.timings.clear()


def create_glass_renderer(
    wallpaper_source,
    display: Optional[DisplayMetrics] = None,
    cache: Optional[GlassEffectCache] = None,
    profile: Optional[DeviceProfile] = None,
    capabilities: Optional[HostCapabilities] = None,
    config: GlassConfig = DEFAULT_CONFIG,
    enable_timing: bool = False
) -> GlassRenderer:
    """Wire a renderer for the current host

    Anything not supplied is detected: the device profile from physical
    memory, capabilities by probing GL and OpenCV, and a cache sized for
    the device. Pass a shared cache to let several renderers reuse results.

    Side effects:
    - May create and release a GL context while probing
    """
    profile = profile or DeviceProfile.detect()
    if capabilities is None:
        capabilities = detect_capabilities(profile)
    display = display or DisplayMetrics()
    if cache is None:
        cache = GlassEffectCache.for_device(profile, config)

    extractor = BackgroundExtractor(
        wallpaper_source,
        capabilities,
        display=display,
        cascade=BlurCascade(default_backends(config)),
        config=config,
    )
    return GlassRenderer(
        extractor,
        cache,
        capabilities=capabilities,
        display=display,
        profile=profile,
        config=config,
        enable_timing=enable_timing,
    )
