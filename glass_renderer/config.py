"""
Glass Renderer Configuration

Tunable literals shared by the extractor, cache and renderer.
Defaults reproduce the reference look; a YAML file can override any field
through its `glass:` section.
"""

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Union

import yaml


@dataclass(frozen=True)
class GlassConfig:
    """Rendering constants

    Attributes:
        cache_max_bytes: Budget for resident cached rasters
        panel_corner_radius_dp: Glass panel corner radius (density-scaled)
        shadow_corner_radius_dp: Shadow layer corner radius (density-scaled)
        noise_tile_size: Edge length of the square grain tile
        noise_seed: Seed for the grain tile generator
        working_scale: Downscale factor for the blur working resolution
        reduced_working_scale: Downscale factor used on very large displays
        large_display_pixels: Display pixel count above which the reduced scale applies
        min_working_size: Smallest working raster edge in pixels
        intrinsic_max_radius: Upper radius limit of the OpenCV intrinsic tier
        highlight_extent: Fraction of panel height covered by the top highlight
        fallback_opacity_boost: Tint opacity added by the low-end fallback
        fallback_border_width_dp: Border width of the low-end fallback
        mask_supersample: Supersampling factor for anti-aliased shapes
    """
    cache_max_bytes: int = 15 * 1024 * 1024
    panel_corner_radius_dp: float = 22.0
    shadow_corner_radius_dp: float = 24.0
    noise_tile_size: int = 64
    noise_seed: int = 12345
    working_scale: float = 0.25
    reduced_working_scale: float = 0.15
    large_display_pixels: int = 12_000_000
    min_working_size: int = 10
    intrinsic_max_radius: float = 25.0
    highlight_extent: float = 0.4
    fallback_opacity_boost: float = 0.2
    fallback_border_width_dp: float = 1.5
    mask_supersample: int = 4


DEFAULT_CONFIG = GlassConfig()


def load_config(path: Union[str, Path], base: GlassConfig = DEFAULT_CONFIG) -> GlassConfig:
    """Load overrides from the `glass:` section of a YAML file

    Example file:
        glass:
          cache_max_bytes: 8388608
          noise_seed: 7

    Raises:
        ValueError: The section names a field GlassConfig does not have
    """
    with open(path) as f:
        config = yaml.safe_load(f) or {}

    overrides = config.get('glass') or {}
    known = {field.name for field in fields(GlassConfig)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise ValueError(f"Unknown glass config keys in {path}: {', '.join(unknown)}")
    return replace(base, **overrides)
