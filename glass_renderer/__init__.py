"""
Glass Renderer Package

Frosted-glass panel rendering using functional core, imperative shell pattern.

Modules:
- material: Glass style contract and presets
- config: Rendering constants and YAML overrides
- core: Pure compositing transformations (masks, layers, geometry)
- stackblur: Pure software blur
- shell: GPU blur (ModernGL side effects)
- backends: Tiered blur strategies and their cascade
- extractor: Wallpaper → blurred backdrop
- cache: Bounded LRU of rendered rasters
- renderer: Panel and shadow orchestration
"""

from .material import (
    BlurQuality,
    GlassMaterial,
    ios_light_glass,
    ios_dark_glass,
    material_for_theme,
    LIGHT_GLASS,
    DARK_GLASS,
    WHITE,
    BLACK,
)

from .config import GlassConfig, DEFAULT_CONFIG, load_config

from .errors import (
    GlassRenderError,
    WallpaperUnavailableError,
    BlurBackendError,
)

from .device import (
    DisplayMetrics,
    HostCapabilities,
    DeviceProfile,
    detect_capabilities,
)

from .wallpaper import (
    WallpaperSource,
    StaticWallpaperSource,
    FileWallpaperSource,
)

from .core import pack_argb, unpack_argb

from .stackblur import stack_blur

from .backends import (
    BlurBackend,
    HardwareBlurBackend,
    IntrinsicBlurBackend,
    SoftwareBlurBackend,
    BlurCascade,
    default_backends,
)

from .extractor import BackgroundExtractor

from .cache import GlassEffectCache

from .renderer import GlassRenderer, create_glass_renderer

__all__ = [
    # Material
    'BlurQuality',
    'GlassMaterial',
    'ios_light_glass',
    'ios_dark_glass',
    'material_for_theme',
    'LIGHT_GLASS',
    'DARK_GLASS',
    'WHITE',
    'BLACK',

    # Configuration and errors
    'GlassConfig',
    'DEFAULT_CONFIG',
    'load_config',
    'GlassRenderError',
    'WallpaperUnavailableError',
    'BlurBackendError',

    # Host boundary
    'DisplayMetrics',
    'HostCapabilities',
    'DeviceProfile',
    'detect_capabilities',
    'WallpaperSource',
    'StaticWallpaperSource',
    'FileWallpaperSource',

    # Raster format
    'pack_argb',
    'unpack_argb',

    # Blur
    'stack_blur',
    'BlurBackend',
    'HardwareBlurBackend',
    'IntrinsicBlurBackend',
    'SoftwareBlurBackend',
    'BlurCascade',
    'default_backends',

    # Pipeline
    'BackgroundExtractor',
    'GlassEffectCache',
    'GlassRenderer',
    'create_glass_renderer',
]
