"""
Glass Material Types - Shared Contract

Defines the visual style contract between callers and the glass renderer.
A material is pure data: the renderer reads it, nobody mutates it.

Type Hierarchy:
    BlurQuality → resolution fraction for the blur pass
    GlassMaterial → complete panel style (tint, blur, border, highlight, shadow, grain)
"""

from dataclasses import dataclass, replace as dataclass_replace
from enum import Enum
from typing import Tuple, Optional


Color = Tuple[int, int, int]

WHITE: Color = (255, 255, 255)
BLACK: Color = (0, 0, 0)


class BlurQuality(Enum):
    """Fraction of the working resolution used for the blur pass"""
    HIGH = 1.0      # Full working resolution (slow, beautiful)
    MEDIUM = 0.5    # 1/2 working resolution (balanced)
    LOW = 0.25      # 1/4 working resolution (fast, acceptable)

    @property
    def resolution_fraction(self) -> float:
        return self.value


@dataclass(frozen=True)
class GlassMaterial:
    """Frosted glass panel style

    Values are in device-independent units where they describe lengths;
    the renderer scales them by display density.

    Attributes:
        background_color: RGB tint applied over the blurred backdrop
        background_opacity: Tint opacity (0.0-1.0, typically 0.12-0.35)
        blur_radius: Backdrop blur radius (typically 20-30)
        border_color: RGB color of the edge highlight stroke
        border_opacity: Stroke opacity (0.0-1.0)
        border_width: Stroke width
        has_top_highlight: Draw the light reflection gradient at the top
        highlight_opacity: Opacity of the gradient at its brightest row
        shadow_color: RGB color of the drop shadow
        shadow_opacity: Drop shadow opacity (0.0-1.0)
        shadow_blur: Drop shadow softness radius
        shadow_offset_y: Downward drop shadow offset
        has_noise: Overlay the grain texture
        noise_opacity: Grain opacity (typically 0.02-0.05)
        blur_quality: Resolution fraction used for the blur pass
    """
    background_color: Color
    background_opacity: float
    blur_radius: float
    border_color: Color
    border_opacity: float
    border_width: float
    has_top_highlight: bool
    highlight_opacity: float
    shadow_color: Color
    shadow_opacity: float
    shadow_blur: float
    shadow_offset_y: float
    has_noise: bool
    noise_opacity: float
    blur_quality: BlurQuality = BlurQuality.HIGH

    @property
    def is_dark(self) -> bool:
        """True for black-tinted glass (cache partition flag)"""
        return tuple(self.background_color) == BLACK

    def replace(self, **changes) -> 'GlassMaterial':
        """Return a copy with the given fields changed"""
        return dataclass_replace(self, **changes)


def ios_light_glass() -> GlassMaterial:
    """Light glass for light wallpapers"""
    return GlassMaterial(
        background_color=WHITE,
        background_opacity=0.15,
        blur_radius=25.0,
        blur_quality=BlurQuality.HIGH,
        border_color=WHITE,
        border_opacity=0.45,
        border_width=1.5,
        has_top_highlight=True,
        highlight_opacity=0.15,
        shadow_color=BLACK,
        shadow_opacity=0.12,
        shadow_blur=10.0,
        shadow_offset_y=6.0,
        has_noise=True,
        noise_opacity=0.03,
    )


def ios_dark_glass() -> GlassMaterial:
    """Dark glass for dark wallpapers"""
    return GlassMaterial(
        background_color=BLACK,
        background_opacity=0.35,
        blur_radius=25.0,
        blur_quality=BlurQuality.HIGH,
        border_color=WHITE,
        border_opacity=0.15,
        border_width=1.0,
        has_top_highlight=True,
        highlight_opacity=0.08,
        shadow_color=BLACK,
        shadow_opacity=0.35,
        shadow_blur=16.0,
        shadow_offset_y=8.0,
        has_noise=True,
        noise_opacity=0.04,
    )


LIGHT_GLASS = ios_light_glass()
DARK_GLASS = ios_dark_glass()


def material_for_theme(theme_id: Optional[str]) -> Optional[GlassMaterial]:
    """Map a widget theme id to its glass preset

    Args:
        theme_id: Theme identifier such as 'glass_light' or 'glass_dark'

    Returns:
        Dark preset for 'glass_dark', light preset for any other 'glass_'
        theme, None for themes that are not glass
    """
    if not theme_id or not theme_id.startswith('glass_'):
        return None
    if theme_id == 'glass_dark':
        return ios_dark_glass()
    return ios_light_glass()
