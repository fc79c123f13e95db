"""
Tests for material.py - glass style contract and presets
"""

import dataclasses

import pytest

from glass_renderer.material import (
    BLACK,
    DARK_GLASS,
    LIGHT_GLASS,
    WHITE,
    BlurQuality,
    GlassMaterial,
    ios_dark_glass,
    ios_light_glass,
    material_for_theme,
)


class TestPresets:
    """Preset literals are part of the visual contract"""

    def test_light_glass_values(self):
        m = ios_light_glass()
        assert m.background_color == WHITE
        assert m.background_opacity == 0.15
        assert m.blur_radius == 25.0
        assert m.blur_quality is BlurQuality.HIGH
        assert m.border_color == WHITE
        assert m.border_opacity == 0.45
        assert m.border_width == 1.5
        assert m.has_top_highlight is True
        assert m.highlight_opacity == 0.15
        assert m.shadow_color == BLACK
        assert m.shadow_opacity == 0.12
        assert m.shadow_blur == 10.0
        assert m.shadow_offset_y == 6.0
        assert m.has_noise is True
        assert m.noise_opacity == 0.03

    def test_dark_glass_values(self):
        m = ios_dark_glass()
        assert m.background_color == BLACK
        assert m.background_opacity == 0.35
        assert m.blur_radius == 25.0
        assert m.border_color == WHITE
        assert m.border_opacity == 0.15
        assert m.border_width == 1.0
        assert m.highlight_opacity == 0.08
        assert m.shadow_opacity == 0.35
        assert m.shadow_blur == 16.0
        assert m.shadow_offset_y == 8.0
        assert m.noise_opacity == 0.04

    def test_module_constants_match_factories(self):
        assert LIGHT_GLASS == ios_light_glass()
        assert DARK_GLASS == ios_dark_glass()

    def test_is_dark(self):
        assert ios_dark_glass().is_dark is True
        assert ios_light_glass().is_dark is False
        assert ios_light_glass().replace(background_color=(10, 10, 10)).is_dark is False


class TestImmutability:

    def test_material_is_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            LIGHT_GLASS.blur_radius = 5.0  # type: ignore

    def test_replace_returns_new_material(self):
        softer = LIGHT_GLASS.replace(blur_radius=12.0, has_noise=False)
        assert isinstance(softer, GlassMaterial)
        assert softer.blur_radius == 12.0
        assert softer.has_noise is False
        assert LIGHT_GLASS.blur_radius == 25.0


class TestBlurQuality:

    @pytest.mark.parametrize('quality,fraction', [
        (BlurQuality.HIGH, 1.0),
        (BlurQuality.MEDIUM, 0.5),
        (BlurQuality.LOW, 0.25),
    ])
    def test_resolution_fraction(self, quality, fraction):
        assert quality.resolution_fraction == fraction


class TestMaterialForTheme:
    """Theme id → preset mapping"""

    def test_dark_theme(self):
        assert material_for_theme('glass_dark') == ios_dark_glass()

    @pytest.mark.parametrize('theme', ['glass_light', 'glass_frost'])
    def test_other_glass_themes_are_light(self, theme):
        assert material_for_theme(theme) == ios_light_glass()

    @pytest.mark.parametrize('theme', [None, '', 'classic', 'dark_glass'])
    def test_non_glass_themes(self, theme):
        assert material_for_theme(theme) is None
