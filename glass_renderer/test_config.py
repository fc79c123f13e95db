"""
Tests for config.py - defaults and YAML overrides
"""

import pytest

from glass_renderer.config import DEFAULT_CONFIG, GlassConfig, load_config


def test_defaults():
    assert DEFAULT_CONFIG.cache_max_bytes == 15 * 1024 * 1024
    assert DEFAULT_CONFIG.panel_corner_radius_dp == 22.0
    assert DEFAULT_CONFIG.shadow_corner_radius_dp == 24.0
    assert DEFAULT_CONFIG.noise_seed == 12345
    assert DEFAULT_CONFIG.working_scale == 0.25


def test_glass_section_overrides(tmp_path):
    path = tmp_path / 'glass.yaml'
    path.write_text("glass:\n  noise_seed: 7\n  working_scale: 0.5\nunrelated:\n  key: 1\n")

    config = load_config(path)

    assert config.noise_seed == 7
    assert config.working_scale == 0.5
    assert config.mask_supersample == DEFAULT_CONFIG.mask_supersample


@pytest.mark.parametrize('text', ['', 'other: 1\n', 'glass:\n'])
def test_missing_section_gives_defaults(tmp_path, text):
    path = tmp_path / 'glass.yaml'
    path.write_text(text)
    assert load_config(path) == GlassConfig()


def test_unknown_key_rejected(tmp_path):
    path = tmp_path / 'glass.yaml'
    path.write_text("glass:\n  blur_strength: 3\n")
    with pytest.raises(ValueError, match='blur_strength'):
        load_config(path)
