"""
Tests for wallpaper.py - host wallpaper sources
"""

import pytest
from PIL import Image

from glass_renderer.errors import GlassRenderError, WallpaperUnavailableError
from glass_renderer.wallpaper import FileWallpaperSource, StaticWallpaperSource


class TestStaticWallpaperSource:

    def test_returns_image(self):
        img = Image.new('RGB', (4, 4))
        assert StaticWallpaperSource(img).get_wallpaper() is img

    def test_returns_none(self):
        assert StaticWallpaperSource(None).get_wallpaper() is None


class TestFileWallpaperSource:

    def test_reads_png(self, tmp_path):
        path = tmp_path / 'wall.png'
        Image.new('RGB', (30, 20), (1, 2, 3)).save(path)

        wallpaper = FileWallpaperSource(path).get_wallpaper()

        assert wallpaper.size == (30, 20)
        assert wallpaper.getpixel((0, 0)) == (1, 2, 3)

    def test_missing_file(self, tmp_path):
        with pytest.raises(WallpaperUnavailableError):
            FileWallpaperSource(tmp_path / 'nope.png').get_wallpaper()

    def test_not_an_image(self, tmp_path):
        path = tmp_path / 'wall.png'
        path.write_text('plain text')
        with pytest.raises(WallpaperUnavailableError) as exc_info:
            FileWallpaperSource(str(path)).get_wallpaper()
        assert isinstance(exc_info.value, GlassRenderError)

    def test_reads_fresh_on_every_request(self, tmp_path):
        path = tmp_path / 'wall.png'
        Image.new('RGB', (2, 2), (10, 10, 10)).save(path)
        source = FileWallpaperSource(path)
        source.get_wallpaper()

        Image.new('RGB', (2, 2), (90, 90, 90)).save(path)

        assert source.get_wallpaper().getpixel((1, 1)) == (90, 90, 90)
