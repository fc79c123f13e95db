"""
Wallpaper Sources - Imperative Shell

The host boundary that hands the current wallpaper to the extractor.
Sources may return None or raise; the extractor maps every failure to
its flat fallback.
"""

from pathlib import Path
from typing import Optional, Protocol, Union

from PIL import Image, UnidentifiedImageError

from .errors import WallpaperUnavailableError


class WallpaperSource(Protocol):
    """Anything that can produce the current wallpaper"""

    def get_wallpaper(self) -> Optional[Image.Image]:
        ...


class StaticWallpaperSource:
    """Serves an in-memory image (tests, previews, embedding hosts)"""

    def __init__(self, image: Optional[Image.Image]):
        self.image = image

    def get_wallpaper(self) -> Optional[Image.Image]:
        return self.image


class FileWallpaperSource:
    """Reads the wallpaper from an image file on every request

    Side effects:
    - Reads from disk

    Raises from get_wallpaper():
        PermissionError: The file exists but cannot be read
        WallpaperUnavailableError: The file is missing or not an image
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def get_wallpaper(self) -> Optional[Image.Image]:
        if not self.path.exists():
            raise WallpaperUnavailableError(f"Wallpaper not found: {self.path}")
        try:
            with Image.open(self.path) as img:
                img.load()
                return img.copy()
        except UnidentifiedImageError as e:
            raise WallpaperUnavailableError(f"Not an image: {self.path}") from e
