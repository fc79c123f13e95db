"""Exceptions raised between pipeline stages.

None of these reach callers of GlassRenderer; each stage that can fail has
a fallback that catches them.
"""


class GlassRenderError(Exception):
    """Base class for glass pipeline failures"""


class WallpaperUnavailableError(GlassRenderError):
    """The host has no readable wallpaper"""


class BlurBackendError(GlassRenderError):
    """A blur backend failed while running"""
