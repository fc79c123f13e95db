"""
Glass Compositing Core - Functional Core

Pure functions for raster conversion, shape masks, overlay layers and
pipeline geometry. No side effects: no host access, no GPU, no logging.

Architecture: Functional core (this file) called by the imperative shell
(extractor.py, renderer.py, shell.py)
"""

from typing import Tuple, Optional

import numpy as np  # type: ignore
from PIL import Image, ImageChops, ImageDraw, ImageFilter  # type: ignore

from .material import Color


Box = Tuple[float, float, float, float]


# ============================================================================
# Scalar Helpers
# ============================================================================

def opacity_to_alpha(opacity: float) -> int:
    """
    Convert a 0.0-1.0 opacity to an 8-bit alpha value.

    Examples:
        >>> opacity_to_alpha(0.15)
        38
        >>> opacity_to_alpha(1.7)
        255
    """
    return max(0, min(255, int(opacity * 255)))


def fallback_opacity(opacity: float, boost: float) -> float:
    """Opacity used by the low-end fallback fill (boosted, clamped to 1.0)"""
    return max(0.0, min(1.0, opacity + boost))


def working_scale_factor(
    display_pixels: int,
    base_scale: float,
    reduced_scale: float,
    large_display_pixels: int,
    quality_fraction: float = 1.0
) -> float:
    """
    Downscale factor for the blur working resolution.

    Args:
        display_pixels: Host display pixel count
        base_scale: Normal scale factor (0.25)
        reduced_scale: Scale used on very large displays (0.15)
        large_display_pixels: Pixel count above which reduced_scale applies
        quality_fraction: BlurQuality resolution fraction

    Returns:
        Scale factor applied to both panel dimensions and blur radius

    Examples:
        >>> working_scale_factor(1080 * 2400, 0.25, 0.15, 12_000_000)
        0.25
        >>> working_scale_factor(4000 * 3001, 0.25, 0.15, 12_000_000)
        0.15
    """
    scale = reduced_scale if display_pixels > large_display_pixels else base_scale
    return scale * quality_fraction


def working_size(width: int, height: int, scale: float, min_size: int) -> Tuple[int, int]:
    """
    Working raster size for a panel, never smaller than min_size per edge.

    Examples:
        >>> working_size(300, 150, 0.25, 10)
        (75, 37)
        >>> working_size(20, 20, 0.25, 10)
        (10, 10)
    """
    return (max(min_size, int(width * scale)), max(min_size, int(height * scale)))


# ============================================================================
# Raster Conversions
# ============================================================================

def image_to_rgb_array(image: Image.Image) -> np.ndarray:
    """
    Convert any PIL image to an opaque RGB uint8 array (height, width, 3).

    RGBA input is composited onto black first, so transparent wallpaper
    regions blur as black rather than leaking undefined color.
    """
    if image.mode == 'RGBA':
        background = Image.new('RGBA', image.size, (0, 0, 0, 255))
        image = Image.alpha_composite(background, image)
    if image.mode != 'RGB':
        image = image.convert('RGB')
    return np.array(image, dtype=np.uint8)


def rgb_array_to_image(array: np.ndarray) -> Image.Image:
    """
    Convert an RGB (or RGBA) uint8 array to an opaque RGBA image.

    Alpha is forced to 255: blur output is always opaque, transparency is
    applied later by the compositor.
    """
    rgb = np.ascontiguousarray(array[:, :, :3], dtype=np.uint8)
    alpha = np.full(rgb.shape[:2] + (1,), 255, dtype=np.uint8)
    return Image.fromarray(np.concatenate([rgb, alpha], axis=2), 'RGBA')


def pack_argb(image: Image.Image) -> np.ndarray:
    """
    Pack an image into ARGB8888 words (height, width) uint32.

    Examples:
        >>> img = Image.new('RGBA', (1, 1), (0x11, 0x22, 0x33, 0x44))
        >>> hex(int(pack_argb(img)[0, 0]))
        '0x44112233'
    """
    rgba = np.array(image.convert('RGBA'), dtype=np.uint32)
    return (rgba[:, :, 3] << 24) | (rgba[:, :, 0] << 16) | (rgba[:, :, 1] << 8) | rgba[:, :, 2]


def unpack_argb(packed: np.ndarray) -> Image.Image:
    """Inverse of pack_argb"""
    packed = np.asarray(packed, dtype=np.uint32)
    rgba = np.stack([
        (packed >> 16) & 0xFF,
        (packed >> 8) & 0xFF,
        packed & 0xFF,
        (packed >> 24) & 0xFF,
    ], axis=2).astype(np.uint8)
    return Image.fromarray(rgba, 'RGBA')


def raster_nbytes(image: Image.Image) -> int:
    """Byte footprint of an ARGB8888 raster (width x height x 4)"""
    width, height = image.size
    return width * height * 4


# ============================================================================
# Canvas and Layers
# ============================================================================

def create_canvas(
    width: int,
    height: int,
    fill_color: Optional[Tuple[int, int, int, int]] = None
) -> Image.Image:
    """
    Create an RGBA canvas.

    Args:
        width: Canvas width in pixels
        height: Canvas height in pixels
        fill_color: Initial (R, G, B, A). None for fully transparent.

    Examples:
        >>> create_canvas(4, 2).getpixel((0, 0))
        (0, 0, 0, 0)
    """
    return Image.new('RGBA', (width, height), fill_color or (0, 0, 0, 0))


def solid_layer(size: Tuple[int, int], color: Color, opacity: float) -> Image.Image:
    """Uniform color layer at the given opacity"""
    return Image.new('RGBA', size, (*color[:3], opacity_to_alpha(opacity)))


def masked_color_layer(mask: Image.Image, color: Color, opacity: float) -> Image.Image:
    """
    Color layer whose alpha is the mask scaled by opacity.

    Args:
        mask: 'L' coverage mask (255 = fully covered)
        color: RGB color
        opacity: Layer opacity (0.0-1.0)
    """
    coverage = np.asarray(mask, dtype=np.float32) / 255.0
    alpha = np.clip(coverage * opacity_to_alpha(opacity) + 0.5, 0, 255).astype(np.uint8)
    layer = Image.new('RGBA', mask.size, (*color[:3], 0))
    layer.putalpha(Image.fromarray(alpha, 'L'))
    return layer


def composite(base: Image.Image, layer: Image.Image) -> Image.Image:
    """Source-over composite of layer onto base (both RGBA, same size)"""
    return Image.alpha_composite(base, layer)


def apply_clip(image: Image.Image, mask: Image.Image) -> Image.Image:
    """
    Confine an RGBA image to a coverage mask.

    Multiplies the image alpha by the mask; pixels outside the mask become
    transparent, anti-aliased mask edges fade the image proportionally.
    """
    clipped = image.copy()
    clipped.putalpha(ImageChops.multiply(image.getchannel('A'), mask))
    return clipped


# ============================================================================
# Rounded Rectangle Shapes
# ============================================================================

def draw_rounded_rectangle(
    draw: ImageDraw.ImageDraw,
    xy: Tuple[int, int, int, int],
    radius: int,
    fill: Optional[int] = None,
    outline: Optional[int] = None,
    width: int = 1
) -> None:
    """
    Draw a rounded rectangle using PIL.

    Pure function (modifies draw object but has no other side effects).

    Args:
        draw: PIL ImageDraw object to draw on
        xy: Inclusive pixel bounding box (x1, y1, x2, y2)
        radius: Corner radius in pixels (0 for sharp corners)
        fill: Fill value or None
        outline: Outline value or None
        width: Outline width in pixels, drawn inward from the box edge

    Notes:
        - If radius <= 0, draws regular rectangle
        - PIL clamps radii larger than half the box to a pill/ellipse shape
    """
    if radius <= 0:
        if fill is not None:
            draw.rectangle(xy, fill=fill)
        if outline is not None:
            draw.rectangle(xy, outline=outline, width=width)
        return

    draw.rounded_rectangle(xy, radius=radius, fill=fill, outline=outline, width=width)


def inset_box(width: float, height: float, inset: float) -> Optional[Box]:
    """
    Edge-coordinate box inset on all sides, or None when nothing remains.

    Examples:
        >>> inset_box(100, 50, 1.0)
        (1.0, 1.0, 99.0, 49.0)
        >>> inset_box(2, 2, 1.5) is None
        True
    """
    box = (inset, inset, width - inset, height - inset)
    if box[2] <= box[0] or box[3] <= box[1]:
        return None
    return box


def _supersampled_pixel_box(box: Box, supersample: int) -> Tuple[int, int, int, int]:
    """Edge coordinates → inclusive pixel coordinates at supersampled scale"""
    x0, y0, x1, y1 = (int(round(v * supersample)) for v in box)
    return (x0, y0, max(x0, x1 - 1), max(y0, y1 - 1))


def rounded_rect_mask(
    size: Tuple[int, int],
    box: Box,
    radius: float,
    supersample: int = 4
) -> Image.Image:
    """
    Anti-aliased coverage mask of a filled rounded rectangle.

    Args:
        size: Mask size (width, height)
        box: Edge coordinates (left, top, right, bottom) in pixels
        radius: Corner radius in pixels
        supersample: Drawing scale before the Lanczos reduction

    Returns:
        'L' mask, 255 inside the shape, 0 outside
    """
    big = Image.new('L', (size[0] * supersample, size[1] * supersample), 0)
    draw_rounded_rectangle(
        ImageDraw.Draw(big),
        _supersampled_pixel_box(box, supersample),
        radius=int(round(max(0.0, radius) * supersample)),
        fill=255,
    )
    return big.resize(size, Image.LANCZOS)


def stroked_rounded_rect_mask(
    size: Tuple[int, int],
    box: Box,
    radius: float,
    stroke_width: float,
    supersample: int = 4
) -> Image.Image:
    """
    Anti-aliased coverage mask of a stroked rounded rectangle.

    The stroke is centered on the given box and radius. PIL strokes grow
    inward from the outer edge, so the box is expanded by half the stroke.

    Args:
        size: Mask size (width, height)
        box: Stroke centerline in edge coordinates
        radius: Stroke centerline corner radius in pixels
        stroke_width: Stroke width in pixels
        supersample: Drawing scale before the Lanczos reduction
    """
    half = stroke_width / 2.0
    outer = (box[0] - half, box[1] - half, box[2] + half, box[3] + half)
    big = Image.new('L', (size[0] * supersample, size[1] * supersample), 0)
    draw_rounded_rectangle(
        ImageDraw.Draw(big),
        _supersampled_pixel_box(outer, supersample),
        radius=int(round(max(0.0, radius + half) * supersample)),
        outline=255,
        width=max(1, int(round(stroke_width * supersample))),
    )
    return big.resize(size, Image.LANCZOS)


def border_geometry(
    width: int,
    height: int,
    stroke_width: float,
    corner_radius: float
) -> Optional[Tuple[Box, float]]:
    """
    Stroke centerline for a border that stays inside the panel.

    The rectangle is inset by half the stroke width and the corner radius
    reduced by the same inset, so the outer stroke edge meets the panel edge.

    Returns:
        (box, radius) or None if the panel is too small for the stroke

    Examples:
        >>> border_geometry(100, 50, 2.0, 22.0)
        ((1.0, 1.0, 99.0, 49.0), 21.0)
    """
    inset = stroke_width / 2.0
    box = inset_box(width, height, inset)
    if box is None:
        return None
    return box, max(0.0, corner_radius - inset)


# ============================================================================
# Glass Overlays
# ============================================================================

def generate_noise_tile(size: int, seed: int) -> np.ndarray:
    """
    Greyscale noise tile, identical for identical (size, seed).

    Uses the legacy RandomState stream, which numpy keeps stable across
    releases. The returned array is read-only.

    Returns:
        uint8 array (size, size)
    """
    tile = np.random.RandomState(seed).randint(0, 256, size=(size, size)).astype(np.uint8)
    tile.setflags(write=False)
    return tile


def tile_to_size(tile: np.ndarray, width: int, height: int) -> np.ndarray:
    """
    Repeat-wrap a 2D tile to cover (height, width).

    Examples:
        >>> t = np.array([[1, 2], [3, 4]], dtype=np.uint8)
        >>> tile_to_size(t, 3, 3).tolist()
        [[1, 2, 1], [3, 4, 3], [1, 2, 1]]
    """
    reps_y = -(-height // tile.shape[0])
    reps_x = -(-width // tile.shape[1])
    return np.tile(tile, (reps_y, reps_x))[:height, :width]


def noise_layer(tile: np.ndarray, size: Tuple[int, int], opacity: float) -> Image.Image:
    """
    Grain layer: tiled greyscale noise at a uniform alpha.

    Args:
        tile: Greyscale noise tile from generate_noise_tile()
        size: Layer size (width, height)
        opacity: Grain opacity (0.0-1.0)
    """
    width, height = size
    grey = tile_to_size(tile, width, height)
    alpha = np.full((height, width), opacity_to_alpha(opacity), dtype=np.uint8)
    rgba = np.stack([grey, grey, grey, alpha], axis=2)
    return Image.fromarray(np.ascontiguousarray(rgba), 'RGBA')


def highlight_alpha_profile(height: int, opacity: float, extent: float) -> np.ndarray:
    """
    Per-row alpha of the top highlight gradient.

    Linear from opacity at y=0 to transparent at y = extent * height,
    zero below that.

    Returns:
        uint8 array (height,)

    Examples:
        >>> highlight_alpha_profile(10, 1.0, 0.4).tolist()
        [255, 191, 127, 63, 0, 0, 0, 0, 0, 0]
    """
    gradient_height = height * extent
    start = opacity_to_alpha(opacity)
    if gradient_height <= 0:
        return np.zeros(height, dtype=np.uint8)
    rows = np.arange(height, dtype=np.float32)
    t = np.clip(rows / gradient_height, 0.0, 1.0)
    return (start * (1.0 - t)).astype(np.uint8)


def highlight_layer(size: Tuple[int, int], opacity: float, extent: float) -> Image.Image:
    """White top highlight layer (vertical linear gradient)"""
    width, height = size
    alpha = highlight_alpha_profile(height, opacity, extent)
    rgba = np.empty((height, width, 4), dtype=np.uint8)
    rgba[:, :, :3] = 255
    rgba[:, :, 3] = alpha[:, None]
    return Image.fromarray(rgba, 'RGBA')


# ============================================================================
# Shadow Geometry
# ============================================================================

def shadow_canvas_height(height: int, offset: float, blur: float) -> int:
    """
    Shadow raster height: room for the offset plus blur bleed on both sides.

    Examples:
        >>> shadow_canvas_height(150, 6.0, 10.0)
        176
    """
    return max(height, int(height + offset + blur * 2))


def shadow_box(width: int, height: int, offset: float, blur: float) -> Optional[Box]:
    """
    Shadow rectangle: panel inset by blur on all sides, moved down by offset.

    Returns:
        Edge-coordinate box or None when the inset leaves nothing

    Examples:
        >>> shadow_box(300, 150, 6.0, 10.0)
        (10.0, 16.0, 290.0, 146.0)
    """
    box = inset_box(width, height, blur)
    if box is None:
        return None
    return (box[0], box[1] + offset, box[2], box[3] + offset)


def mask_blur_sigma(radius: float) -> float:
    """
    Gaussian sigma for a blur mask of the given radius.

    Follows the 2D graphics convention sigma = radius / sqrt(3) + 0.5.
    """
    if radius <= 0:
        return 0.0
    return radius * 0.57735 + 0.5


def soften_mask(mask: Image.Image, radius: float) -> Image.Image:
    """Gaussian-soften a coverage mask (drop-shadow blur mask filter)"""
    sigma = mask_blur_sigma(radius)
    if sigma <= 0:
        return mask
    return mask.filter(ImageFilter.GaussianBlur(radius=sigma))
