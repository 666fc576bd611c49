"""
Coverage mask generation.

Turns positioned glyphs into a single-channel uint8 buffer the size of the
field box. A positive spread radius dilates the silhouette with a disc, which
is what borders use.
"""
import math
from functools import lru_cache
from typing import Dict, Iterable, Optional, Tuple

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from domain.models import PositionedGlyph
from services.fonts import FontResource

GlyphBitmap = Tuple[np.ndarray, Tuple[int, int]]


@lru_cache(maxsize=16)
def disc_offsets(radius: int) -> Tuple[Tuple[int, int], ...]:
    """All integer (dx, dy) offsets within `radius` of the origin."""
    if radius < 0:
        raise ValueError(f"spread radius must be >= 0, got {radius}")
    return tuple(
        (dx, dy)
        for dy in range(-radius, radius + 1)
        for dx in range(-radius, radius + 1)
        if dx * dx + dy * dy <= radius * radius
    )


def rasterize_glyph(font: ImageFont.FreeTypeFont, char: str) -> Optional[GlyphBitmap]:
    """
    Render one character to an L-mode coverage array.

    Returns the array and its top-left offset from the pen position (left edge,
    ascender line), or None for characters with no ink.
    """
    left, top, right, bottom = font.getbbox(char)
    width, height = right - left, bottom - top
    if width <= 0 or height <= 0:
        return None
    img = Image.new("L", (width, height), 0)
    ImageDraw.Draw(img).text((-left, -top), char, font=font, fill=255)
    return np.asarray(img, dtype=np.uint8), (left, top)


def max_into(buffer: np.ndarray, source: np.ndarray, x: int, y: int) -> None:
    """Max-combine `source` into `buffer` with its top-left at (x, y), clipping at the edges."""
    buf_h, buf_w = buffer.shape
    src_h, src_w = source.shape
    x0, y0 = max(x, 0), max(y, 0)
    x1, y1 = min(x + src_w, buf_w), min(y + src_h, buf_h)
    if x0 >= x1 or y0 >= y1:
        return
    target = buffer[y0:y1, x0:x1]
    np.maximum(target, source[y0 - y:y1 - y, x0 - x:x1 - x], out=target)


def rasterize(
    glyphs: Iterable[PositionedGlyph],
    font: FontResource,
    box_width: int,
    box_height: int,
    spread_radius: int = 0,
) -> np.ndarray:
    """
    Build the coverage mask for a laid-out field.

    Args:
        glyphs: Glyphs positioned relative to the box top-left
        font: Font resource the glyphs were laid out with
        box_width: Mask width in pixels
        box_height: Mask height in pixels
        spread_radius: Dilation radius in pixels; 0 draws the glyphs as-is

    Returns:
        uint8 array of shape (box_height, box_width)
    """
    offsets = disc_offsets(int(spread_radius))
    pad = int(spread_radius)

    # Glyph ink up to `pad` pixels outside the box can still spread into it.
    padded = np.zeros((box_height + 2 * pad, box_width + 2 * pad), dtype=np.uint8)
    sized_fonts: Dict[float, ImageFont.FreeTypeFont] = {}
    bitmaps: Dict[Tuple[float, str], Optional[GlyphBitmap]] = {}

    for glyph in glyphs:
        key = (glyph.size, glyph.char)
        if key not in bitmaps:
            if glyph.size not in sized_fonts:
                sized_fonts[glyph.size] = font.at_size(glyph.size)
            bitmaps[key] = rasterize_glyph(sized_fonts[glyph.size], glyph.char)
        bitmap = bitmaps[key]
        if bitmap is None:
            continue
        coverage, (dx, dy) = bitmap
        max_into(padded, coverage, math.floor(glyph.x) + dx + pad, math.floor(glyph.y) + dy + pad)

    if pad == 0:
        return padded

    mask = np.zeros((box_height, box_width), dtype=np.uint8)
    for dx, dy in offsets:
        shifted = padded[pad - dy:pad - dy + box_height, pad - dx:pad - dx + box_width]
        np.maximum(mask, shifted, out=mask)
    return mask
