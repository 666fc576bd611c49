"""
Field renderer.

Draws one text field onto the canvas: layout, then every effect layer in
stack order (shadow under border), then the text itself.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List

import numpy as np
from PIL import Image

from domain.models import EffectLayer, FieldOutOfBounds, TextField, TextLayout
from services.compositor import blend
from services.coverage_mask import rasterize
from services.fonts import FontResource
from services.text_layout import fit

logger = logging.getLogger(__name__)


@dataclass
class FieldRender:
    """Chosen size and layout of one drawn field, plus pixels lost to clipping."""
    size: float
    layout: TextLayout
    clipped_pixels: int = 0


def check_field_bounds(field: TextField, canvas_size, index: int = 0, clip: bool = False) -> None:
    """
    Raise FieldOutOfBounds for a box the canvas cannot hold.

    Degenerate boxes and boxes entirely off the canvas are always rejected.
    Boxes that only overhang an edge are rejected unless `clip` is set.
    """
    width, height = canvas_size
    x0, y0, x1, y1 = field.box
    if field.width <= 0 or field.height <= 0:
        raise FieldOutOfBounds("box has non-positive width or height", field.box, index)
    if x1 <= 0 or y1 <= 0 or x0 >= width or y0 >= height:
        raise FieldOutOfBounds(f"box lies outside the {width}x{height} image", field.box, index)
    if not clip and (x0 < 0 or y0 < 0 or x1 > width or y1 > height):
        raise FieldOutOfBounds(f"box exceeds the {width}x{height} image", field.box, index)


def effect_layers(field: TextField, size: float) -> List[EffectLayer]:
    """Layers for the field's effects, bottom first. One effect per kind."""
    seen = {}
    for effect in field.effects:
        if effect.kind in seen:
            logger.warning("[field_renderer] ignoring duplicate %s effect on field %r", effect.kind, field.text)
            continue
        seen[effect.kind] = effect
    ordered = sorted(seen.values(), key=lambda effect: effect.stack_order)
    return [effect.layer(size) for effect in ordered]


def render_field(
    canvas: Image.Image,
    field: TextField,
    font: FontResource,
    *,
    index: int = 0,
    clip: bool = False,
) -> FieldRender:
    """
    Render `field` onto `canvas` in place.

    Args:
        canvas: RGB or RGBA image owned by the caller
        field: Field to draw
        font: Font used for layout and rasterization
        index: Position of the field in its template, for error reporting
        clip: Allow boxes that overhang the canvas edge

    Returns:
        FieldRender with the chosen size and how many pixels were clipped
    """
    check_field_bounds(field, canvas.size, index=index, clip=clip)

    layout = fit(field.text, field.uppercase, field.width, field.height, field.text_size, font)
    masks: Dict[int, np.ndarray] = {}

    def mask_for(spread_radius: int) -> np.ndarray:
        if spread_radius not in masks:
            masks[spread_radius] = rasterize(layout.glyphs, font, field.width, field.height, spread_radius)
        return masks[spread_radius]

    layers = effect_layers(field, layout.size)
    layers.append(EffectLayer(color=field.text_color))

    clipped = 0
    for layer in layers:
        placement = (field.start.x + layer.offset[0], field.start.y + layer.offset[1])
        clipped += blend(canvas, mask_for(layer.spread_radius), layer.color, placement)

    logger.debug(
        "[field_renderer] field=%s size=%s lines=%s layers=%s clipped=%s",
        index,
        layout.size,
        len(layout.lines),
        len(layers),
        clipped,
    )
    return FieldRender(size=layout.size, layout=layout, clipped_pixels=clipped)
