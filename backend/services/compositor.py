"""
Alpha compositing of coverage masks onto the canvas.
"""
import logging
from typing import Tuple

import numpy as np
from PIL import Image

from domain.models import Color

logger = logging.getLogger(__name__)

SUPPORTED_MODES = ("RGB", "RGBA")


def blend(
    destination: Image.Image,
    mask: np.ndarray,
    fill_color: Color,
    offset: Tuple[int, int] = (0, 0),
) -> int:
    """
    Blend `fill_color` through `mask` onto `destination` in place.

    Mask cell (x, y) lands on destination pixel (offset_x + x, offset_y + y).
    Cells that land outside the destination are dropped.

    Returns:
        Number of nonzero mask cells that were clipped.
    """
    if destination.mode not in SUPPORTED_MODES:
        raise ValueError(f"cannot blend onto {destination.mode} image; expected one of {SUPPORTED_MODES}")

    mask_h, mask_w = mask.shape
    ox, oy = int(offset[0]), int(offset[1])
    x0, y0 = max(ox, 0), max(oy, 0)
    x1, y1 = min(ox + mask_w, destination.width), min(oy + mask_h, destination.height)

    total = int(np.count_nonzero(mask))
    if x0 >= x1 or y0 >= y1:
        if total:
            logger.debug("[compositor] layer at %s entirely outside %s canvas", offset, destination.size)
        return total

    sub_mask = mask[y0 - oy:y1 - oy, x0 - ox:x1 - ox]
    clipped = total - int(np.count_nonzero(sub_mask))
    if clipped:
        logger.debug("[compositor] clipped %s pixels of layer at %s", clipped, offset)
    if not sub_mask.any():
        return clipped

    box = (x0, y0, x1, y1)
    region = np.asarray(destination.crop(box), dtype=np.float32)
    color = list(fill_color[:3])
    if destination.mode == "RGBA":
        color.append(255)
    alpha = (sub_mask.astype(np.float32) / 255.0)[..., None]
    blended = region * (1.0 - alpha) + np.asarray(color, dtype=np.float32) * alpha
    out = np.clip(blended, 0, 255).astype(np.uint8)
    destination.paste(Image.fromarray(out), box[:2])
    return clipped
