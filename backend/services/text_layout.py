"""
Text layout service.

Fits a text run into a field box: wraps words at the candidate size, centers
the block, and shrinks the size one pixel at a time until the wrapped block is
no taller than the box.
"""
import logging
from typing import Iterator, List, Tuple

from PIL import ImageFont

from domain.models import PositionedGlyph, TextLayout
from services.fonts import FontResource

logger = logging.getLogger(__name__)

MIN_FONT_SIZE = 1.0
SHRINK_STEP = 1.0


def iter_candidate_sizes(base_size: float, min_size: float = MIN_FONT_SIZE) -> Iterator[float]:
    """
    Yield font sizes to try, largest first.

    Sizes step down by SHRINK_STEP and never go below `min_size`. A base size
    that is already smaller than the minimum is tried on its own.
    """
    if base_size <= 0:
        raise ValueError(f"base size must be positive, got {base_size}")
    if base_size < min_size:
        yield base_size
        return
    size = base_size
    while size >= min_size:
        yield size
        size -= SHRINK_STEP


def _break_word(word: str, font: ImageFont.FreeTypeFont, max_width: float) -> List[str]:
    """Split a word that is wider than the box between characters."""
    pieces: List[str] = []
    current = ""
    for char in word:
        candidate = current + char
        if current and font.getlength(candidate) > max_width:
            pieces.append(current)
            current = char
        else:
            current = candidate
    if current:
        pieces.append(current)
    return pieces


def wrap_lines(text: str, font: ImageFont.FreeTypeFont, max_width: float) -> List[str]:
    """
    Greedy word wrap.

    Newlines are hard breaks, runs of whitespace collapse to a single space,
    and words wider than `max_width` are broken between characters.
    """
    if not text.strip():
        return []

    lines: List[str] = []
    for paragraph in text.split("\n"):
        words = paragraph.split()
        if not words:
            lines.append("")
            continue
        current = ""
        for word in words:
            candidate = f"{current} {word}" if current else word
            if font.getlength(candidate) <= max_width:
                current = candidate
                continue
            if current:
                lines.append(current)
                current = ""
            if font.getlength(word) <= max_width:
                current = word
            else:
                pieces = _break_word(word, font, max_width)
                lines.extend(pieces[:-1])
                current = pieces[-1]
        lines.append(current)
    return lines


def _line_metrics(font: ImageFont.FreeTypeFont) -> int:
    ascent, descent = font.getmetrics()
    return ascent + descent


def measure_at_size(text: str, box_width: int, font: ImageFont.FreeTypeFont) -> Tuple[Tuple[str, ...], int, int]:
    """Wrap `text` at one size; returns (lines, line_height, block_height)."""
    lines = wrap_lines(text, font, box_width)
    line_height = _line_metrics(font)
    return tuple(lines), line_height, line_height * len(lines)


def position_glyphs(
    lines: Tuple[str, ...],
    box_width: int,
    box_height: int,
    size: float,
    font: ImageFont.FreeTypeFont,
    line_height: int,
) -> Tuple[PositionedGlyph, ...]:
    """Center each wrapped line and the whole block inside the box."""
    top = (box_height - line_height * len(lines)) / 2.0
    glyphs: List[PositionedGlyph] = []
    for row, line in enumerate(lines):
        left = (box_width - font.getlength(line)) / 2.0
        y = top + row * line_height
        for col, char in enumerate(line):
            if char.isspace():
                continue
            x = left + font.getlength(line[:col]) if col else left
            glyphs.append(PositionedGlyph(char=char, size=size, x=x, y=y))
    return tuple(glyphs)


def fit(
    text: str,
    uppercase: bool,
    box_width: int,
    box_height: int,
    base_size: float,
    font: FontResource,
    min_size: float = MIN_FONT_SIZE,
) -> TextLayout:
    """
    Fit `text` into a `box_width` x `box_height` box.

    Rejected sizes are only measured; glyphs are positioned once, for the
    size that is finally used.

    Args:
        text: Text to lay out
        uppercase: Force the text to uppercase before measuring
        box_width: Box width in pixels
        box_height: Box height in pixels
        base_size: Largest size to try
        font: Font resource to measure with
        min_size: Smallest size the shrink loop may reach

    Returns:
        TextLayout with glyph positions relative to the box top-left. When no
        candidate fits, the smallest attempted layout with fits=False.
    """
    if uppercase:
        text = text.upper()

    attempts: List[float] = []
    fits = False
    for size in iter_candidate_sizes(base_size, min_size):
        attempts.append(size)
        sized = font.at_size(size)
        lines, line_height, block_height = measure_at_size(text, box_width, sized)
        if block_height <= box_height:
            fits = True
            break
        logger.debug("[text_layout] size=%s block_height=%s > box_height=%s, shrinking", size, block_height, box_height)
    else:
        logger.debug("[text_layout] no size fits %sx%s box; using smallest size=%s", box_width, box_height, size)

    return TextLayout(
        size=size,
        glyphs=position_glyphs(lines, box_width, box_height, size, sized, line_height),
        lines=lines,
        line_height=line_height,
        block_height=block_height,
        fits=fits,
        attempts=tuple(attempts),
    )
