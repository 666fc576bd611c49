"""
Core domain models for the caption renderer.
These are framework-agnostic and can be used across all services.
"""
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, ClassVar, List, NamedTuple, Optional, Tuple

from PIL import Image

if TYPE_CHECKING:
    from services.fonts import FontResource


Color = Tuple[int, int, int]


class Point(NamedTuple):
    """Integer pixel coordinate, origin at the image top-left."""
    x: int
    y: int


def round_half_up(value: float) -> int:
    """Round non-negative pixel quantities the way a ruler would (2.5 -> 3)."""
    return int(value + 0.5)


@dataclass(frozen=True)
class EffectLayer:
    """One colored layer an effect contributes underneath the text."""
    color: Color
    spread_radius: int = 0
    offset: Tuple[int, int] = (0, 0)


@dataclass(frozen=True)
class Shadow:
    """Drop shadow: an undilated copy of the text shifted down and right."""
    color: Color
    offset_ratio: float = 0.06

    kind: ClassVar[str] = "shadow"
    stack_order: ClassVar[int] = 0

    def layer(self, size: float) -> EffectLayer:
        shift = round_half_up(size * self.offset_ratio)
        return EffectLayer(color=self.color, spread_radius=0, offset=(shift, shift))


@dataclass(frozen=True)
class Border:
    """Outline: the text silhouette dilated by a size-relative radius."""
    color: Color
    size_ratio: float = 0.03

    kind: ClassVar[str] = "border"
    stack_order: ClassVar[int] = 1

    def layer(self, size: float) -> EffectLayer:
        return EffectLayer(color=self.color, spread_radius=round_half_up(size * self.size_ratio))


@dataclass(frozen=True)
class TextField:
    """
    A rectangular region of the template where text is written.

    The text is shrunk from `text_size` until it fits between `start` and
    `end`. Effects are drawn underneath the text in their stack order.
    """
    text: str
    start: Point
    end: Point
    text_size: float
    text_color: Color
    uppercase: bool = False
    effects: Tuple = ()

    @property
    def width(self) -> int:
        return self.end.x - self.start.x

    @property
    def height(self) -> int:
        return self.end.y - self.start.y

    @property
    def box(self) -> Tuple[int, int, int, int]:
        return (self.start.x, self.start.y, self.end.x, self.end.y)

    def with_text(self, text: str) -> "TextField":
        return replace(self, text=text)


@dataclass(frozen=True)
class Template:
    """
    A base image, the font used for every field, and the ordered fields.

    Templates are shared read-only between renders; the renderer always
    draws on a copy of `image`.
    """
    name: str
    image: Image.Image
    font: "FontResource"
    fields: Tuple[TextField, ...] = ()

    def with_fields(self, fields) -> "Template":
        return replace(self, fields=tuple(fields))


@dataclass(frozen=True)
class PositionedGlyph:
    """A character placed at a pen position (line top) inside a field box."""
    char: str
    size: float
    x: float
    y: float


@dataclass(frozen=True)
class TextLayout:
    """Result of fitting a text run into a box."""
    size: float
    glyphs: Tuple[PositionedGlyph, ...]
    lines: Tuple[str, ...]
    line_height: int
    block_height: int
    fits: bool
    attempts: Tuple[float, ...] = ()


class FieldOutOfBounds(ValueError):
    """A field box is degenerate or does not lie within the canvas."""

    def __init__(self, reason: str, box: Tuple[int, int, int, int], field_index: Optional[int] = None):
        self.reason = reason
        self.box = box
        self.field_index = field_index
        where = f"field {field_index}" if field_index is not None else "field"
        super().__init__(f"{where} {box}: {reason}")


@dataclass
class RenderReport:
    """Outcome of rendering a whole template."""
    image: Image.Image
    sizes: List[float] = field(default_factory=list)
    skipped: List[FieldOutOfBounds] = field(default_factory=list)
    clipped_pixels: int = 0
