"""
Font resource shared by templates.

Only the raw font bytes are shared; each call to `at_size` builds its own
FreeType face so concurrent renders never touch the same face object.
"""
from io import BytesIO
from pathlib import Path
from typing import Union

from PIL import ImageFont


class FontResource:
    """Scalable font loaded once and rasterized at any pixel size."""

    def __init__(self, data: bytes, name: str = "font"):
        self.data = bytes(data)
        self.name = name
        # Parse once up front so corrupt files fail at load time, not mid-render.
        ImageFont.truetype(BytesIO(self.data), 12)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "FontResource":
        path = Path(path)
        return cls(path.read_bytes(), name=path.name)

    def at_size(self, size: float) -> ImageFont.FreeTypeFont:
        """Return a new FreeType font at `size` pixels."""
        if size <= 0:
            raise ValueError(f"font size must be positive, got {size}")
        return ImageFont.truetype(BytesIO(self.data), size)

    def __repr__(self) -> str:
        return f"FontResource({self.name!r}, {len(self.data)} bytes)"
