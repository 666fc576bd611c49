import json
import sys
from pathlib import Path

import pytest
from PIL import Image, ImageFont

# Ensure the backend package root is on sys.path for direct pytest runs
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from services.fonts import FontResource  # noqa: E402


@pytest.fixture(scope="session")
def font_bytes() -> bytes:
    """Bytes of the FreeType font Pillow bundles as its default."""
    default = ImageFont.load_default(size=12)
    data = getattr(default, "font_bytes", None)
    if not isinstance(default, ImageFont.FreeTypeFont) or not data:
        pytest.skip("Pillow was built without FreeType support")
    return data


@pytest.fixture(scope="session")
def font(font_bytes) -> FontResource:
    return FontResource(font_bytes, name="pillow-default")


@pytest.fixture
def white_canvas():
    def _make(width=500, height=300, mode="RGB"):
        color = (255, 255, 255, 255) if mode == "RGBA" else (255, 255, 255)
        return Image.new(mode, (width, height), color)
    return _make


def _field_json(**overrides):
    data = {
        "text": "TOP TEXT",
        "uppercase": True,
        "start": [10, 10],
        "end": [190, 60],
        "text_size": 32,
        "text_color": [255, 255, 255],
        "border_color": [0, 0, 0],
        "shadow_color": None,
    }
    data.update(overrides)
    return data


@pytest.fixture
def resource_dir(tmp_path, font_bytes):
    """A resource root with one image, one font and a templates/ directory."""
    (tmp_path / "images").mkdir()
    (tmp_path / "fonts").mkdir()
    (tmp_path / "templates").mkdir()
    Image.new("RGB", (200, 150), (30, 90, 160)).save(tmp_path / "images" / "sky.png")
    (tmp_path / "fonts" / "default.ttf").write_bytes(font_bytes)
    return tmp_path


@pytest.fixture
def write_template(resource_dir):
    def _write(name, fields=None, image_path="images/sky.png", font_path="fonts/default.ttf"):
        payload = {
            "template_name": name,
            "image_path": image_path,
            "font_path": font_path,
            "text_fields": fields if fields is not None else [
                _field_json(),
                _field_json(text="bottom text", start=[10, 90], end=[190, 140], shadow_color=[0, 0, 0]),
            ],
        }
        path = resource_dir / "templates" / f"{name}.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def field_json():
    return _field_json
