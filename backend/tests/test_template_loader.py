import pytest
from PIL import Image

from domain.models import Border, Point, Shadow
from services.template_loader import (
    ResourceCache,
    TemplateResourceError,
    check_all_resources,
    list_template_names,
    load_template,
    read_template_spec,
)


def test_list_template_names_sorted(resource_dir, write_template):
    write_template("zebra")
    write_template("apple")
    (resource_dir / "templates" / "notes.txt").write_text("ignored")
    assert list_template_names(resource_dir / "templates") == ["apple", "zebra"]


def test_missing_templates_dir_raises(tmp_path):
    with pytest.raises(TemplateResourceError):
        list_template_names(tmp_path / "nope")


def test_missing_template_returns_none(resource_dir):
    assert read_template_spec(resource_dir / "templates", "ghost") is None
    assert load_template(resource_dir / "templates", "ghost", resource_dir) is None


def test_load_template_builds_fields(resource_dir, write_template):
    write_template("weather")
    template = load_template(resource_dir / "templates", "weather", resource_dir)

    assert template.name == "weather"
    assert template.image.size == (200, 150)
    assert template.image.mode == "RGB"
    top, bottom = template.fields
    assert top.start == Point(10, 10) and top.end == Point(190, 60)
    assert top.uppercase
    assert top.effects == (Border((0, 0, 0)),)
    assert bottom.effects == (Shadow((0, 0, 0)), Border((0, 0, 0)))
    assert bottom.text == "bottom text"


def test_rgba_image_keeps_alpha(resource_dir, write_template):
    Image.new("RGBA", (20, 20), (0, 0, 0, 0)).save(resource_dir / "images" / "clear.png")
    write_template("clear", image_path="images/clear.png")
    template = load_template(resource_dir / "templates", "clear", resource_dir)
    assert template.image.mode == "RGBA"


def test_invalid_json_raises(resource_dir):
    (resource_dir / "templates" / "broken.json").write_text("{not json")
    with pytest.raises(TemplateResourceError):
        read_template_spec(resource_dir / "templates", "broken")


def test_out_of_range_color_raises(resource_dir, write_template, field_json):
    write_template("loud", fields=[field_json(text_color=[300, 0, 0])])
    with pytest.raises(TemplateResourceError):
        read_template_spec(resource_dir / "templates", "loud")


def test_corrupt_font_raises(resource_dir, write_template):
    (resource_dir / "fonts" / "bad.ttf").write_bytes(b"not a font")
    write_template("badfont", font_path="fonts/bad.ttf")
    with pytest.raises(TemplateResourceError):
        load_template(resource_dir / "templates", "badfont", resource_dir)


def test_check_all_resources(resource_dir, write_template):
    write_template("one")
    write_template("two")
    assert check_all_resources(resource_dir / "templates", resource_dir) == 2

    write_template("three", image_path="images/missing.png")
    with pytest.raises(TemplateResourceError):
        check_all_resources(resource_dir / "templates", resource_dir)


def test_resource_cache_shares_resources(resource_dir, write_template):
    write_template("one")
    write_template("two")
    cache = ResourceCache.load(resource_dir / "templates", resource_dir)

    assert len(cache) == 2
    assert cache.names() == ["one", "two"]
    assert "one" in cache and "three" not in cache
    assert cache.get("three") is None
    assert cache.get("one").font is cache.get("two").font
    assert cache.get("one").image is cache.get("two").image
