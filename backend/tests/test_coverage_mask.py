import numpy as np
import pytest

from domain.models import PositionedGlyph
from services.coverage_mask import disc_offsets, max_into, rasterize, rasterize_glyph
from services.text_layout import fit


def test_disc_offsets():
    assert disc_offsets(0) == ((0, 0),)
    assert set(disc_offsets(1)) == {(0, 0), (1, 0), (-1, 0), (0, 1), (0, -1)}
    offsets = disc_offsets(3)
    assert (3, 0) in offsets and (0, -3) in offsets
    assert (3, 3) not in offsets
    with pytest.raises(ValueError):
        disc_offsets(-1)


def test_max_into_clips_and_never_lowers_coverage():
    buffer = np.zeros((4, 4), dtype=np.uint8)
    buffer[1, 1] = 200
    source = np.full((3, 3), 100, dtype=np.uint8)

    max_into(buffer, source, -1, -1)

    assert buffer[0, 0] == 100
    assert buffer[1, 1] == 200
    assert buffer[0, 1] == 100
    assert buffer[2, 2] == 0
    assert buffer[:, 2:].sum() == 0

    max_into(buffer, source, 10, 10)
    assert buffer.sum() == 100 * 3 + 200


def test_space_has_no_bitmap(font):
    assert rasterize_glyph(font.at_size(20), " ") is None
    coverage, _ = rasterize_glyph(font.at_size(20), "H")
    assert coverage.dtype == np.uint8
    assert coverage.max() == 255


def test_empty_layout_gives_blank_mask(font):
    mask = rasterize([], font, 30, 20)
    assert mask.shape == (20, 30)
    assert not mask.any()


def test_mask_matches_box_and_has_ink(font):
    layout = fit("HELLO", False, 200, 60, 40, font)
    mask = rasterize(layout.glyphs, font, 200, 60)
    assert mask.shape == (60, 200)
    assert mask.max() == 255
    ys, xs = np.nonzero(mask)
    # horizontally centered ink
    assert abs((xs.min() + xs.max()) / 2.0 - 100) <= 3


def test_spread_thickens_silhouette(font):
    layout = fit("HELLO", False, 200, 60, 40, font)
    plain = rasterize(layout.glyphs, font, 200, 60)
    spread = rasterize(layout.glyphs, font, 200, 60, spread_radius=2)
    assert np.all(spread >= plain)
    assert np.count_nonzero(spread) > np.count_nonzero(plain)


def test_spread_reaches_in_from_outside_the_box(font):
    sized = font.at_size(30)
    left, top, right, bottom = sized.getbbox("I")
    # Place the glyph so its ink ends one pixel left of the box.
    glyph = PositionedGlyph(char="I", size=30, x=-right - 1, y=0)
    assert not rasterize([glyph], font, 20, 40).any()
    assert rasterize([glyph], font, 20, 40, spread_radius=3).any()


def test_glyph_far_outside_is_dropped(font):
    glyph = PositionedGlyph(char="H", size=30, x=-1000, y=-1000)
    mask = rasterize([glyph], font, 50, 50, spread_radius=2)
    assert not mask.any()


def test_fractional_negative_origin_rounds_down(font):
    def mask_at(x):
        return rasterize([PositionedGlyph(char="I", size=30, x=x, y=2)], font, 40, 40)

    assert np.array_equal(mask_at(-0.6), mask_at(-1))
    assert np.array_equal(mask_at(0.4), mask_at(0))
    assert not np.array_equal(mask_at(-0.6), mask_at(0.4))
