import pytest

from nesaux.ntsc import (
    BLACK,
    MIN_OUT_WIDTH,
    MONOCHROME,
    NesNtsc,
    in_width,
    out_width,
)
from nesaux.ntsc_kernel import ENTRY_SIZE, PALETTE_SIZE


@pytest.fixture(scope="module")
def composite():
    return NesNtsc()


@pytest.fixture(scope="module")
def mono():
    return NesNtsc(MONOCHROME)


def palette_rgb(ntsc, entry):
    return tuple(ntsc.palette[entry * 3 : entry * 3 + 3])


def as_rgb565(rgb):
    r, g, b = rgb
    return (r >> 3) << 11 | (g >> 2) << 5 | b >> 3


def test_out_width_of_256():
    assert out_width(256) == 602
    assert MIN_OUT_WIDTH == out_width(256)


def test_in_width_does_not_round_256_down():
    assert in_width(out_width(256)) == 256


@pytest.mark.parametrize("width", range(7, 80))
def test_in_width_result_fits(width):
    assert out_width(in_width(width)) <= width


def test_width_errors():
    with pytest.raises(ValueError):
        out_width(0)
    with pytest.raises(ValueError):
        in_width(6)


def test_palette_and_table_sizes(composite):
    assert len(composite.palette) == PALETTE_SIZE * 3
    assert len(composite.table) == PALETTE_SIZE * ENTRY_SIZE


def test_blacks_are_identical(composite):
    black = palette_rgb(composite, 0x0F)
    for entry in (0x0E, 0x1F, 0x2E, 0x3F, 0x4F, 0x1EF):
        assert palette_rgb(composite, entry) == black
    start = 0x0F * ENTRY_SIZE
    other = 0x3E * ENTRY_SIZE
    assert composite.table[start : start + ENTRY_SIZE] == composite.table[
        other : other + ENTRY_SIZE
    ]


def test_white_brighter_than_black(composite):
    white = palette_rgb(composite, 0x30)
    black = palette_rgb(composite, 0x0F)
    assert all(w > b for w, b in zip(white, black))


def test_monochrome_palette_is_gray(mono):
    for entry in range(PALETTE_SIZE):
        r, g, b = palette_rgb(mono, entry)
        assert r == g == b


def test_black_row_is_uniform(composite):
    rows = composite.blit([BLACK] * 7, 7, 0, 7, 1)
    assert len(rows) == 1
    assert len(rows[0]) == out_width(7)
    expected = as_rgb565(palette_rgb(composite, BLACK))
    assert set(rows[0]) == {expected}


@pytest.mark.parametrize("color", [0x30, 0x16, 0x21, 0x0F, 0x96])
@pytest.mark.parametrize("phase", [0, 1, 2])
def test_uniform_interior_matches_palette(composite, color, phase):
    rows = composite.blit([color] * 13, 13, phase, 13, 1)
    expected = as_rgb565(palette_rgb(composite, color))
    assert rows[0][14:21] == [expected] * 7


def test_output_shape_and_range(composite):
    pixels = [(i * 37) % 64 for i in range(20 * 3)]
    rows = composite.blit(pixels, 20, 0, 20, 3)
    assert len(rows) == 3
    for row in rows:
        assert len(row) == out_width(20)
        assert all(0 <= p <= 0xFFFF for p in row)


def test_burst_phase_cycles(composite):
    line = [0x01, 0x12, 0x23, 0x34, 0x05, 0x16, 0x27]
    rows = composite.blit(line * 4, 7, 0, 7, 4)
    assert rows[3] == rows[0]
    shifted = composite.blit(line, 7, 1, 7, 1)
    assert shifted[0] == rows[1]


def test_row_width_selects_rows(composite):
    first = [0x21] * 7
    second = [0x0F] * 7
    padded = first + [0] * 3 + second + [0] * 3
    rows = composite.blit(padded, 10, 0, 7, 2)
    single_first = composite.blit(first, 7, 0, 7, 1)[0]
    single_second = composite.blit(second, 7, 1, 7, 1)[0]
    assert rows == [single_first, single_second]


def test_blit_rejects_bad_input(composite):
    with pytest.raises(ValueError):
        composite.blit([PALETTE_SIZE] * 7, 7, 0, 7, 1)
    with pytest.raises(ValueError):
        composite.blit([0] * 7, 7, 3, 7, 1)
    with pytest.raises(ValueError):
        composite.blit([0] * 5, 7, 0, 7, 1)
    with pytest.raises(ValueError):
        composite.blit([0] * 7, 7, 0, 0, 1)


def test_zero_height_gives_no_rows(composite):
    assert composite.blit([], 7, 0, 7, 0) == []