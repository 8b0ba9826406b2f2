"""NTSC composite-video kernel generation: filters, colour conversion and packing.

Colours are packed as three 10-bit fields, red at bit 21, green at bit 11 and
blue at bit 1, with each field biased so that in-range values carry bit 9.
Packed values are unsigned 32-bit integers.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

PI = 3.14159265358979323846

# Filter geometry
ALIGNMENT_COUNT = 3
BURST_COUNT = 3
RESCALE_IN = 8
RESCALE_OUT = 7

ARTIFACTS_MID = 1.0
FRINGING_MID = 1.0
ARTIFACTS_MAX = ARTIFACTS_MID * 1.5
FRINGING_MAX = FRINGING_MID * 2

STD_DECODER_HUE = -15
EXT_DECODER_HUE = STD_DECODER_HUE + 15

LUMA_CUTOFF = 0.20
RGB_BITS = 8
RGB_UNIT = 1 << RGB_BITS
RGB_OFFSET = RGB_UNIT * 2 + 0.5

# Palette and table sizes (colour emphasis enabled: 64 colours x 8 tints)
PALETTE_SIZE = 64 * 8
ENTRY_SIZE = 128
BURST_SIZE = ENTRY_SIZE // BURST_COUNT
KERNEL_HALF = 16
KERNEL_SIZE = KERNEL_HALF * 2 + 1
RGB_KERNEL_SIZE = BURST_SIZE // ALIGNMENT_COUNT

RGB_MASK = 0xFFFFFFFF
RGB_BUILDER = (1 << 21) | (1 << 11) | (1 << 1)
CLAMP_MASK = RGB_BUILDER * 3 // 2
CLAMP_ADD = RGB_BUILDER * 0x101
RGB_BIAS = RGB_UNIT * 2 * RGB_BUILDER

DEFAULT_DECODER: tuple[float, ...] = (0.956, 0.621, -0.272, -0.647, -1.105, 1.702)


@dataclass
class NtscSetup:
    """Image parameters, each nominally ranging from -1.0 to 1.0.

    palette replaces all colour generation (512 RGB entries, 3 bytes each);
    base_palette replaces only the 64 core colours (3 bytes each).
    """

    hue: float = 0.0
    saturation: float = 0.0
    contrast: float = 0.0
    brightness: float = 0.0
    sharpness: float = 0.0
    gamma: float = 0.0
    resolution: float = 0.0
    artifacts: float = 0.0
    fringing: float = 0.0
    bleed: float = 0.0
    merge_fields: bool = False
    decoder_matrix: Sequence[float] | None = None
    palette: bytes | None = None
    base_palette: bytes | None = None

    def __post_init__(self) -> None:
        if self.decoder_matrix is not None and len(self.decoder_matrix) != 6:
            raise ValueError(
                f"decoder matrix needs 6 elements, got {len(self.decoder_matrix)}"
            )
        if self.palette is not None and len(self.palette) < PALETTE_SIZE * 3:
            raise ValueError(f"palette needs {PALETTE_SIZE * 3} bytes, got {len(self.palette)}")
        if self.base_palette is not None and len(self.base_palette) < 64 * 3:
            raise ValueError(f"base palette needs {64 * 3} bytes, got {len(self.base_palette)}")

    @property
    def uses_standard_hue(self) -> bool:
        """True when colours are generated rather than taken from a palette."""
        return not (self.base_palette or self.palette)


def _c_div(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def _pixel_offset(ntsc: int, scaled: int) -> tuple[int, float]:
    inner_ntsc = ntsc - _c_div(scaled, RESCALE_OUT) * RESCALE_IN
    inner_scaled = (scaled + RESCALE_OUT * 10) % RESCALE_OUT
    offset = (
        KERNEL_SIZE // 2
        + inner_ntsc
        + (1 if inner_scaled != 0 else 0)
        + (RESCALE_OUT - inner_scaled) % RESCALE_OUT
        + KERNEL_SIZE * 2 * inner_scaled
    )
    negate = 1.0 - ((ntsc + 100) & 2)
    return offset, negate


@dataclass(frozen=True)
class _PixelInfo:
    offset: int
    negate: float
    kernel: tuple[float, float, float, float]


# Three input pixels become eight composite samples.
PIXELS: tuple[_PixelInfo, ...] = tuple(
    _PixelInfo(*_pixel_offset(ntsc, scaled), kernel)
    for ntsc, scaled, kernel in (
        (-4, -9, (1.0, 1.0, 0.6667, 0.0)),
        (-2, -7, (0.3333, 1.0, 1.0, 0.3333)),
        (0, -5, (0.0, 0.6667, 1.0, 1.0)),
    )
)


def _check_finite(values: Sequence[float]) -> None:
    if any(v != v for v in values):
        raise ValueError("filter kernel is numerically unstable")


def _make_filters(setup: NtscSetup) -> list[float]:
    """Chroma kernel in [0, KERNEL_SIZE), luma kernel in [KERNEL_SIZE, 2*KERNEL_SIZE)."""
    kernels = [0.0] * (KERNEL_SIZE * 2)
    centre = KERNEL_SIZE * 3 // 2
    luma_start = centre - KERNEL_HALF

    # luma: sinc with rolloff
    rolloff = 1 + setup.sharpness * 0.032
    maxh = 32.0
    pow_a_n = rolloff ** maxh
    to_angle = setup.resolution + 1
    to_angle = PI / maxh * LUMA_CUTOFF * (to_angle * to_angle + 1)
    kernels[centre] = maxh
    for i in range(KERNEL_HALF * 2 + 1):
        x = i - KERNEL_HALF
        angle = x * to_angle
        if x or pow_a_n > 1.056 or pow_a_n < 0.981:
            rolloff_cos_a = rolloff * math.cos(angle)
            num = (
                1
                - rolloff_cos_a
                - pow_a_n * math.cos(maxh * angle)
                + pow_a_n * rolloff * math.cos((maxh - 1) * angle)
            )
            den = 1 - rolloff_cos_a - rolloff_cos_a + rolloff * rolloff
            kernels[luma_start + i] = num / den - 0.5

    total = 0.0
    for i in range(KERNEL_HALF * 2 + 1):
        x = PI * 2 / (KERNEL_HALF * 2) * i
        blackman = 0.42 - 0.5 * math.cos(x) + 0.08 * math.cos(x * 2)
        kernels[luma_start + i] *= blackman
        total += kernels[luma_start + i]
    scale = 1.0 / total
    for i in range(KERNEL_HALF * 2 + 1):
        kernels[luma_start + i] *= scale
    _check_finite(kernels[luma_start : luma_start + KERNEL_HALF * 2 + 1])

    # chroma: gaussian
    cutoff_factor = -0.03125
    cutoff = setup.bleed
    if cutoff < 0:
        cutoff = cutoff ** 8 * (-30.0 / 0.65)
    cutoff = cutoff_factor - 0.65 * cutoff_factor * cutoff
    for i in range(-KERNEL_HALF, KERNEL_HALF + 1):
        kernels[KERNEL_SIZE // 2 + i] = math.exp(i * i * cutoff)

    for phase in range(2):
        total = sum(kernels[phase:KERNEL_SIZE:2])
        scale = 1.0 / total
        for x in range(phase, KERNEL_SIZE, 2):
            kernels[x] *= scale
    _check_finite(kernels[:KERNEL_SIZE])
    return kernels


def _rescale(kernels: Sequence[float]) -> list[float]:
    out: list[float] = []
    weight = 1.0
    for _ in range(RESCALE_OUT):
        remain = 0.0
        weight -= 1.0 / RESCALE_IN
        for cur in kernels:
            m = cur * weight
            out.append(m + remain)
            remain = cur - m
    return out


class FilterInit:
    """Derived filter parameters: decoder matrices, levels and rescaled kernels."""

    def __init__(self, setup: NtscSetup) -> None:
        self.setup = setup
        self.brightness = setup.brightness * (0.5 * RGB_UNIT) + RGB_OFFSET
        self.contrast = setup.contrast * (0.5 * RGB_UNIT) + RGB_UNIT

        artifacts = setup.artifacts
        if artifacts > 0:
            artifacts *= ARTIFACTS_MAX - ARTIFACTS_MID
        self.artifacts = artifacts * ARTIFACTS_MID + ARTIFACTS_MID

        fringing = setup.fringing
        if fringing > 0:
            fringing *= FRINGING_MAX - FRINGING_MID
        self.fringing = fringing * FRINGING_MID + FRINGING_MID

        self.filters = _make_filters(setup)
        self.kernel = _rescale(self.filters)

        hue = setup.hue * PI + PI / 180 * EXT_DECODER_HUE
        sat = setup.saturation + 1
        decoder: Sequence[float] | None = setup.decoder_matrix
        if decoder is None:
            decoder = DEFAULT_DECODER
            if setup.uses_standard_hue:
                hue += PI / 180 * (STD_DECODER_HUE - EXT_DECODER_HUE)

        s = math.sin(hue) * sat
        c = math.cos(hue) * sat
        to_rgb: list[float] = []
        for _ in range(BURST_COUNT):
            for k in range(3):
                i, q = decoder[2 * k], decoder[2 * k + 1]
                to_rgb.append(i * c - q * s)
                to_rgb.append(i * s + q * c)
            # rotate by +120 degrees
            s, c = s * -0.5 - c * 0.866025, s * 0.866025 + c * -0.5
        self.to_rgb = to_rgb


def rgb_to_yiq(r: float, g: float, b: float) -> tuple[float, float, float]:
    """Convert RGB to (y, i, q)."""
    y = r * 0.299 + g * 0.587 + b * 0.114
    i = r * 0.596 - g * 0.275 - b * 0.321
    q = r * 0.212 - g * 0.523 + b * 0.311
    return y, i, q


def yiq_to_rgb(
    y: float, i: float, q: float, to_rgb: Sequence[float]
) -> tuple[float, float, float]:
    """Convert (y, i, q) to RGB with the first six elements of a decoder matrix."""
    if len(to_rgb) < 6:
        raise ValueError(f"decoder matrix needs 6 elements, got {len(to_rgb)}")
    return (
        y + to_rgb[0] * i + to_rgb[1] * q,
        y + to_rgb[2] * i + to_rgb[3] * q,
        y + to_rgb[4] * i + to_rgb[5] * q,
    )


def pack_rgb(r: int, g: int, b: int) -> int:
    """Pack three components into the internal 32-bit format."""
    return (r << 21 | g << 11 | b << 1) & RGB_MASK


def clamp(raw: int, shift: int) -> int:
    """Saturate each biased field of a packed colour to 8 bits."""
    sub = raw >> (9 - shift) & CLAMP_MASK
    limit = CLAMP_ADD - sub
    raw |= limit
    limit -= sub
    raw &= limit
    return raw & RGB_MASK


def rgb_palette_out(rgb: int) -> bytes:
    """Clamp a packed colour and return it as three RGB bytes."""
    clamped = clamp(rgb, 8 - RGB_BITS)
    return bytes((clamped >> 21 & 0xFF, clamped >> 11 & 0xFF, clamped >> 1 & 0xFF))


def gen_kernel(impl: FilterInit, y: float, i: float, q: float) -> list[int]:
    """Generate one colour's kernel at every burst phase and column alignment.

    y is expected to include RGB_OFFSET. Returns BURST_COUNT * ALIGNMENT_COUNT *
    RGB_KERNEL_SIZE packed values with RGB_BIAS subtracted.
    """
    k_table = impl.kernel
    out: list[int] = []
    y -= RGB_OFFSET
    wrap_limit = KERNEL_SIZE * 2 * (RESCALE_OUT - 1)
    for burst in range(BURST_COUNT):
        to_rgb = impl.to_rgb[burst * 6 : burst * 6 + 6]
        for pixel in PIXELS:
            pk = pixel.kernel
            yy = y * impl.fringing * pixel.negate
            ic0 = (i + yy) * pk[0]
            qc1 = (q + yy) * pk[1]
            ic2 = (i - yy) * pk[2]
            qc3 = (q - yy) * pk[3]

            factor = impl.artifacts * pixel.negate
            ii = i * factor
            yc0 = (y + ii) * pk[0]
            yc2 = (y - ii) * pk[2]
            qq = q * factor
            yc1 = (y + qq) * pk[1]
            yc3 = (y - qq) * pk[3]

            k = pixel.offset
            for _ in range(RGB_KERNEL_SIZE):
                fi = k_table[k] * ic0 + k_table[k + 2] * ic2
                fq = k_table[k + 1] * qc1 + k_table[k + 3] * qc3
                fy = (
                    k_table[k + KERNEL_SIZE] * yc0
                    + k_table[k + KERNEL_SIZE + 1] * yc1
                    + k_table[k + KERNEL_SIZE + 2] * yc2
                    + k_table[k + KERNEL_SIZE + 3] * yc3
                    + RGB_OFFSET
                )
                if k < wrap_limit:
                    k += KERNEL_SIZE * 2 - 1
                else:
                    k -= wrap_limit + 2
                r, g, b = (int(v) for v in yiq_to_rgb(fy, fi, fq, to_rgb))
                out.append((pack_rgb(r, g, b) - RGB_BIAS) & RGB_MASK)
        # rotate by -120 degrees
        i, q = i * -0.5 - q * -0.866025, i * -0.866025 + q * -0.5
    return out