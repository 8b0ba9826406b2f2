"""NES NTSC composite video filter: palette generation and row blitting."""

from __future__ import annotations

from typing import Sequence

from nesaux.ntsc_kernel import (
    ALIGNMENT_COUNT,
    BURST_COUNT,
    BURST_SIZE,
    DEFAULT_DECODER,
    ENTRY_SIZE,
    PALETTE_SIZE,
    RGB_BIAS,
    RGB_BUILDER,
    RGB_KERNEL_SIZE,
    RGB_MASK,
    RGB_OFFSET,
    RGB_UNIT,
    FilterInit,
    NtscSetup,
    clamp,
    gen_kernel,
    pack_rgb,
    rgb_palette_out,
    rgb_to_yiq,
    yiq_to_rgb,
)

IN_CHUNK = 3  # input pixels read per chunk
OUT_CHUNK = 7  # output pixels generated per chunk
BLACK = 15  # palette index for black

# Video format presets
COMPOSITE = NtscSetup(merge_fields=True)
SVIDEO = NtscSetup(
    sharpness=0.2, resolution=0.2, artifacts=-1.0, fringing=-1.0, merge_fields=True
)
RGB = NtscSetup(
    sharpness=0.2,
    resolution=0.7,
    artifacts=-1.0,
    fringing=-1.0,
    bleed=-1.0,
    merge_fields=True,
)
MONOCHROME = NtscSetup(
    saturation=-1.0,
    sharpness=0.2,
    resolution=0.2,
    artifacts=-0.2,
    fringing=-0.2,
    bleed=-1.0,
    merge_fields=True,
)

# phases[i] = cos(i * pi / 6); sin of a colour is phases[c], cos is phases[c + 3]
_PHASES = (
    -1.0, -0.866025, -0.5, 0.0, 0.5, 0.866025,
    1.0, 0.866025, 0.5, 0.0, -0.5, -0.866025,
    -1.0, -0.866025, -0.5, 0.0, 0.5, 0.866025,
    1.0,
)
_LO_LEVELS = (-0.12, 0.00, 0.31, 0.72)
_HI_LEVELS = (0.40, 0.68, 1.00, 1.00)
_TINTS = (0, 6, 10, 8, 2, 4, 0, 0)
_ATTEN_MUL = 0.79399
_ATTEN_SUB = 0.0782838

_KERNEL_SPAN = ALIGNMENT_COUNT * RGB_KERNEL_SIZE
_OUTPUTS = ((0, 1), (2, 3), (4, 5, 6))


def out_width(in_width: int) -> int:
    """Number of output pixels written by blit() for a given input width."""
    if in_width < 1:
        raise ValueError(f"input width must be at least 1, got {in_width}")
    return ((in_width - 1) // IN_CHUNK + 1) * OUT_CHUNK


def in_width(out_width: int) -> int:
    """Number of input pixels whose output fits within out_width (may round down)."""
    if out_width < OUT_CHUNK:
        raise ValueError(f"output width must be at least {OUT_CHUNK}, got {out_width}")
    return (out_width // OUT_CHUNK - 1) * IN_CHUNK + 1


MIN_IN_WIDTH = 256
MIN_OUT_WIDTH = out_width(MIN_IN_WIDTH)
IN_WIDTH_640 = 271
OUT_WIDTH_640 = out_width(IN_WIDTH_640)
OVERSCAN_LEFT_640 = 8
OVERSCAN_RIGHT_640 = IN_WIDTH_640 - 256 - OVERSCAN_LEFT_640
FULL_IN_WIDTH = 283
FULL_OUT_WIDTH = out_width(FULL_IN_WIDTH)
FULL_OVERSCAN_LEFT = 16
FULL_OVERSCAN_RIGHT = FULL_IN_WIDTH - 256 - FULL_OVERSCAN_LEFT


def _merge_kernel_fields(io: list[int]) -> None:
    """Average the three burst phases pairwise without losing precision."""
    for n in range(BURST_SIZE):
        p0 = (io[n] + RGB_BIAS) & RGB_MASK
        p1 = (io[n + BURST_SIZE] + RGB_BIAS) & RGB_MASK
        p2 = (io[n + BURST_SIZE * 2] + RGB_BIAS) & RGB_MASK
        io[n] = (((p0 + p1 - ((p0 ^ p1) & RGB_BUILDER)) >> 1) - RGB_BIAS) & RGB_MASK
        io[n + BURST_SIZE] = (
            ((p1 + p2 - ((p1 ^ p2) & RGB_BUILDER)) >> 1) - RGB_BIAS
        ) & RGB_MASK
        io[n + BURST_SIZE * 2] = (
            ((p2 + p0 - ((p2 ^ p0) & RGB_BUILDER)) >> 1) - RGB_BIAS
        ) & RGB_MASK


def _correct_errors(color: int, out: list[int]) -> None:
    """Adjust kernels so a uniform run of one colour reproduces it exactly."""
    k = RGB_KERNEL_SIZE
    fourth_mask = (RGB_BIAS >> 1) - RGB_BUILDER
    for base in range(0, BURST_COUNT * _KERNEL_SPAN, _KERNEL_SPAN):
        for i in range(k // 2):
            error = (
                color
                - out[base + i]
                - out[base + (i + 12) % k + k]
                - out[base + (i + 10) % k + 2 * k]
                - out[base + i + 7]
                - out[base + i + 5 + k]
                - out[base + i + 3 + 2 * k]
            ) & RGB_MASK
            fourth = ((error + 2 * RGB_BUILDER) >> 2) & fourth_mask
            fourth = (fourth - (RGB_BIAS >> 2)) & RGB_MASK
            for index in (base + i + 3 + 2 * k, base + i + 5 + k, base + i + 7):
                out[index] = (out[index] + fourth) & RGB_MASK
            out[base + i] = (out[base + i] + error - fourth * 3) & RGB_MASK


def _to_rgb565(raw: int) -> int:
    return (raw >> 13 & 0xF800) | (raw >> 8 & 0x07E0) | (raw >> 4 & 0x001F)


class NesNtsc:
    """Filter tables for every palette entry, and a 16-bit RGB blitter.

    palette holds the 512 generated colours as 3 bytes each.
    """

    def __init__(self, setup: NtscSetup | None = None) -> None:
        if setup is None:
            setup = COMPOSITE
        self.setup = setup
        impl = FilterInit(setup)

        gamma = setup.gamma * -0.5
        if setup.uses_standard_hue:
            gamma += 0.1333
        gamma_factor = abs(gamma) ** 0.73
        if gamma < 0:
            gamma_factor = -gamma_factor

        merge_fields = bool(setup.merge_fields)
        if setup.artifacts <= -1 and setup.fringing <= -1:
            merge_fields = True

        table: list[int] = []
        palette = bytearray()
        for entry in range(PALETTE_SIZE):
            y, i, q = self._entry_yiq(setup, entry, gamma_factor)
            r, g, b = (int(v) for v in yiq_to_rgb(y, i, q, impl.to_rgb))
            # blue tends to overflow, so clamp it
            rgb = pack_rgb(r, g, min(b, 0x3E0))
            palette += rgb_palette_out(rgb)

            kernel = gen_kernel(impl, y, i, q)
            if merge_fields:
                _merge_kernel_fields(kernel)
            _correct_errors(rgb, kernel)
            kernel.extend([0] * (ENTRY_SIZE - len(kernel)))
            table.extend(kernel)

        self.table = table
        self.palette = bytes(palette)

    @staticmethod
    def _entry_yiq(
        setup: NtscSetup, entry: int, gamma_factor: float
    ) -> tuple[float, float, float]:
        level = entry >> 4 & 0x03
        lo = _LO_LEVELS[level]
        hi = _HI_LEVELS[level]
        color = entry & 0x0F
        if color == 0:
            lo = hi
        if color == 0x0D:
            hi = lo
        if color > 0x0D:
            hi = lo = 0.0

        sat = (hi - lo) * 0.5
        i = _PHASES[color] * sat
        q = _PHASES[color + 3] * sat
        y = (hi + lo) * 0.5

        if setup.base_palette:
            start = (entry & 0x3F) * 3
            r, g, b = (c / 0xFF for c in setup.base_palette[start : start + 3])
            y, i, q = rgb_to_yiq(r, g, b)

        # colour emphasis
        tint = entry >> 6 & 7
        if tint and color <= 0x0D:
            if tint == 7:
                y = y * (_ATTEN_MUL * 1.13) - (_ATTEN_SUB * 1.13)
            else:
                tint_color = _TINTS[tint]
                tint_sat = hi * (0.5 - _ATTEN_MUL * 0.5) + _ATTEN_SUB * 0.5
                y -= tint_sat * 0.5
                if tint >= 3 and tint != 4:
                    # combined tint bits
                    tint_sat *= 0.6
                    y -= tint_sat
                i += _PHASES[tint_color] * tint_sat
                q += _PHASES[tint_color + 3] * tint_sat

        if setup.palette:
            start = entry * 3
            r, g, b = (c / 0xFF for c in setup.palette[start : start + 3])
            y, i, q = rgb_to_yiq(r, g, b)

        y *= setup.contrast * 0.5 + 1
        # adjustment reduces error when using an input palette
        y += setup.brightness * 0.5 - 0.5 / 256

        r, g, b = yiq_to_rgb(y, i, q, DEFAULT_DECODER)
        # fast approximation of n = pow(n, gamma)
        r = (r * gamma_factor - gamma_factor) * r + r
        g = (g * gamma_factor - gamma_factor) * g + g
        b = (b * gamma_factor - gamma_factor) * b + b
        y, i, q = rgb_to_yiq(r, g, b)

        return y * RGB_UNIT + RGB_OFFSET, i * RGB_UNIT, q * RGB_UNIT

    def _pixel(self, x: int, k: Sequence[int], kx: Sequence[int]) -> int:
        t = self.table
        raw = (
            t[k[0] + x]
            + t[k[1] + (x + 12) % 7 + 14]
            + t[k[2] + (x + 10) % 7 + 28]
            + t[kx[0] + (x + 7) % 14]
            + t[kx[1] + (x + 5) % 7 + 21]
            + t[kx[2] + (x + 3) % 7 + 35]
        ) & RGB_MASK
        return _to_rgb565(clamp(raw, 0))

    def blit(
        self,
        pixels: Sequence[int],
        in_row_width: int,
        burst_phase: int,
        in_width: int,
        in_height: int,
    ) -> list[list[int]]:
        """Filter rows of palette indices into rows of 16-bit 5-6-5 RGB pixels.

        Row n of the input starts at n * in_row_width. Each output row holds
        out_width(in_width) pixels; the burst phase advances by one per row.
        """
        if in_width < 1:
            raise ValueError(f"input width must be at least 1, got {in_width}")
        if in_height < 0:
            raise ValueError(f"input height must not be negative, got {in_height}")
        if in_row_width < 0:
            raise ValueError(f"row width must not be negative, got {in_row_width}")
        if not 0 <= burst_phase < BURST_COUNT:
            raise ValueError(f"burst phase must be 0, 1 or 2, got {burst_phase}")

        chunk_count = (in_width - 1) // IN_CHUNK
        rows: list[list[int]] = []
        for row in range(in_height):
            start = row * in_row_width
            line = list(pixels[start : start + 1 + chunk_count * IN_CHUNK])
            if len(line) < 1 + chunk_count * IN_CHUNK:
                raise ValueError(f"input too short for row {row}")
            for value in line:
                if not 0 <= value < PALETTE_SIZE:
                    raise ValueError(f"pixel value {value} outside palette")

            offset = burst_phase * BURST_SIZE
            black = BLACK * ENTRY_SIZE + offset
            k = [black, black, line[0] * ENTRY_SIZE + offset]
            kx = [black, black, black]
            out: list[int] = []
            for n, color in enumerate(line[1:] + [BLACK] * IN_CHUNK):
                idx = n % IN_CHUNK
                kx[idx] = k[idx]
                k[idx] = color * ENTRY_SIZE + offset
                out.extend(self._pixel(x, k, kx) for x in _OUTPUTS[idx])
            rows.append(out)
            burst_phase = (burst_phase + 1) % BURST_COUNT
        return rows