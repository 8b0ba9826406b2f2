# nesaux

Pure-Python building blocks for NES emulation. The package has no runtime dependencies.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## What is included

| Module | Purpose |
| --- | --- |
| `nesaux.endian` | Reads and writes of 16- and 32-bit little- and big-endian integers on byte buffers (`get_le16`, `get_be32`, `set_le32`, `set_be16`, …). The setters raise `IndexError` when the value does not fit in the buffer. |
| `nesaux.memwriter` | `MemWriter` collects written bytes in memory. With no capacity it grows as needed. With a capacity it raises `WriteOverflowError` on excess data, or drops that data when `ignore_excess=True`. The current mode is given by `WriteMode`. |
| `nesaux.synth` | `Synth` scales integer amplitude steps by a volume. `DeltaBuffer` records the resulting `(time, delta)` pairs. |
| `nesaux.vrc6` | The Konami VRC6 expansion sound chip, with two pulse channels and a sawtooth (`Vrc6Apu`), and its 20-byte snapshot (`Vrc6State`). |
| `nesaux.game_genie` | Game Genie code decoding and PRG patching (`GameGeniePatch`, `GameGenieError`), and `CheatValueFinder` for narrowing down RAM addresses. |
| `nesaux.ntsc_kernel` | NTSC filter parameters (`NtscSetup`) and the derived filter state (`FilterInit`). Also colour conversion and packing helpers: `rgb_to_yiq`, `yiq_to_rgb`, `pack_rgb`, `clamp`, `rgb_palette_out` and `gen_kernel`. |
| `nesaux.ntsc` | The NTSC composite video filter `NesNtsc`, with the presets `COMPOSITE`, `SVIDEO`, `RGB` and `MONOCHROME` and the helpers `out_width` and `in_width`. |

## Examples

Decode a Game Genie code and patch PRG ROM:

```python
from nesaux.game_genie import GameGeniePatch

patch = GameGeniePatch.decode("SXIOPO")
prg = bytearray(32 * 1024)
changed = patch.apply(prg, mapper_code=0)   # number of bytes changed
```

Search RAM for a value that went from 3 to 2:

```python
from nesaux.game_genie import CheatValueFinder

ram = bytearray(0x800)
finder = CheatValueFinder()
finder.start(ram)
# ... let the game run, then call finder.rescan() while the value stays the same ...
finder.search(3, 2)
match = finder.next_match()   # (signed delta, address) or None
```

Run a VRC6 square channel and collect its amplitude changes:

```python
from nesaux.synth import DeltaBuffer
from nesaux.vrc6 import Vrc6Apu

apu = Vrc6Apu()
buf = DeltaBuffer()
apu.output(buf)
apu.write_osc(0, 0, 0, 0x7F)   # volume 15, duty 8
apu.write_osc(0, 0, 1, 0x40)   # period low
apu.write_osc(0, 0, 2, 0x80)   # enable
apu.end_frame(1000)
for time, delta in buf:
    print(time, delta)
```

Save the chip's state and restore it:

```python
from nesaux.vrc6 import Vrc6State

raw = apu.save_state().pack()          # 20 bytes
apu.load_state(Vrc6State.unpack(raw))
```

Filter rows of palette indices through the NTSC simulation:

```python
from nesaux.ntsc import NesNtsc, out_width

ntsc = NesNtsc()                        # composite preset; ntsc.palette holds 512 RGB colours
pixels = [0x0F] * (256 * 2)
rows = ntsc.blit(pixels, 256, 0, 256, 2)   # rows of 16-bit RGB565 values
assert len(rows[0]) == out_width(256)
```

Building the filter tables and blitting are done in pure Python, so they are slow.

## What this package does not do

This package is not an emulator. It has no CPU, PPU, cartridge loading, or command-line program.

- Of the expansion sound chips, only the VRC6 is provided. There is no FM (YM2413 / VRC7) synthesis.
- There are no layouts for save-state blocks. Only `Vrc6State` packs to and from bytes.
- `DeltaBuffer` only records amplitude changes. It does not resample them into audio samples.