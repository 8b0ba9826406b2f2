"""Game Genie code decoding and a helper for finding cheat values in RAM."""

from __future__ import annotations

from dataclasses import dataclass
from typing import MutableSequence

LETTERS = "AEPOZXLUGKISTVYN"
CODE_LENGTH = 8
LOW_MEM_SIZE = 0x800
DEFAULT_BANK_SIZE = 32 * 1024

_BANK_SIZES = {
    1: 16 * 1024,  # MMC1
    71: 16 * 1024,  # Camerica
    232: 16 * 1024,  # Quattro
    4: 8 * 1024,  # MMC3
    5: 8 * 1024,  # MMC5
    24: 8 * 1024,  # VRC6
    26: 8 * 1024,  # VRC6
    69: 8 * 1024,  # FME7
}


class GameGenieError(ValueError):
    """Raised for a Game Genie code that cannot be decoded."""


@dataclass(frozen=True)
class GameGeniePatch:
    """A decoded code: address (always 0x8000 or above), new value, compare value.

    compare_with is -1 when the byte is changed unconditionally.
    """

    addr: int
    change_to: int
    compare_with: int = -1

    @classmethod
    def decode(cls, code: str) -> GameGeniePatch:
        """Decode a six- or eight-letter Game Genie code."""
        if len(code) not in (6, 8):
            raise GameGenieError("Game Genie code is wrong length")
        result = [0] * CODE_LENGTH
        padded = code + "A" * (CODE_LENGTH - len(code))
        for i, char in enumerate(padded):
            upper = char.upper() if char.isascii() else char
            n = LETTERS.find(upper) if len(upper) == 1 else -1
            if n < 0:
                raise GameGenieError("Game Genie code had invalid character")
            result[i] |= n >> 1
            result[(i + 1) % CODE_LENGTH] |= (n << 3) & 0x0F

        addr = result[3] << 12 | result[5] << 8 | result[2] << 4 | result[4]
        change_to = result[1] << 4 | result[0]
        compare_with = -1
        if addr & 0x8000:
            compare_with = result[7] << 4 | result[6]
        return cls(addr | 0x8000, change_to, compare_with)

    def apply(self, prg: MutableSequence[int], mapper_code: int) -> int:
        """Patch every PRG bank of a cartridge and return the number of bytes changed.

        Every bank is patched at the address's offset within the bank, whether or
        not that bank is ever mapped there; 0 means the code does not fit the data.
        """
        bank_size = _BANK_SIZES.get(mapper_code, DEFAULT_BANK_SIZE)
        end = (len(prg) // bank_size) * bank_size
        count = 0
        for pos in range(self.addr % bank_size, end, bank_size):
            if self.compare_with < 0 or prg[pos] == self.compare_with:
                prg[pos] = self.change_to & 0xFF
                count += 1
        return count


class CheatValueFinder:
    """Narrows down RAM addresses whose value changed by a known amount.

    Start with the console's 2 KiB of RAM, rescan repeatedly while the value of
    interest stays the same to rule out busy bytes, then search for bytes that
    moved from one value to another.
    """

    def __init__(self) -> None:
        self._mem: MutableSequence[int] | None = None
        self._original = bytearray(LOW_MEM_SIZE)
        self._changed = bytearray(LOW_MEM_SIZE)
        self._original_value = 0
        self._changed_value = 0
        self._pos = 0

    def _memory(self) -> MutableSequence[int]:
        if self._mem is None:
            raise RuntimeError("start() has not been called")
        return self._mem

    def start(self, low_mem: MutableSequence[int]) -> None:
        """Begin watching low_mem, which must hold at least 0x800 bytes."""
        if len(low_mem) < LOW_MEM_SIZE:
            raise ValueError(f"low memory needs {LOW_MEM_SIZE} bytes, got {len(low_mem)}")
        self._mem = low_mem
        self._pos = 0
        self._original = bytearray(low_mem[:LOW_MEM_SIZE])
        self._changed = bytearray(LOW_MEM_SIZE)

    def rescan(self) -> None:
        """Exclude every byte that changed since the last scan from later matches."""
        mem = self._memory()
        for i, (old, cur) in enumerate(zip(self._original, mem)):
            self._changed[i] |= old ^ cur
        self._original = bytearray(mem[:LOW_MEM_SIZE])

    def search(self, original: int, changed: int) -> None:
        """Start looking for bytes that changed by the difference of the two values."""
        self._original_value = original
        self._changed_value = changed
        self._pos = -1

    def next_match(self) -> tuple[int, int] | None:
        """Return (delta, address) of the next match, or None when none remain.

        The delta is signed; values closer to zero are more likely matches.
        """
        mem = self._memory()
        while self._pos + 1 < LOW_MEM_SIZE:
            self._pos += 1
            pos = self._pos
            if self._changed[pos]:
                continue
            old = (self._original[pos] - self._original_value) & 0xFF
            cur = (mem[pos] - self._changed_value) & 0xFF
            if old == cur:
                return (old - 0x100 if old >= 0x80 else old), pos
        self._pos = LOW_MEM_SIZE
        return None

    def change_value(self, new_value: int) -> int:
        """Store new_value at the current match and return the previous value."""
        mem = self._memory()
        if not 0 <= self._pos < LOW_MEM_SIZE:
            raise IndexError("no current match")
        previous = mem[self._pos]
        mem[self._pos] = new_value & 0xFF
        return previous