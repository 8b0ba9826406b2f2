"""Konami VRC6 sound: two pulse channels and a sawtooth channel."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import ClassVar

from nesaux.synth import DeltaBuffer, Synth

OSC_COUNT = 3
REG_COUNT = 3
# Oscillator n's write-only registers are at BASE_ADDR + n * ADDR_STEP + 0..2.
BASE_ADDR = 0x9000
ADDR_STEP = 0x1000

_VOLUME_FACTOR = 0.0967 * 2


@dataclass
class Vrc6State:
    """Snapshot of the chip; 20 bytes when packed."""

    regs: tuple[bytes, bytes, bytes] = (bytes(3), bytes(3), bytes(3))
    saw_amp: int = 0
    delays: tuple[int, int, int] = (0, 0, 0)
    phases: tuple[int, int, int] = (0, 0, 0)

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<9sB3H3Bx")
    SIZE: ClassVar[int] = 20

    def pack(self) -> bytes:
        if len(self.regs) != OSC_COUNT or any(len(bytes(r)) != REG_COUNT for r in self.regs):
            raise ValueError("regs must hold three groups of three bytes")
        if len(self.delays) != OSC_COUNT or len(self.phases) != OSC_COUNT:
            raise ValueError("delays and phases must hold three values")
        try:
            return self._STRUCT.pack(
                b"".join(bytes(r) for r in self.regs),
                self.saw_amp,
                *self.delays,
                *self.phases,
            )
        except struct.error as exc:
            raise ValueError(str(exc)) from exc

    @classmethod
    def unpack(cls, data: bytes) -> Vrc6State:
        data = bytes(data)
        if len(data) != cls.SIZE:
            raise ValueError(f"vrc6 state needs {cls.SIZE} bytes, got {len(data)}")
        regs, saw_amp, d0, d1, d2, p0, p1, p2 = cls._STRUCT.unpack(data)
        return cls(
            (regs[0:3], regs[3:6], regs[6:9]),
            saw_amp,
            (d0, d1, d2),
            (p0, p1, p2),
        )


@dataclass
class _Vrc6Osc:
    regs: bytearray = field(default_factory=lambda: bytearray(REG_COUNT))
    output: DeltaBuffer | None = None
    delay: int = 0
    last_amp: int = 0
    phase: int = 1
    amp: int = 0  # saw only

    @property
    def period(self) -> int:
        return (self.regs[2] & 0x0F) * 0x100 + self.regs[1] + 1


class Vrc6Apu:
    """The VRC6 sound generator, run in CPU clock time."""

    def __init__(self) -> None:
        self._oscs = [_Vrc6Osc() for _ in range(OSC_COUNT)]
        self._last_time = 0
        self._saw_synth = Synth(1)
        self._square_synth = Synth(1)
        self.output(None)
        self.volume(1.0)
        self.reset()

    def reset(self) -> None:
        """Clear registers and oscillator state; outputs stay assigned."""
        self._last_time = 0
        for osc in self._oscs:
            osc.regs[:] = bytes(REG_COUNT)
            osc.delay = 0
            osc.last_amp = 0
            osc.phase = 1
            osc.amp = 0

    def volume(self, v: float) -> None:
        """Set the overall volume."""
        self._saw_synth.volume(_VOLUME_FACTOR / 31 * v)
        self._square_synth.volume(_VOLUME_FACTOR * 0.5 / 15 * v)

    def output(self, buffer: DeltaBuffer | None) -> None:
        """Send every oscillator to buffer, or silence them all with None."""
        for index in range(OSC_COUNT):
            self.osc_output(index, buffer)

    def osc_output(self, index: int, buffer: DeltaBuffer | None) -> None:
        """Send one oscillator to buffer, or silence it with None."""
        if not 0 <= index < OSC_COUNT:
            raise IndexError(f"oscillator {index} out of range")
        self._oscs[index].output = buffer

    def end_frame(self, time: int) -> None:
        """Run to time and start a new frame there."""
        if time > self._last_time:
            self._run_until(time)
        self._last_time -= time

    def write_osc(self, time: int, osc: int, reg: int, data: int) -> None:
        """Write a register of one oscillator at the given time."""
        if not 0 <= osc < OSC_COUNT:
            raise IndexError(f"oscillator {osc} out of range")
        if not 0 <= reg < REG_COUNT:
            raise IndexError(f"register {reg} out of range")
        self._run_until(time)
        self._oscs[osc].regs[reg] = data & 0xFF

    def save_state(self) -> Vrc6State:
        """Capture registers and oscillator state."""
        return Vrc6State(
            tuple(bytes(osc.regs) for osc in self._oscs),
            self._oscs[2].amp & 0xFF,
            tuple(osc.delay for osc in self._oscs),
            tuple(osc.phase for osc in self._oscs),
        )

    def load_state(self, state: Vrc6State) -> None:
        """Restore a state captured by save_state()."""
        self.reset()
        self._oscs[2].amp = state.saw_amp
        for osc, regs, delay, phase in zip(self._oscs, state.regs, state.delays, state.phases):
            osc.regs[:] = bytes(regs)
            osc.delay = delay
            osc.phase = phase
        if not self._oscs[2].phase:
            self._oscs[2].phase = 1
        self._run_until(self._last_time)

    def _run_until(self, time: int) -> None:
        self._run_square(self._oscs[0], time)
        self._run_square(self._oscs[1], time)
        self._run_saw(time)
        self._last_time = time

    def _run_square(self, osc: _Vrc6Osc, end_time: int) -> None:
        output = osc.output
        if output is None:
            return
        synth = self._square_synth

        volume = osc.regs[0] & 15 if osc.regs[2] & 0x80 else 0
        gate = osc.regs[0] & 0x80
        duty = ((osc.regs[0] >> 4) & 7) + 1
        delta = (volume if gate or osc.phase < duty else 0) - osc.last_amp
        time = self._last_time
        if delta:
            osc.last_amp += delta
            synth.offset(time, delta, output)

        time += osc.delay
        osc.delay = 0
        period = osc.period
        if volume and not gate and period > 4:
            if time < end_time:
                phase = osc.phase
                while True:
                    phase += 1
                    if phase == 16:
                        phase = 0
                        osc.last_amp = volume
                        synth.offset(time, volume, output)
                    if phase == duty:
                        osc.last_amp = 0
                        synth.offset(time, -volume, output)
                    time += period
                    if time >= end_time:
                        break
                osc.phase = phase
            osc.delay = time - end_time

    def _run_saw(self, end_time: int) -> None:
        osc = self._oscs[2]
        output = osc.output
        if output is None:
            return
        synth = self._saw_synth

        amp = osc.amp
        amp_step = osc.regs[0] & 0x3F
        time = self._last_time
        last_amp = osc.last_amp
        if not osc.regs[2] & 0x80 or not (amp_step | amp):
            osc.delay = 0
            delta = (amp >> 3) - last_amp
            last_amp = amp >> 3
            synth.offset(time, delta, output)
        else:
            time += osc.delay
            if time < end_time:
                period = osc.period * 2
                phase = osc.phase
                while True:
                    phase -= 1
                    if phase == 0:
                        phase = 7
                        amp = 0
                    delta = (amp >> 3) - last_amp
                    if delta:
                        last_amp = amp >> 3
                        synth.offset(time, delta, output)
                    time += period
                    amp = (amp + amp_step) & 0xFF
                    if time >= end_time:
                        break
                osc.phase = phase
                osc.amp = amp
            osc.delay = time - end_time

        osc.last_amp = last_amp