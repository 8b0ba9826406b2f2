"""Amplitude-change recording used by the sound chips."""

from __future__ import annotations

from typing import Iterator


class DeltaBuffer:
    """Records amplitude changes as (time, delta) pairs in the order they occur."""

    def __init__(self) -> None:
        self._deltas: list[tuple[int, float]] = []

    def add_delta(self, time: int, delta: float) -> None:
        """Record a change of delta in output amplitude at the given clock time."""
        self._deltas.append((time, delta))

    def clear(self) -> None:
        """Discard every recorded change."""
        self._deltas.clear()

    def __iter__(self) -> Iterator[tuple[int, float]]:
        return iter(list(self._deltas))

    def __len__(self) -> int:
        return len(self._deltas)


class Synth:
    """Scales integer amplitude steps into output deltas.

    unit is the largest amplitude the caller produces; volume(1.0) maps that
    amplitude to an output of 1.0.
    """

    def __init__(self, unit: int = 1) -> None:
        if unit <= 0:
            raise ValueError(f"unit must be positive, got {unit}")
        self.unit = unit
        self._volume_unit = 0.0
        self.volume(1.0)

    @property
    def volume_unit(self) -> float:
        """Output change produced by an amplitude step of one."""
        return self._volume_unit

    def volume(self, v: float) -> None:
        """Set the overall volume."""
        self._volume_unit = v / self.unit

    def offset(self, time: int, delta: int, buffer: DeltaBuffer) -> None:
        """Add an amplitude step to buffer; a zero step records nothing."""
        if delta:
            buffer.add_delta(time, delta * self._volume_unit)