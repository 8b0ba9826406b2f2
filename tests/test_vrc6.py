import pytest

from nesaux.synth import DeltaBuffer
from nesaux.vrc6 import Vrc6Apu, Vrc6State


def test_state_packs_to_twenty_bytes():
    assert len(Vrc6State().pack()) == 20


def test_state_round_trip():
    state = Vrc6State(
        (b"\x01\x02\x03", b"\x04\x05\x06", b"\x07\x08\x09"),
        200,
        (1000, 2, 300),
        (5, 6, 7),
    )
    assert Vrc6State.unpack(state.pack()) == state


def test_state_unpack_wrong_length():
    with pytest.raises(ValueError):
        Vrc6State.unpack(bytes(19))


def test_state_pack_bad_regs():
    with pytest.raises(ValueError):
        Vrc6State(regs=(b"\x00", bytes(3), bytes(3))).pack()


def test_no_output_records_nothing():
    apu = Vrc6Apu()
    buf = DeltaBuffer()
    apu.write_osc(0, 0, 2, 0x80)
    apu.write_osc(0, 0, 0, 0x8F)
    apu.end_frame(100)
    assert len(buf) == 0


def test_gated_square_steps_once():
    apu = Vrc6Apu()
    buf = DeltaBuffer()
    apu.output(buf)
    apu.write_osc(0, 0, 2, 0x80)
    apu.write_osc(0, 0, 0, 0x8F)
    apu.end_frame(100)
    deltas = list(buf)
    assert len(deltas) == 1
    assert deltas[0][1] > 0


def test_running_square_alternates_equal_steps():
    apu = Vrc6Apu()
    buf = DeltaBuffer()
    apu.osc_output(0, buf)
    apu.write_osc(0, 0, 0, 0x0F)
    apu.write_osc(0, 0, 1, 0x10)
    apu.write_osc(0, 0, 2, 0x80)
    apu.end_frame(5000)
    values = [d for _, d in buf]
    assert len(values) > 2
    assert len({abs(v) for v in values}) == 1
    step = abs(values[0])
    assert sum(values) == pytest.approx(0) or sum(values) == pytest.approx(step)
    times = [t for t, _ in buf]
    assert times == sorted(times)


def test_saw_amplitude_never_negative():
    apu = Vrc6Apu()
    buf = DeltaBuffer()
    apu.osc_output(2, buf)
    apu.write_osc(0, 2, 0, 0x3F)
    apu.write_osc(0, 2, 2, 0x80)
    apu.end_frame(2000)
    assert len(buf) > 0
    running = 0.0
    for _, delta in buf:
        running += delta
        assert running >= -1e-12


def test_save_load_round_trip():
    apu = Vrc6Apu()
    apu.output(DeltaBuffer())
    apu.write_osc(0, 0, 0, 0x3A)
    apu.write_osc(0, 0, 1, 0x20)
    apu.write_osc(0, 0, 2, 0x81)
    apu.write_osc(10, 2, 0, 0x15)
    apu.write_osc(10, 2, 2, 0x80)
    apu.end_frame(777)
    state = apu.save_state()
    other = Vrc6Apu()
    other.load_state(state)
    assert other.save_state() == state


def test_load_state_fixes_zero_saw_phase():
    apu = Vrc6Apu()
    apu.load_state(Vrc6State(phases=(0, 0, 0)))
    phases = apu.save_state().phases
    assert phases[2] == 1
    assert phases[0] == 0


def test_reset_state():
    apu = Vrc6Apu()
    state = apu.save_state()
    assert state.regs == (bytes(3), bytes(3), bytes(3))
    assert state.phases == (1, 1, 1)


@pytest.mark.parametrize("osc,reg", [(3, 0), (-1, 0), (0, 3)])
def test_write_osc_bad_index(osc, reg):
    with pytest.raises(IndexError):
        Vrc6Apu().write_osc(0, osc, reg, 0)