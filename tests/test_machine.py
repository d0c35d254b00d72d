"""Tests for the Chip8 driver: timing, keys, ROM loading and faults."""

import io

import pytest
from chipper import (
    Chip8, Chip8Output, Quirks, ReadWriteIncrementQuirk, BitShiftQuirk, Op,
    UnsupportedOpcode, StackUnderflow, AddressOutOfRange, RomTooLarge, InvalidKey
)
from chipper.logging import EmulatorLogger
from conftest import assemble

FRAME = 1 / 60


def machine_with(*words, **kwargs):
    chip8 = Chip8(seed=0, **kwargs)
    chip8.load_rom(assemble(*words))
    return chip8


class TestCycle:
    """Single-cycle behavior."""

    def test_pc_advances_before_execution(self):
        chip8 = machine_with(0x6001, 0x7002)
        chip8.cycle()
        assert chip8.state.pc == 0x202
        chip8.cycle()
        assert chip8.state.pc == 0x204
        assert chip8.state.V[0] == 3

    def test_skip_adds_to_advanced_pc(self):
        chip8 = machine_with(0x3000, 0x6001, 0x6002)  # V0 == 0, skip
        chip8.cycle()
        assert chip8.state.pc == 0x204

    def test_call_pushes_address_after_call(self):
        chip8 = machine_with(0x2300)
        chip8.cycle()
        assert chip8.state.stack.data[0] == 0x202
        assert chip8.state.pc == 0x300

    def test_draw_reports_redraw(self):
        chip8 = machine_with(0xA050, 0xD015)
        assert chip8.cycle() == Chip8Output.NONE
        assert chip8.cycle() == Chip8Output.REDRAW

    def test_cycle_does_not_touch_timers(self):
        chip8 = machine_with(0x6005, 0xF015, 0xF018, 0x1206)
        for _ in range(10):
            chip8.cycle()
        assert chip8.state.delay_timer == 5
        assert chip8.state.sound_timer == 5

    def test_current_instruction(self):
        chip8 = machine_with(0xD125)
        assert chip8.current_instruction().op is Op.DRAW
        assert chip8.state.pc == 0x200


class TestFaults:
    """Errors leave the machine at the faulting instruction."""

    def test_unsupported_opcode(self):
        chip8 = machine_with(0x6001, 0x0000)
        chip8.cycle()

        with pytest.raises(UnsupportedOpcode) as excinfo:
            chip8.cycle()

        assert excinfo.value.word == 0x0000
        assert chip8.state.pc == 0x202
        assert chip8.state.V[0] == 1

    def test_stack_underflow(self):
        chip8 = machine_with(0x00EE)
        with pytest.raises(StackUnderflow):
            chip8.cycle()
        assert chip8.state.pc == 0x200

    def test_fetch_past_end_of_memory(self):
        chip8 = machine_with(0x1FFF)
        chip8.cycle()
        with pytest.raises(AddressOutOfRange):
            chip8.cycle()

    def test_tick_propagates_faults(self):
        chip8 = machine_with(0x6001)  # followed by 0000
        with pytest.raises(UnsupportedOpcode):
            chip8.tick(FRAME)
        assert chip8.state.V[0] == 1
        assert chip8.state.pc == 0x202


class TestTiming:
    """Clock and 60 Hz timer interleaving under tick()."""

    def test_one_frame_runs_eight_cycles_at_500hz(self):
        chip8 = machine_with(0x7001, 0x1200)
        chip8.tick(FRAME)
        assert chip8.state.V[0] == 4  # 8 cycles, half of them adds

    def test_clock_speed_is_adjustable(self):
        chip8 = machine_with(0x7001, 0x1200)
        chip8.clock_hz = 60
        chip8.tick(FRAME)
        assert chip8.state.V[0] == 1
        assert chip8.state.pc == 0x202

    def test_invalid_clock_speed(self, chip8):
        with pytest.raises(ValueError):
            chip8.clock_hz = 0

    def test_sub_period_remainder_carries_over(self):
        chip8 = machine_with(0x7001, 0x7001, 0x7001, 0x1200)
        chip8.tick(0.001)
        assert chip8.state.V[0] == 0
        chip8.tick(0.001)
        assert chip8.state.V[0] == 1

    def test_timer_decrements_once_per_frame(self):
        chip8 = machine_with(0x6008, 0xF018, 0x1204)
        chip8.cycle()
        chip8.cycle()
        assert chip8.state.sound_timer == 8

        assert chip8.tick(FRAME) == Chip8Output.TICK
        assert chip8.state.sound_timer == 7

    def test_timers_decrement_floor_of_elapsed_frames(self):
        chip8 = machine_with(0x6030, 0xF015, 0xF018, 0x1206)
        for _ in range(3):
            chip8.cycle()

        for _ in range(10):
            chip8.tick(FRAME)

        assert chip8.state.delay_timer == 0x30 - 10
        assert chip8.state.sound_timer == 0x30 - 10

    def test_timer_set_mid_tick_sees_later_decrement(self):
        chip8 = machine_with(0x6005, 0xF015, 0x1204)

        # 12 cycles; the 60 Hz boundary falls between cycles 8 and 9
        chip8.tick(0.025)

        assert chip8.state.delay_timer == 4

    def test_reads_before_boundary_see_old_value(self):
        chip8 = machine_with(0x6005, 0xF015, 0xF107, 0x1204)
        chip8.cycle()
        chip8.cycle()

        chip8.tick(FRAME)

        assert chip8.state.V[1] == 5
        assert chip8.state.delay_timer == 4

    def test_reads_after_boundary_see_new_value(self):
        chip8 = machine_with(0x6005, 0xF015, 0xF107, 0x1204)
        chip8.cycle()
        chip8.cycle()

        chip8.tick(0.025)

        assert chip8.state.V[1] == 4

    def test_half_frames_accumulate(self):
        chip8 = machine_with(0x6004, 0xF015, 0x1204)
        chip8.cycle()
        chip8.cycle()

        chip8.tick(FRAME / 2)
        assert chip8.state.delay_timer == 4
        chip8.tick(FRAME / 2)
        assert chip8.state.delay_timer == 3

    def test_timers_saturate_at_zero(self):
        chip8 = machine_with(0x6001, 0xF015, 0xF018, 0x1206)
        for _ in range(3):
            chip8.cycle()

        previous = int(chip8.state.delay_timer)
        for _ in range(5):
            chip8.tick(FRAME)
            current = int(chip8.state.delay_timer)
            assert 0 <= current <= previous
            previous = current

        assert chip8.state.delay_timer == 0
        assert chip8.state.sound_timer == 0
        assert not chip8.sound_active

    def test_sound_active(self):
        chip8 = machine_with(0x6002, 0xF018, 0x1204)
        chip8.cycle()
        chip8.cycle()
        assert chip8.sound_active

    def test_redraw_beats_tick(self):
        chip8 = machine_with(0xA050, 0xD015, 0x1204)
        assert chip8.tick(FRAME) == Chip8Output.REDRAW

    def test_tick_without_elapsed_time(self, chip8):
        assert chip8.tick(0.0) == Chip8Output.NONE
        assert chip8.state.pc == 0x200


class TestDebugMode:
    """Pausing through the debug flag."""

    def test_tick_is_a_no_op(self):
        chip8 = machine_with(0x7001, 0x1200, debug=True)
        assert chip8.tick(1.0) == Chip8Output.NONE
        assert chip8.state.pc == 0x200
        assert chip8.state.V[0] == 0

    def test_step_runs_one_cycle(self):
        chip8 = machine_with(0x7001, 0x1200, debug=True)
        chip8.step()
        assert chip8.state.V[0] == 1
        assert chip8.state.pc == 0x202
        chip8.step()
        assert chip8.state.pc == 0x200


class TestWaitForKeyRelease:
    """FX0A suspends until a pressed key goes up."""

    def test_cycle_is_a_no_op_while_waiting(self):
        chip8 = machine_with(0xF30A, 0x7001)
        chip8.cycle()
        assert not chip8.state.running

        assert chip8.cycle() == Chip8Output.NONE
        assert chip8.state.pc == 0x202
        assert chip8.state.V[0] == 0

    def test_press_alone_does_not_resume(self):
        chip8 = machine_with(0xF30A, 0x7001)
        chip8.cycle()
        chip8.press_key(0x5)
        chip8.cycle()
        assert not chip8.state.running
        assert chip8.state.V[0] == 0

    def test_release_of_pressed_key_resumes(self):
        chip8 = machine_with(0xF30A, 0x7001)
        chip8.cycle()
        chip8.press_key(0x5)
        chip8.release_key(0x5)

        assert chip8.state.running
        assert chip8.state.V[3] == 0x5
        chip8.cycle()
        assert chip8.state.V[0] == 1

    def test_release_of_unpressed_key_is_ignored(self):
        chip8 = machine_with(0xF30A, 0x7001)
        chip8.cycle()
        chip8.release_key(0x7)
        assert not chip8.state.running
        assert chip8.state.V[3] == 0

    def test_key_held_before_wait_counts(self):
        chip8 = machine_with(0xF30A)
        chip8.press_key(0xC)
        chip8.cycle()
        chip8.release_key(0xC)
        assert chip8.state.running
        assert chip8.state.V[3] == 0xC

    def test_timers_keep_running_while_waiting(self):
        chip8 = machine_with(0x6003, 0xF015, 0xF00A)
        for _ in range(3):
            chip8.cycle()
        chip8.tick(FRAME)
        assert chip8.state.delay_timer == 2
        assert chip8.state.pc == 0x206

    def test_key_state(self, chip8):
        chip8.press_key(0xF)
        assert chip8.state.keypad[0xF]
        chip8.release_key(0xF)
        assert not chip8.state.keypad[0xF]

    @pytest.mark.parametrize("key", [-1, 16, "a", 1.5])
    def test_invalid_key(self, chip8, key):
        with pytest.raises(InvalidKey):
            chip8.press_key(key)
        with pytest.raises(ValueError):
            chip8.release_key(key)


class TestRomLoading:
    """ROM loading, reset and configuration."""

    def test_rom_lands_at_program_start(self, chip8):
        chip8.load_rom(b"\x12\x34\x56")
        assert [int(b) for b in chip8.state.memory[0x200:0x203]] == [0x12, 0x34, 0x56]
        assert chip8.state.memory[0x1FF] == 0

    def test_largest_rom_fits(self, chip8):
        chip8.load_rom(bytes([0xAB]) * (4096 - 512))
        assert chip8.state.memory[0xFFF] == 0xAB

    def test_rom_too_large(self, chip8):
        with pytest.raises(RomTooLarge):
            chip8.load_rom(bytes(4096 - 512 + 1))

    def test_load_rom_from_file(self, chip8, tmp_path):
        path = tmp_path / "test.ch8"
        path.write_bytes(assemble(0x6042))
        chip8.load_rom_from_file(str(path))
        chip8.cycle()
        assert chip8.state.V[0] == 0x42

    def test_reset_reloads_rom(self):
        chip8 = machine_with(0x6042, 0x2300)
        chip8.cycle()
        chip8.cycle()
        chip8.reset()

        assert chip8.state.pc == 0x200
        assert chip8.state.V[0] == 0
        assert chip8.state.stack.pointer == 0
        assert chip8.state.memory[0x200] == 0x60

    def test_from_config(self):
        chip8 = Chip8.from_config({
            "seed": 3,
            "clock_hz": 700,
            "debug": True,
            "log_level": "ERROR",
            "quirks": {"read_write_increment": "INCREMENT_INDEX", "bit_shift": "shift_y_into_x"},
        })

        assert chip8.clock_hz == 700.0
        assert chip8.debug
        assert chip8.quirks == Quirks(ReadWriteIncrementQuirk.INCREMENT_INDEX, BitShiftQuirk.SHIFT_Y_INTO_X)
        assert chip8.state.quirks == chip8.quirks

    def test_unknown_quirk_name(self):
        with pytest.raises(ValueError):
            Quirks.from_names(bit_shift="sideways")

    def test_register_dump(self):
        chip8 = machine_with(0x6A7F)
        chip8.cycle()
        dump = chip8.register_dump()
        assert "PC = 202" in dump
        assert "VA = 7F" in dump
        assert "DT = 00" in dump


class TestLogging:
    """Instruction traces and faults go through the emulator logger."""

    def make_logged(self, *words):
        stream = io.StringIO()
        logger = EmulatorLogger(log_level="DEBUG", stream=stream, show_timestamps=False)
        chip8 = Chip8(seed=0, logger=logger)
        chip8.load_rom(assemble(*words))
        return chip8, stream

    def test_trace(self):
        chip8, stream = self.make_logged(0x6001)
        chip8.cycle()
        assert "200: 6001  LD V0, 0x01" in stream.getvalue()

    def test_fault(self):
        chip8, stream = self.make_logged(0x00EE)
        with pytest.raises(StackUnderflow):
            chip8.cycle()
        assert "Fault at 200: stack underflow" in stream.getvalue()

    def test_level_filtering(self):
        stream = io.StringIO()
        logger = EmulatorLogger(log_level="WARNING", stream=stream)
        logger.info("hidden")
        logger.warning("shown")
        assert "hidden" not in stream.getvalue()
        assert "shown" in stream.getvalue()

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            EmulatorLogger(log_level="LOUD")
