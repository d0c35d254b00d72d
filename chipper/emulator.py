"""Main CHIP-8 emulator execution engine.

Every function here is pure: it takes an :class:`EmulatorState` and returns a
new one. Errors are raised before anything is returned, so a failing call
leaves the caller holding the unchanged previous state.
"""

import enum
import operator
from typing import Union

import jax.numpy as jnp
from chipper import ram
from chipper.state import EmulatorState, RUNNING, WaitingForKey
from chipper.decode import Instruction, Op, decode
from chipper.constants import PROGRAM_START, MAX_ROM_SIZE, NUM_KEYS
from chipper.errors import InvalidKey, RomTooLarge
from chipper.instructions.system import execute_clear_screen, execute_return
from chipper.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key_pressed, execute_skip_if_key_not_pressed
)
from chipper.instructions.alu import execute_alu_operation
from chipper.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chipper.instructions.display import execute_display
from chipper.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer,
    execute_set_sound_timer, execute_add_to_index, execute_font_character,
    execute_bcd_conversion, execute_store_registers, execute_load_registers
)


class Chip8Output(enum.IntEnum):
    """What a host should do after driving the emulator. Combined by taking the maximum."""
    NONE = 0
    TICK = 1    # a timer decremented; refresh the buzzer
    REDRAW = 2  # the frame buffer changed


_HANDLERS = {
    Op.CLEAR_SCREEN: execute_clear_screen,
    Op.RETURN: execute_return,
    Op.JUMP: execute_jump,
    Op.CALL_SUBROUTINE: execute_call,
    Op.SKIP_IF_EQ: execute_skip_if_equal_immediate,
    Op.SKIP_IF_NEQ: execute_skip_if_not_equal_immediate,
    Op.SKIP_IF_EQ_REG: execute_skip_if_equal_register,
    Op.LOAD_CONST: execute_set,
    Op.ADD_CONST: execute_add,
    Op.LOAD: execute_alu_operation,
    Op.OR: execute_alu_operation,
    Op.AND: execute_alu_operation,
    Op.XOR: execute_alu_operation,
    Op.ADD: execute_alu_operation,
    Op.SUB_XY: execute_alu_operation,
    Op.SHIFT_RIGHT: execute_alu_operation,
    Op.SUB_YX: execute_alu_operation,
    Op.SHIFT_LEFT: execute_alu_operation,
    Op.SKIP_IF_NEQ_REG: execute_skip_if_not_equal_register,
    Op.INDEX_ADDRESS: execute_set_index,
    Op.JUMP_WITH_OFFSET: execute_jump_with_offset,
    Op.RANDOM: execute_random,
    Op.DRAW: execute_display,
    Op.SKIP_IF_KEY_PRESSED: execute_skip_if_key_pressed,
    Op.SKIP_IF_KEY_NOT_PRESSED: execute_skip_if_key_not_pressed,
    Op.LOAD_DELAY_INTO_REG: execute_get_delay_timer,
    Op.WAIT_FOR_KEY_RELEASE: execute_wait_for_key,
    Op.LOAD_REG_INTO_DELAY: execute_set_delay_timer,
    Op.LOAD_REG_INTO_SOUND: execute_set_sound_timer,
    Op.ADD_ADDRESS: execute_add_to_index,
    Op.INDEX_FONT: execute_font_character,
    Op.WRITE_BCD: execute_bcd_conversion,
    Op.WRITE_MEMORY: execute_store_registers,
    Op.READ_MEMORY: execute_load_registers,
}


def execute(state: EmulatorState, instruction: Union[int, Instruction]) -> EmulatorState:
    """Execute single CHIP-8 instruction without touching PC first.

    Args:
        state: Current state; PC is expected to already point past the instruction
        instruction: Raw 16-bit word or decoded instruction
    """
    if not isinstance(instruction, Instruction):
        instruction = decode(instruction)
    return _HANDLERS[instruction.op](state, instruction)


def fetch(state: EmulatorState) -> tuple[EmulatorState, int]:
    """Fetch next instruction word from memory and advance PC past it."""
    instruction = ram.read_word(state.memory, state.pc)
    return state.replace(pc=state.pc + 2), instruction


def cycle(state: EmulatorState) -> tuple[EmulatorState, Chip8Output]:
    """Run one fetch-decode-execute cycle.

    A state waiting for a key release is returned unchanged. Timers are not
    touched here; see :func:`tick_timers`.

    Raises:
        UnsupportedOpcode: the word at PC does not decode
        StackUnderflow: RET with an empty call stack
        StackOverflow: CALL with a full call stack
        AddressOutOfRange: the instruction touched memory outside 0x000-0xFFF
    """
    if not state.running:
        return state, Chip8Output.NONE

    next_state, word = fetch(state)
    instruction = decode(word)
    next_state = execute(next_state, instruction)

    if instruction.op is Op.DRAW:
        return next_state, Chip8Output.REDRAW
    return next_state, Chip8Output.NONE


def tick_timers(state: EmulatorState) -> EmulatorState:
    """Decrement delay and sound timers by one, saturating at zero."""
    return state.replace(
        delay_timer=jnp.where(state.delay_timer > 0, state.delay_timer - 1, state.delay_timer),
        sound_timer=jnp.where(state.sound_timer > 0, state.sound_timer - 1, state.sound_timer),
    )


def _check_key(key: int) -> int:
    try:
        index = operator.index(key)
    except TypeError:
        raise InvalidKey(key) from None
    if not 0 <= index < NUM_KEYS:
        raise InvalidKey(key)
    return index


def press_key(state: EmulatorState, key: int) -> EmulatorState:
    """Mark a key as held. Pressing never resumes a state waiting on FX0A."""
    key = _check_key(key)
    return state.replace(keypad=state.keypad.at[key].set(True))


def release_key(state: EmulatorState, key: int) -> EmulatorState:
    """Mark a key as up, completing a pending FX0A if the key was held."""
    key = _check_key(key)
    was_pressed = bool(state.keypad[key])
    state = state.replace(keypad=state.keypad.at[key].set(False))

    if was_pressed and isinstance(state.execution, WaitingForKey):
        target = state.execution.target
        state = state.replace(V=state.V.at[target].set(key), execution=RUNNING)
    return state


def load_rom(state: EmulatorState, rom_data: bytes) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    if len(rom_data) > MAX_ROM_SIZE:
        raise RomTooLarge(len(rom_data), MAX_ROM_SIZE)
    if not rom_data:
        return state
    rom_array = jnp.array(list(rom_data), dtype=jnp.uint8)
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(rom_data)].set(rom_array)
    return state.replace(memory=new_memory)


def load_rom_file(state: EmulatorState, filename: str) -> EmulatorState:
    """Load a ROM file into CHIP-8 memory starting at 0x200."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    return load_rom(state, rom_data)
