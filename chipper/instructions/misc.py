"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax.numpy as jnp
from chipper import ram
from chipper.state import EmulatorState, WaitingForKey
from chipper.decode import Instruction
from chipper.constants import FONT_START, FONT_CHAR_SIZE
from chipper.quirks import ReadWriteIncrementQuirk


def execute_get_delay_timer(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """FX07 - Set VX to delay timer value."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer))


def execute_wait_for_key(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """FX0A - Suspend until a pressed key is released; see ``emulator.release_key``."""
    return state.replace(execution=WaitingForKey(instruction.x))


def execute_set_delay_timer(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=state.V[instruction.x])


def execute_add_to_index(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """FX1E - Add VX to I register. VF untouched, I not masked to 12 bits."""
    new_i = (int(state.I) + int(state.V[instruction.x])) & 0xFFFF
    return state.replace(I=jnp.astype(new_i, jnp.uint16))


def execute_font_character(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """FX29 - Set I to location of sprite for digit VX."""
    font_address = FONT_START + int(state.V[instruction.x]) * FONT_CHAR_SIZE
    return state.replace(I=jnp.astype(font_address, jnp.uint16))


def execute_bcd_conversion(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    value = int(state.V[instruction.x])
    digits = [value // 100, (value // 10) % 10, value % 10]
    return state.replace(memory=ram.write(state.memory, state.I, digits))


def _advance_index(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    if state.quirks.read_write_increment is ReadWriteIncrementQuirk.INCREMENT_INDEX:
        return state.replace(I=state.I + instruction.x + 1)
    return state


def execute_store_registers(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """FX55 - Store V0 through VX in memory starting at I."""
    new_memory = ram.write(state.memory, state.I, state.V[:instruction.x + 1])
    return _advance_index(state.replace(memory=new_memory), instruction)


def execute_load_registers(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """FX65 - Load V0 through VX from memory starting at I."""
    values = ram.read(state.memory, state.I, instruction.x + 1)
    new_V = state.V.at[:instruction.x + 1].set(values)
    return _advance_index(state.replace(V=new_V), instruction)
