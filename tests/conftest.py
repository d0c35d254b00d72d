"""Test configuration and fixtures for CHIP-8 emulator tests."""

import pytest
import jax.numpy as jnp
from chipper import Chip8, Quirks, create_state, load_rom
from chipper.quirks import ReadWriteIncrementQuirk, BitShiftQuirk


@pytest.fixture
def fresh_state():
    """Provide a fresh, deterministically seeded emulator state for each test."""
    return create_state(seed=0)


@pytest.fixture
def increment_state():
    """Provide a fresh state where FX55/FX65 advance I."""
    return create_state(seed=0, quirks=Quirks(read_write_increment=ReadWriteIncrementQuirk.INCREMENT_INDEX))


@pytest.fixture
def shift_y_state():
    """Provide a fresh state where 8XY6/8XYE shift VY into VX."""
    return create_state(seed=0, quirks=Quirks(bit_shift=BitShiftQuirk.SHIFT_Y_INTO_X))


@pytest.fixture
def chip8():
    """Provide a seeded machine with the default quirks."""
    return Chip8(seed=0)


def assemble(*words):
    """Build ROM bytes from 16-bit instruction words."""
    rom = bytearray()
    for word in words:
        rom += bytes([(word >> 8) & 0xFF, word & 0xFF])
    return bytes(rom)


def state_with_program(state, *words):
    """Load a program assembled from ``words`` at 0x200."""
    return load_rom(state, assemble(*words))


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )
