"""Bounds-checked access to the 4 KiB CHIP-8 address space."""

from typing import Sequence

import jax.numpy as jnp

from chipper.constants import MEMORY_SIZE
from chipper.errors import AddressOutOfRange


def _check_range(address: int, length: int) -> None:
    if address < 0:
        raise AddressOutOfRange(address)
    if address + length > MEMORY_SIZE:
        raise AddressOutOfRange(max(address, MEMORY_SIZE))


def read(memory: jnp.ndarray, address: int, length: int) -> jnp.ndarray:
    """Return ``memory[address:address + length]``."""
    address = int(address)
    _check_range(address, length)
    return memory[address:address + length]


def write(memory: jnp.ndarray, address: int, values: Sequence[int]) -> jnp.ndarray:
    """Return a copy of memory with ``values`` stored from ``address``."""
    address = int(address)
    _check_range(address, len(values))
    return memory.at[address:address + len(values)].set(jnp.asarray(values, dtype=jnp.uint8))


def read_word(memory: jnp.ndarray, address: int) -> int:
    """Read a big-endian 16-bit word."""
    high, low = (int(b) for b in read(memory, address, 2))
    return (high << 8) | low
