"""CHIP-8 emulator state structures."""

import dataclasses
import secrets
from typing import Optional, Union

import jax
import jax.numpy as jnp
from flax.struct import dataclass, PyTreeNode, field

from chipper.constants import (
    MEMORY_SIZE, PROGRAM_START, FONT_START, FONT_DATA, NUM_REGISTERS, NUM_KEYS, STACK_SIZE
)
from chipper.display import FrameBuffer
from chipper.quirks import Quirks


@dataclasses.dataclass(frozen=True)
class Running:
    """Fetching and executing instructions."""


@dataclasses.dataclass(frozen=True)
class WaitingForKey:
    """Suspended by FX0A until a pressed key is released; the key lands in V[target]."""
    target: int


ExecutionState = Union[Running, WaitingForKey]

RUNNING = Running()


@dataclass(frozen=True)
class StackState:
    """Stack state for subroutine calls."""
    data: jnp.ndarray = field(default_factory=lambda: jnp.zeros(STACK_SIZE, dtype=jnp.uint16))
    pointer: int = 0


class EmulatorState(PyTreeNode):
    """Main CHIP-8 emulator state."""
    rng: jax.Array
    memory: jnp.ndarray = field(default_factory=lambda: jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8))
    pc: jnp.ndarray = field(default_factory=lambda: jnp.astype(PROGRAM_START, jnp.uint16))
    display: FrameBuffer = field(default_factory=FrameBuffer)
    stack: StackState = field(default_factory=StackState)
    delay_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    sound_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    keypad: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_KEYS, dtype=jnp.bool_))
    V: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8))
    I: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    quirks: Quirks = field(pytree_node=False, default=Quirks())
    execution: ExecutionState = field(pytree_node=False, default=RUNNING)

    @property
    def running(self) -> bool:
        return isinstance(self.execution, Running)


def create_state(seed: Optional[int] = None, quirks: Quirks = Quirks()) -> EmulatorState:
    """Create initial emulator state with font data loaded.

    Args:
        seed: Seed for the random number stream. Drawn from the OS entropy pool if omitted.
        quirks: Quirk policy for the lifetime of the state
    """
    if seed is None:
        seed = secrets.randbits(32)
    state = EmulatorState(jax.random.PRNGKey(seed), quirks=quirks)
    return state.replace(memory=state.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA))
