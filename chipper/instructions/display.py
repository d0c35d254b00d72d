"""CHIP-8 display operations."""

from chipper import ram
from chipper.constants import SCREEN_WIDTH, SCREEN_HEIGHT, FLAG_REGISTER
from chipper.state import EmulatorState
from chipper.decode import Instruction


def execute_display(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """DXYN - Draw sprite at (VX, VY) with height N, VF = collision."""
    sprite_x = int(state.V[instruction.x]) % SCREEN_WIDTH
    sprite_y = int(state.V[instruction.y]) % SCREEN_HEIGHT
    sprite = [int(row) for row in ram.read(state.memory, state.I, instruction.n)]

    display, collision = state.display.draw(sprite_x, sprite_y, sprite)
    return state.replace(
        display=display,
        V=state.V.at[FLAG_REGISTER].set(int(collision))
    )
