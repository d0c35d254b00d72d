"""CHIP-8 system instructions (00E0, 00EE)."""

from chipper.state import EmulatorState
from chipper.decode import Instruction
from chipper.stack import pop


def execute_clear_screen(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """00E0 - Clear display."""
    return state.replace(display=state.display.clear())


def execute_return(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """00EE - Return from subroutine."""
    stack, address = pop(state.stack)
    return state.replace(stack=stack, pc=address)
