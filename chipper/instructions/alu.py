"""CHIP-8 ALU operations (8xxx).

Each operation maps ``(vx, vy)`` to ``(result, vf)``; ``vf`` is None when the
operation leaves the flag register alone.
"""

from typing import Optional

from chipper.constants import FLAG_REGISTER
from chipper.state import EmulatorState
from chipper.decode import Instruction, Op
from chipper.quirks import BitShiftQuirk

AluResult = tuple[int, Optional[int]]


def alu_set(vx: int, vy: int) -> AluResult:
    """8XY0 - Set: VX = VY."""
    return vy, None


def alu_or(vx: int, vy: int) -> AluResult:
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy, None


def alu_and(vx: int, vy: int) -> AluResult:
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy, None


def alu_xor(vx: int, vy: int) -> AluResult:
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy, None


def alu_add(vx: int, vy: int) -> AluResult:
    """8XY4 - Add: VX += VY, set carry flag."""
    result = vx + vy
    return result & 0xFF, int(result > 0xFF)


def alu_sub_xy(vx: int, vy: int) -> AluResult:
    """8XY5 - Subtract: VX -= VY, VF = NOT borrow."""
    return (vx - vy) & 0xFF, int(vx >= vy)


def alu_shift_right(source: int) -> AluResult:
    """8XY6 - Shift right, VF = bit shifted out."""
    return source >> 1, source & 1


def alu_sub_yx(vx: int, vy: int) -> AluResult:
    """8XY7 - Subtract: VX = VY - VX, VF = NOT borrow."""
    return (vy - vx) & 0xFF, int(vy >= vx)


def alu_shift_left(source: int) -> AluResult:
    """8XYE - Shift left, VF = bit shifted out."""
    return (source << 1) & 0xFF, (source & 0x80) >> 7


_BINARY_OPS = {
    Op.LOAD: alu_set,
    Op.OR: alu_or,
    Op.AND: alu_and,
    Op.XOR: alu_xor,
    Op.ADD: alu_add,
    Op.SUB_XY: alu_sub_xy,
    Op.SUB_YX: alu_sub_yx,
}

_SHIFT_OPS = {
    Op.SHIFT_RIGHT: alu_shift_right,
    Op.SHIFT_LEFT: alu_shift_left,
}


def execute_alu_operation(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """8XYN - ALU operations dispatcher."""
    vx = int(state.V[instruction.x])
    vy = int(state.V[instruction.y])

    if instruction.op in _SHIFT_OPS:
        source = vy if state.quirks.bit_shift is BitShiftQuirk.SHIFT_Y_INTO_X else vx
        result, vf = _SHIFT_OPS[instruction.op](source)
    else:
        result, vf = _BINARY_OPS[instruction.op](vx, vy)

    # VF is written last so the flag wins when X is F
    new_V = state.V.at[instruction.x].set(result)
    if vf is not None:
        new_V = new_V.at[FLAG_REGISTER].set(vf)
    return state.replace(V=new_V)
