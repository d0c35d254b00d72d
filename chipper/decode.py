"""CHIP-8 instruction decoding, encoding and disassembly."""

import enum
from typing import Iterator, Tuple

from chex import dataclass

from chipper.constants import PROGRAM_START
from chipper.errors import UnsupportedOpcode


class Op(enum.Enum):
    """The 34 CHIP-8 instructions."""
    CLEAR_SCREEN = "00E0"
    RETURN = "00EE"
    JUMP = "1NNN"
    CALL_SUBROUTINE = "2NNN"
    SKIP_IF_EQ = "3XNN"
    SKIP_IF_NEQ = "4XNN"
    SKIP_IF_EQ_REG = "5XY0"
    LOAD_CONST = "6XNN"
    ADD_CONST = "7XNN"
    LOAD = "8XY0"
    OR = "8XY1"
    AND = "8XY2"
    XOR = "8XY3"
    ADD = "8XY4"
    SUB_XY = "8XY5"
    SHIFT_RIGHT = "8XY6"
    SUB_YX = "8XY7"
    SHIFT_LEFT = "8XYE"
    SKIP_IF_NEQ_REG = "9XY0"
    INDEX_ADDRESS = "ANNN"
    JUMP_WITH_OFFSET = "BNNN"
    RANDOM = "CXNN"
    DRAW = "DXYN"
    SKIP_IF_KEY_PRESSED = "EX9E"
    SKIP_IF_KEY_NOT_PRESSED = "EXA1"
    LOAD_DELAY_INTO_REG = "FX07"
    WAIT_FOR_KEY_RELEASE = "FX0A"
    LOAD_REG_INTO_DELAY = "FX15"
    LOAD_REG_INTO_SOUND = "FX18"
    ADD_ADDRESS = "FX1E"
    INDEX_FONT = "FX29"
    WRITE_BCD = "FX33"
    WRITE_MEMORY = "FX55"
    READ_MEMORY = "FX65"

    @property
    def operands(self) -> Tuple[str, ...]:
        """Operand fields encoded by this instruction, derived from its pattern."""
        pattern = self.value
        if pattern.endswith("NNN"):
            return ("nnn",)
        if pattern.endswith("NN"):
            return ("x", "nn")
        if pattern.endswith("XYN"):
            return ("x", "y", "n")
        if "XY" in pattern:
            return ("x", "y")
        if "X" in pattern:
            return ("x",)
        return ()

    @property
    def base(self) -> int:
        """Instruction word with every operand nibble zeroed."""
        return int("".join(c if c in "0123456789ABCDEF" else "0" for c in self.value), 16)


_FIXED = {0x00E0: Op.CLEAR_SCREEN, 0x00EE: Op.RETURN}

_BY_FAMILY = {
    0x1: Op.JUMP,
    0x2: Op.CALL_SUBROUTINE,
    0x3: Op.SKIP_IF_EQ,
    0x4: Op.SKIP_IF_NEQ,
    0x6: Op.LOAD_CONST,
    0x7: Op.ADD_CONST,
    0xA: Op.INDEX_ADDRESS,
    0xB: Op.JUMP_WITH_OFFSET,
    0xC: Op.RANDOM,
    0xD: Op.DRAW,
}

# Families dispatched on a sub-field: (family, low nibble) for 5/8/9, (family, low byte) for E/F
_BY_NIBBLE = {
    (0x5, 0x0): Op.SKIP_IF_EQ_REG,
    (0x8, 0x0): Op.LOAD,
    (0x8, 0x1): Op.OR,
    (0x8, 0x2): Op.AND,
    (0x8, 0x3): Op.XOR,
    (0x8, 0x4): Op.ADD,
    (0x8, 0x5): Op.SUB_XY,
    (0x8, 0x6): Op.SHIFT_RIGHT,
    (0x8, 0x7): Op.SUB_YX,
    (0x8, 0xE): Op.SHIFT_LEFT,
    (0x9, 0x0): Op.SKIP_IF_NEQ_REG,
}

_BY_BYTE = {
    (0xE, 0x9E): Op.SKIP_IF_KEY_PRESSED,
    (0xE, 0xA1): Op.SKIP_IF_KEY_NOT_PRESSED,
    (0xF, 0x07): Op.LOAD_DELAY_INTO_REG,
    (0xF, 0x0A): Op.WAIT_FOR_KEY_RELEASE,
    (0xF, 0x15): Op.LOAD_REG_INTO_DELAY,
    (0xF, 0x18): Op.LOAD_REG_INTO_SOUND,
    (0xF, 0x1E): Op.ADD_ADDRESS,
    (0xF, 0x29): Op.INDEX_FONT,
    (0xF, 0x33): Op.WRITE_BCD,
    (0xF, 0x55): Op.WRITE_MEMORY,
    (0xF, 0x65): Op.READ_MEMORY,
}

# Cowgod-style mnemonics
_ASSEMBLY = {
    Op.CLEAR_SCREEN: "CLS",
    Op.RETURN: "RET",
    Op.JUMP: "JP 0x{nnn:03X}",
    Op.CALL_SUBROUTINE: "CALL 0x{nnn:03X}",
    Op.SKIP_IF_EQ: "SE V{x:X}, 0x{nn:02X}",
    Op.SKIP_IF_NEQ: "SNE V{x:X}, 0x{nn:02X}",
    Op.SKIP_IF_EQ_REG: "SE V{x:X}, V{y:X}",
    Op.LOAD_CONST: "LD V{x:X}, 0x{nn:02X}",
    Op.ADD_CONST: "ADD V{x:X}, 0x{nn:02X}",
    Op.LOAD: "LD V{x:X}, V{y:X}",
    Op.OR: "OR V{x:X}, V{y:X}",
    Op.AND: "AND V{x:X}, V{y:X}",
    Op.XOR: "XOR V{x:X}, V{y:X}",
    Op.ADD: "ADD V{x:X}, V{y:X}",
    Op.SUB_XY: "SUB V{x:X}, V{y:X}",
    Op.SHIFT_RIGHT: "SHR V{x:X}, V{y:X}",
    Op.SUB_YX: "SUBN V{x:X}, V{y:X}",
    Op.SHIFT_LEFT: "SHL V{x:X}, V{y:X}",
    Op.SKIP_IF_NEQ_REG: "SNE V{x:X}, V{y:X}",
    Op.INDEX_ADDRESS: "LD I, 0x{nnn:03X}",
    Op.JUMP_WITH_OFFSET: "JP V0, 0x{nnn:03X}",
    Op.RANDOM: "RND V{x:X}, 0x{nn:02X}",
    Op.DRAW: "DRW V{x:X}, V{y:X}, {n}",
    Op.SKIP_IF_KEY_PRESSED: "SKP V{x:X}",
    Op.SKIP_IF_KEY_NOT_PRESSED: "SKNP V{x:X}",
    Op.LOAD_DELAY_INTO_REG: "LD V{x:X}, DT",
    Op.WAIT_FOR_KEY_RELEASE: "LD V{x:X}, K",
    Op.LOAD_REG_INTO_DELAY: "LD DT, V{x:X}",
    Op.LOAD_REG_INTO_SOUND: "LD ST, V{x:X}",
    Op.ADD_ADDRESS: "ADD I, V{x:X}",
    Op.INDEX_FONT: "LD F, V{x:X}",
    Op.WRITE_BCD: "LD B, V{x:X}",
    Op.WRITE_MEMORY: "LD [I], V{x:X}",
    Op.READ_MEMORY: "LD V{x:X}, [I]",
}


@dataclass(frozen=True)
class Instruction:
    """Decoded CHIP-8 instruction. Operands the instruction does not use are 0."""
    op: Op
    x: int = 0    # Second nibble (VX register)
    y: int = 0    # Third nibble (VY register)
    n: int = 0    # Fourth nibble (4-bit immediate)
    nn: int = 0   # Last byte (8-bit immediate)
    nnn: int = 0  # Last 12 bits (12-bit address)

    def to_assembly(self) -> str:
        """Format as assembly, e.g. ``DRW V1, V2, 5``."""
        return _ASSEMBLY[self.op].format(x=self.x, y=self.y, n=self.n, nn=self.nn, nnn=self.nnn)

    def __str__(self) -> str:
        return self.to_assembly()


def _lookup(word: int) -> Op:
    if word in _FIXED:
        return _FIXED[word]
    family = (word & 0xF000) >> 12
    if family in _BY_FAMILY:
        return _BY_FAMILY[family]
    op = _BY_NIBBLE.get((family, word & 0x000F)) or _BY_BYTE.get((family, word & 0x00FF))
    if op is None:
        raise UnsupportedOpcode(word)
    return op


def decode(word: int) -> Instruction:
    """Decode a 16-bit instruction word.

    Raises:
        UnsupportedOpcode: if the word matches no instruction.
    """
    word = int(word)
    op = _lookup(word)
    fields = {
        "x": (word & 0x0F00) >> 8,
        "y": (word & 0x00F0) >> 4,
        "n": word & 0x000F,
        "nn": word & 0x00FF,
        "nnn": word & 0x0FFF,
    }
    return Instruction(op=op, **{name: fields[name] for name in op.operands})


def encode(instruction: Instruction) -> int:
    """Encode an instruction back into its 16-bit word."""
    word = instruction.op.base
    for name in instruction.op.operands:
        if name == "x":
            word |= (instruction.x & 0xF) << 8
        elif name == "y":
            word |= (instruction.y & 0xF) << 4
        elif name == "n":
            word |= instruction.n & 0xF
        elif name == "nn":
            word |= instruction.nn & 0xFF
        else:
            word |= instruction.nnn & 0xFFF
    return word


def disassemble(rom: bytes, start: int = PROGRAM_START) -> Iterator[Tuple[int, int, str]]:
    """Yield ``(address, word, text)`` for each 16-bit word of a ROM.

    Words that do not decode are emitted as data (``DW``); a trailing odd byte as ``DB``.
    """
    for offset in range(0, len(rom) - 1, 2):
        word = (rom[offset] << 8) | rom[offset + 1]
        try:
            text = decode(word).to_assembly()
        except UnsupportedOpcode:
            text = f"DW 0x{word:04X}"
        yield start + offset, word, text
    if len(rom) % 2:
        yield start + len(rom) - 1, rom[-1], f"DB 0x{rom[-1]:02X}"
