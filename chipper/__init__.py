"""CHIP-8 emulator package."""

from chipper.state import EmulatorState, Running, WaitingForKey, create_state
from chipper.emulator import (
    Chip8Output, execute, fetch, cycle, tick_timers, press_key, release_key, load_rom, load_rom_file
)
from chipper.decode import Instruction, Op, decode, encode, disassemble
from chipper.display import FrameBuffer
from chipper.quirks import Quirks, ReadWriteIncrementQuirk, BitShiftQuirk
from chipper.errors import (
    Chip8Error, UnsupportedOpcode, StackUnderflow, StackOverflow, AddressOutOfRange,
    RomTooLarge, InvalidKey
)
from chipper.machine import Chip8
from chipper.constants import PROGRAM_START, FONT_START, SCREEN_WIDTH, SCREEN_HEIGHT

__all__ = [
    "EmulatorState",
    "Running",
    "WaitingForKey",
    "create_state",
    "Chip8Output",
    "execute",
    "fetch",
    "cycle",
    "tick_timers",
    "press_key",
    "release_key",
    "load_rom",
    "load_rom_file",
    "Instruction",
    "Op",
    "decode",
    "encode",
    "disassemble",
    "FrameBuffer",
    "Quirks",
    "ReadWriteIncrementQuirk",
    "BitShiftQuirk",
    "Chip8Error",
    "UnsupportedOpcode",
    "StackUnderflow",
    "StackOverflow",
    "AddressOutOfRange",
    "RomTooLarge",
    "InvalidKey",
    "Chip8",
    "PROGRAM_START",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
]
