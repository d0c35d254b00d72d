"""CHIP-8 error types.

Every error raised while fetching, decoding or executing an instruction
derives from :class:`Chip8Error`. State is immutable, so when one of these
escapes a cycle the previous state is still the current one and the host
may inspect it, reset or stop.
"""


class Chip8Error(Exception):
    """Base class for all emulator failures."""


class UnsupportedOpcode(Chip8Error):
    """The decoder saw a 16-bit word matching no known instruction."""

    def __init__(self, word: int):
        self.word = word
        super().__init__(f"unsupported opcode: {word:04X}")


class StackUnderflow(Chip8Error):
    """Return executed with an empty call stack."""

    def __init__(self):
        super().__init__("stack underflow")


class StackOverflow(Chip8Error):
    """Subroutine call nested deeper than the call stack allows."""

    def __init__(self, depth: int):
        self.depth = depth
        super().__init__(f"stack overflow: more than {depth} nested calls")


class AddressOutOfRange(Chip8Error):
    """Memory access outside the 4 KiB address space."""

    def __init__(self, address: int):
        self.address = address
        super().__init__(f"address out of range: {address:#06x}")


class RomTooLarge(Chip8Error):
    """ROM does not fit between the program start and the end of memory."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"ROM is {size} bytes, at most {limit} bytes fit in memory")


class InvalidKey(Chip8Error, ValueError):
    """Key index outside the 16-key hex pad."""

    def __init__(self, key: int):
        self.key = key
        super().__init__(f"invalid key: {key!r}, expected 0x0-0xF")
