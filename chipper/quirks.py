"""Behavioral variants between historical CHIP-8 interpreters."""

import dataclasses
import enum


class ReadWriteIncrementQuirk(enum.Enum):
    """What happens to I after FX55 / FX65.

    The original COSMAC VIP interpreter left I pointing past the last byte
    transferred. Most modern ROMs expect I to be untouched, as on SUPER-CHIP 1.1.
    """
    INVARIANT_INDEX = "invariant_index"  # I unchanged
    INCREMENT_INDEX = "increment_index"  # I = I + X + 1


class BitShiftQuirk(enum.Enum):
    """Source register of 8XY6 / 8XYE.

    The result always lands in VX and VF always receives the bit shifted out.
    """
    SHIFT_X = "shift_x"                # VX = VX >> 1
    SHIFT_Y_INTO_X = "shift_y_into_x"  # VX = VY >> 1, VY untouched


def _parse(enum_cls, value):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        choices = [member.value for member in enum_cls]
        raise ValueError(f"Unknown {enum_cls.__name__} '{value}'. Available: {choices}") from None


@dataclasses.dataclass(frozen=True)
class Quirks:
    """Quirk policy fixed at emulator construction. Defaults favor post-2005 ROMs."""
    read_write_increment: ReadWriteIncrementQuirk = ReadWriteIncrementQuirk.INVARIANT_INDEX
    bit_shift: BitShiftQuirk = BitShiftQuirk.SHIFT_X

    @classmethod
    def from_names(cls, read_write_increment="invariant_index", bit_shift="shift_x") -> "Quirks":
        """Build quirks from their names, e.g. ``Quirks.from_names("increment_index", "shift_x")``."""
        return cls(
            read_write_increment=_parse(ReadWriteIncrementQuirk, read_write_increment),
            bit_shift=_parse(BitShiftQuirk, bit_shift),
        )

    @classmethod
    def legacy(cls) -> "Quirks":
        """COSMAC VIP behavior."""
        return cls(ReadWriteIncrementQuirk.INCREMENT_INDEX, BitShiftQuirk.SHIFT_Y_INTO_X)
