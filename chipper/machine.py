"""Stateful CHIP-8 driver for hosts.

:class:`Chip8` owns the current :class:`EmulatorState` and advances it by wall
time, single steps, key edges and ROM loads. Front-ends read ``chip8.state``
(or the convenience properties) between calls and never mutate it.
"""

from typing import Any, Mapping, Optional

from chipper import ram
from chipper.constants import CLOCK_HZ, TIMER_HZ
from chipper.decode import Instruction, decode
from chipper.display import FrameBuffer
from chipper.emulator import (
    Chip8Output, cycle, tick_timers, press_key, release_key, load_rom
)
from chipper.errors import Chip8Error
from chipper.logging import EmulatorLogger
from chipper.quirks import Quirks
from chipper.state import EmulatorState, WaitingForKey, create_state


class Chip8:
    """CHIP-8 virtual machine driven by elapsed time.

    Args:
        seed: Seed for the random number stream, OS entropy if None
        quirks: Quirk policy, fixed for the lifetime of the machine
        clock_hz: CPU instructions per second
        debug: When set, :meth:`tick` does nothing; use :meth:`step`
        logger: Logger for ROM loads, faults and instruction traces
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        quirks: Quirks = Quirks(),
        clock_hz: float = CLOCK_HZ,
        debug: bool = False,
        logger: Optional[EmulatorLogger] = None,
    ):
        self.seed = seed
        self.quirks = quirks
        self.clock_hz = clock_hz
        self.timer_period = 1.0 / TIMER_HZ
        self.debug = debug
        self.logger = logger or EmulatorLogger(log_level="WARNING")

        self.state: EmulatorState = create_state(seed, quirks)
        self._rom = b""
        self._clock_accumulator = 0.0
        self._timer_accumulator = 0.0

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "Chip8":
        """Build a machine from a plain mapping, e.g. ``OmegaConf.to_container(cfg)``."""
        quirks = config.get("quirks") or {}
        return cls(
            seed=config.get("seed"),
            quirks=Quirks.from_names(**quirks),
            clock_hz=float(config.get("clock_hz", CLOCK_HZ)),
            debug=bool(config.get("debug", False)),
            logger=EmulatorLogger(log_level=config.get("log_level", "WARNING")),
        )

    @property
    def clock_hz(self) -> float:
        return self._clock_hz

    @clock_hz.setter
    def clock_hz(self, value: float):
        if value <= 0:
            raise ValueError(f"clock_hz must be positive, got {value}")
        self._clock_hz = float(value)

    @property
    def clock_period(self) -> float:
        return 1.0 / self._clock_hz

    @property
    def display(self) -> FrameBuffer:
        return self.state.display

    @property
    def sound_active(self) -> bool:
        """True while the buzzer should sound."""
        return int(self.state.sound_timer) > 0

    def load_rom(self, rom: bytes):
        """Copy ROM bytes into memory at 0x200."""
        rom = bytes(rom)
        self.state = load_rom(self.state, rom)
        self._rom = rom
        self.logger.log_rom_loaded("<bytes>", len(rom))

    def load_rom_from_file(self, path: str):
        with open(path, "rb") as f:
            rom = f.read()
        self.state = load_rom(self.state, rom)
        self._rom = rom
        self.logger.log_rom_loaded(str(path), len(rom))

    def reset(self):
        """Return to power-on state, keeping quirks and seed and reloading the last ROM."""
        self.state = load_rom(create_state(self.seed, self.quirks), self._rom)
        self._clock_accumulator = 0.0
        self._timer_accumulator = 0.0

    def current_instruction(self) -> Instruction:
        """Decode the instruction at PC without executing it."""
        return decode(ram.read_word(self.state.memory, self.state.pc))

    def cycle(self) -> Chip8Output:
        """Execute one instruction. Timers are left alone."""
        pc = int(self.state.pc)
        try:
            if self.state.running and self.logger.is_enabled_for("DEBUG"):
                word = ram.read_word(self.state.memory, pc)
                self.logger.log_instruction(pc, word, decode(word))
            state, output = cycle(self.state)
        except Chip8Error as e:
            self.logger.log_fault(pc, e)
            raise

        if isinstance(state.execution, WaitingForKey) and self.state.running:
            self.logger.log_wait_for_key(state.execution.target)
        self.state = state
        return output

    def tick(self, delta: float) -> Chip8Output:
        """Advance the machine by ``delta`` seconds of wall time.

        CPU cycles and 60 Hz timer decrements run in wall-time order, so a
        decrement falling between two cycles happens between them. On a tie
        the decrement goes first. Fractions of either period carry over to
        the next call.
        """
        if self.debug:
            return Chip8Output.NONE
        return self._advance(delta)

    def step(self) -> Chip8Output:
        """Advance by exactly one clock period, even in debug mode."""
        return self._advance(self.clock_period)

    def _advance(self, delta: float) -> Chip8Output:
        output = Chip8Output.NONE
        self._clock_accumulator += delta
        self._timer_accumulator += delta

        # Each accumulator's excess over its period is the time left in
        # ``delta`` after that event, so the larger excess happened earlier.
        while True:
            timer_left = self._timer_accumulator - self.timer_period
            clock_left = self._clock_accumulator - self.clock_period
            if timer_left < 0 and clock_left < 0:
                break
            if timer_left >= clock_left:
                self._timer_accumulator -= self.timer_period
                self.state = tick_timers(self.state)
                output = max(output, Chip8Output.TICK)
            else:
                self._clock_accumulator -= self.clock_period
                output = max(output, self.cycle())

        return output

    def press_key(self, key: int):
        self.state = press_key(self.state, key)

    def release_key(self, key: int):
        self.state = release_key(self.state, key)

    def register_dump(self) -> str:
        """Text view of PC, I, V0-VF and both timers."""
        state = self.state
        lines = [f"PC = {int(state.pc):03X}   IX = {int(state.I):03X}"]
        for row in range(8):
            left, right = row, row + 8
            lines.append(
                f"V{left:X} = {int(state.V[left]):02X}    V{right:X} = {int(state.V[right]):02X}"
            )
        lines.append(f"DT = {int(state.delay_timer):02X}    ST = {int(state.sound_timer):02X}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"Chip8(pc={int(self.state.pc):#05x}, clock_hz={self.clock_hz}, "
            f"quirks={self.quirks}, debug={self.debug})"
        )
