"""Console logging utilities for the Chipper emulator.

Provides a small leveled console logger, an emulator-aware subclass that
knows how to report ROM loads, executed instructions and machine faults, and
a tqdm progress bar for long headless runs.
"""

import sys
import time
from typing import Optional

from tqdm import tqdm

from chipper.decode import Instruction
from chipper.errors import Chip8Error

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConsoleLogger:
    """Leveled console logger with optional colors and timestamps."""

    def __init__(
        self,
        name: str = "Chipper",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
        stream=None,
    ):
        self.name = name
        self.log_level = log_level.upper()
        if self.log_level not in LEVELS:
            raise ValueError(f"Unknown log level '{log_level}'. Available: {list(LEVELS)}")
        self.stream = stream if stream is not None else sys.stdout
        self.use_colors = (
            use_colors and hasattr(self.stream, "isatty") and self.stream.isatty()
        )
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

        self.colors = (
            {
                "DEBUG": "\033[36m",
                "INFO": "\033[32m",
                "WARNING": "\033[33m",
                "ERROR": "\033[31m",
                "CRITICAL": "\033[35m",
                "RESET": "\033[0m"
            }
            if self.use_colors
            else {k: "" for k in LEVELS + ("RESET",)}
        )

        self.level_order = {level: order for order, level in enumerate(LEVELS)}

    def is_enabled_for(self, level: str) -> bool:
        """Check if message should be logged based on current log level."""
        return self.level_order.get(level.upper(), 1) >= self.level_order[self.log_level]

    def _format_message(self, level: str, message: str) -> str:
        """Format log message with timestamp, level, and colors."""
        timestamp = (
            f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        )
        level_str = f"[{level:>8s}]"
        name_str = f"[{self.name}]"

        if self.use_colors:
            color = self.colors.get(level.upper(), "")
            reset = self.colors["RESET"]
            level_str = f"{color}{level_str}{reset}"

        return f"{timestamp}{level_str}{name_str} {message}"

    def log(self, level: str, message: str):
        """Log a message at the specified level."""
        if self.is_enabled_for(level):
            print(self._format_message(level, message), file=self.stream, flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)

    def critical(self, message: str):
        self.log("CRITICAL", message)


class EmulatorLogger(ConsoleLogger):
    """Logger with helpers for emulator events."""

    def log_rom_loaded(self, source: str, size: int):
        self.info(f"Loaded ROM {source} ({size} bytes)")

    def log_instruction(self, address: int, word: int, instruction: Instruction):
        """Trace one executed instruction. Only formatted when DEBUG is enabled."""
        if self.is_enabled_for("DEBUG"):
            self.debug(f"{address:03X}: {word:04X}  {instruction.to_assembly()}")

    def log_fault(self, address: int, error: Chip8Error):
        self.error(f"Fault at {address:03X}: {error}")

    def log_wait_for_key(self, register: int):
        self.debug(f"Waiting for key release into V{register:X}")


def frame_progress(total: int, desc: str = "Emulating", **kwargs) -> tqdm:
    """Progress bar over emulated frames for headless runs."""
    return tqdm(total=total, desc=desc, unit="frame", **kwargs)
