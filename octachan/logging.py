"""Console logging utilities for the emulator.

A small leveled logger that prints to stdout with optional colours and an
elapsed-time prefix, plus an emulator flavour with helpers for the events
the execution loop reports. Headless runs get a tqdm frame counter.
"""

import sys
import time
from typing import Dict, Optional

from tqdm import tqdm


LEVEL_ORDER = {
    "DEBUG": 0,
    "INFO": 1,
    "WARNING": 2,
    "ERROR": 3,
    "CRITICAL": 4,
}


class ConsoleLogger:
    """Leveled console logger with colours and timestamps."""

    def __init__(
        self,
        name: str = "octachan",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
    ):
        self.name = name
        self.log_level = log_level.upper()
        self.use_colors = (
            use_colors and hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
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
            else {k: "" for k in [*LEVEL_ORDER, "RESET"]}
        )

    def set_level(self, log_level: str):
        """Change the minimum level that gets printed."""
        level = log_level.upper()
        if level not in LEVEL_ORDER:
            raise ValueError(f"Unknown log level '{log_level}'. Available: {list(LEVEL_ORDER)}")
        self.log_level = level

    def _should_log(self, level: str) -> bool:
        """Check if message should be logged based on current log level."""
        return LEVEL_ORDER.get(level.upper(), 1) >= LEVEL_ORDER.get(self.log_level, 1)

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
        if self._should_log(level):
            print(self._format_message(level, message), flush=True)

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
    """Logger with helpers for execution-loop events."""

    def log_program_loaded(self, size: int, source: Optional[str] = None):
        origin = f" from {source}" if source else ""
        self.info(f"Loaded {size} bytes{origin} at 0x200")

    def log_unknown_instruction(self, address: int, raw: int):
        self.debug(f"Unknown instruction 0x{raw:04X} at 0x{address:04X}, ignored")

    def log_halt(self, status: str, frames: int, instructions: int, unknown: int = 0):
        message = f"Execution {status.lower()} after {frames} frames, {instructions} instructions"
        if unknown:
            message += f" ({unknown} unknown)"
        self.info(message)

    def log_registers(self, state, level: str = "DEBUG"):
        """Dump registers, index, timers and control registers of ``state``."""
        if not self._should_log(level):
            return
        cpu = state.cpu
        registers = " ".join(f"V{i:X}={int(v):02X}" for i, v in enumerate(cpu.V))
        self.log(level, registers)
        self.log(
            level,
            f"I={int(cpu.I):04X} PC={int(state.pc):04X} SP={int(state.sp):04X} "
            f"DT={int(cpu.delay_timer)} ST={int(cpu.sound_timer)}"
        )


_LOGGERS: Dict[str, EmulatorLogger] = {}
_DEFAULT_LEVEL = "INFO"


def get_logger(name: str = "octachan") -> EmulatorLogger:
    """Return the shared logger registered under ``name``."""
    if name not in _LOGGERS:
        _LOGGERS[name] = EmulatorLogger(name, log_level=_DEFAULT_LEVEL)
    return _LOGGERS[name]


def set_log_level(log_level: str):
    """Set the level of every existing and future logger."""
    global _DEFAULT_LEVEL
    if log_level.upper() not in LEVEL_ORDER:
        raise ValueError(f"Unknown log level '{log_level}'. Available: {list(LEVEL_ORDER)}")
    for logger in _LOGGERS.values():
        logger.set_level(log_level)
    _DEFAULT_LEVEL = log_level.upper()


def frame_progress(total: Optional[int] = None, disable: bool = False) -> tqdm:
    """Progress bar counting executed frames."""
    return tqdm(total=total, unit="frame", desc="octachan", disable=disable, dynamic_ncols=True)
