"""
Error hierarchy for octachan.

OctachanError (base)
├── ProgramLoadError - program source missing, unreadable or too large
├── StackError
│   ├── StackOverflowError - a call would push into the glyph sprites
│   └── StackUnderflowError - a return with no pushed address
├── ChannelError
│   ├── ChannelClosed - the channel was closed by either side
│   ├── ChannelTimeout - a blocking send or receive timed out
│   └── ChannelInterrupted - a stop request woke a blocked receiver
└── EmulationStopped - a stop was requested while blocked on input

Unknown instructions are deliberately not errors: they execute as no-ops
and are counted on the execution state.
"""

from typing import Optional


class OctachanError(Exception):
    """Base exception for all octachan errors."""


class ProgramLoadError(OctachanError):
    """The program could not be loaded into memory."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        if path is not None:
            message = f"{path}: {message}"
        super().__init__(message)


class StackError(OctachanError):
    """Misuse of the in-memory return-address stack."""

    def __init__(self, message: str, pc: int, sp: int):
        self.pc = pc
        self.sp = sp
        super().__init__(f"{message} (pc=0x{pc:04X}, sp=0x{sp:04X})")


class StackOverflowError(StackError):
    """A call would write a return address past the stack region."""


class StackUnderflowError(StackError):
    """A return was executed with an empty stack."""


class ChannelError(OctachanError):
    """Base class for channel failures."""


class ChannelClosed(ChannelError):
    """The channel has been closed."""


class ChannelTimeout(ChannelError):
    """A blocking channel operation timed out."""


class ChannelInterrupted(ChannelError):
    """A stop event was set while blocked in a receive."""


class EmulationStopped(OctachanError):
    """A stop request interrupted a blocking instruction."""
