"""Channel-driven virtual CPU emulator package."""

from octachan.state import CpuState, ExecutionState, create_state
from octachan.decode import DecodedInstruction, Op, decode, decode_word
from octachan.emulator import execute, dispatch, fetch, flush_display, load_program, load_rom, read_rom
from octachan.channels import Channel, RendezvousChannel, CpuContext, PlatformContext, create_contexts
from octachan.loop import ExecutionLoop, LoopStatus
from octachan.disassemble import disassemble, disassemble_program
from octachan.constants import PROGRAM_START, FONT_START, SCREEN_WIDTH, SCREEN_HEIGHT, FLAG_REGISTER

__all__ = [
    "CpuState",
    "ExecutionState",
    "create_state",
    "DecodedInstruction",
    "Op",
    "decode",
    "decode_word",
    "execute",
    "dispatch",
    "fetch",
    "flush_display",
    "load_program",
    "load_rom",
    "read_rom",
    "Channel",
    "RendezvousChannel",
    "CpuContext",
    "PlatformContext",
    "create_contexts",
    "ExecutionLoop",
    "LoopStatus",
    "disassemble",
    "disassemble_program",
    "PROGRAM_START",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "FLAG_REGISTER",
]
