"""Human-readable disassembly over the same decode step the executor uses."""

from typing import Iterator

from octachan.constants import PROGRAM_START
from octachan.decode import DecodedInstruction, Op, decode

MNEMONICS = {
    Op.CLEAR_SCREEN: lambda i: "CLS",
    Op.RETURN: lambda i: "RTS",
    Op.JUMP: lambda i: f"JUMP #{i.nnn:03x}",
    Op.CALL: lambda i: f"CALL #{i.nnn:03x}",
    Op.SKIP_EQ_IMMEDIATE: lambda i: f"SKIP.EQ V{i.x:x}, #{i.nn:02x}",
    Op.SKIP_NE_IMMEDIATE: lambda i: f"SKIP.NE V{i.x:x}, #{i.nn:02x}",
    Op.SKIP_EQ_REGISTER: lambda i: f"SKIP.EQ V{i.x:x}, V{i.y:x}",
    Op.LOAD_IMMEDIATE: lambda i: f"MVI V{i.x:x}, #{i.nn:02x}",
    Op.ADD_IMMEDIATE: lambda i: f"ADD. V{i.x:x}, #{i.nn:02x}",
    Op.MOVE: lambda i: f"MOV V{i.x:x}, V{i.y:x}",
    Op.OR: lambda i: f"OR V{i.x:x}, V{i.y:x}",
    Op.AND: lambda i: f"AND V{i.x:x}, V{i.y:x}",
    Op.XOR: lambda i: f"XOR V{i.x:x}, V{i.y:x}",
    Op.ADD: lambda i: f"ADD. V{i.x:x}, V{i.y:x}",
    Op.SUB: lambda i: f"SUB. V{i.x:x}, V{i.y:x}",
    Op.SHIFT_RIGHT: lambda i: f"SHR. V{i.x:x}",
    Op.SUB_REVERSE: lambda i: f"SUBB. V{i.x:x}, V{i.y:x}",
    Op.SHIFT_LEFT: lambda i: f"SHL. V{i.x:x}",
    Op.SKIP_NE_REGISTER: lambda i: f"SKIP.NE V{i.x:x}, V{i.y:x}",
    Op.LOAD_INDEX: lambda i: f"MVI I, #{i.nnn:03x}",
    Op.JUMP_OFFSET: lambda i: f"JUMP #{i.nnn:03x}(V0)",
    Op.RANDOM: lambda i: f"RAND V{i.x:x}, #{i.nn:02x}",
    Op.DRAW: lambda i: f"SPRITE V{i.x:x}, V{i.y:x}, #{i.n:x}",
    Op.SKIP_KEY: lambda i: f"SKIP.KEY V{i.x:x}",
    Op.SKIP_NO_KEY: lambda i: f"SKIP.NOKEY V{i.x:x}",
    Op.GET_DELAY: lambda i: f"MOV V{i.x:x}, DELAY",
    Op.WAIT_KEY: lambda i: f"WAITKEY V{i.x:x}",
    Op.SET_DELAY: lambda i: f"MOV DELAY, V{i.x:x}",
    Op.SET_SOUND: lambda i: f"MOV SOUND, V{i.x:x}",
    Op.ADD_INDEX: lambda i: f"ADD I, V{i.x:x}",
    Op.FONT_CHARACTER: lambda i: f"SPRITECHAR V{i.x:x}",
    Op.BCD: lambda i: f"MOVBCD V{i.x:x}",
    Op.STORE_REGISTERS: lambda i: f"MOVM (I), V0-V{i.x:x}",
    Op.LOAD_REGISTERS: lambda i: f"MOVM V0-V{i.x:x}, (I)",
    Op.UNKNOWN: lambda i: f"DATA #{i.raw:04x}",
}


def mnemonic(instruction: DecodedInstruction) -> str:
    """Mnemonic and operands of a decoded instruction."""
    return MNEMONICS[Op(instruction.op)](instruction)


def disassemble(instruction: DecodedInstruction, address: int) -> str:
    """Format one instruction located at ``address``."""
    return f"{address:04x} {instruction.high:02x} {instruction.low:02x}     {mnemonic(instruction)}"


def disassemble_program(data: bytes, origin: int = PROGRAM_START) -> Iterator[str]:
    """Yield one line per 2-byte word of ``data``.

    A trailing odd byte is shown as a word with a zero low byte.
    """
    for offset in range(0, len(data), 2):
        high = data[offset]
        low = data[offset + 1] if offset + 1 < len(data) else 0
        yield disassemble(decode(high, low), origin + offset)
