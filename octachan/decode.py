"""Instruction decoding."""

import enum

from chex import dataclass


class Op(enum.IntEnum):
    """Every operation the executor knows, in dispatch order."""
    CLEAR_SCREEN = 0
    RETURN = 1
    JUMP = 2
    CALL = 3
    SKIP_EQ_IMMEDIATE = 4
    SKIP_NE_IMMEDIATE = 5
    SKIP_EQ_REGISTER = 6
    LOAD_IMMEDIATE = 7
    ADD_IMMEDIATE = 8
    MOVE = 9
    OR = 10
    AND = 11
    XOR = 12
    ADD = 13
    SUB = 14
    SHIFT_RIGHT = 15
    SUB_REVERSE = 16
    SHIFT_LEFT = 17
    SKIP_NE_REGISTER = 18
    LOAD_INDEX = 19
    JUMP_OFFSET = 20
    RANDOM = 21
    DRAW = 22
    SKIP_KEY = 23
    SKIP_NO_KEY = 24
    GET_DELAY = 25
    WAIT_KEY = 26
    SET_DELAY = 27
    SET_SOUND = 28
    ADD_INDEX = 29
    FONT_CHARACTER = 30
    BCD = 31
    STORE_REGISTERS = 32
    LOAD_REGISTERS = 33
    UNKNOWN = 34


# Operations selected by the opcode nibble alone
_BY_OPCODE = {
    0x1: Op.JUMP,
    0x2: Op.CALL,
    0x3: Op.SKIP_EQ_IMMEDIATE,
    0x4: Op.SKIP_NE_IMMEDIATE,
    0x5: Op.SKIP_EQ_REGISTER,
    0x6: Op.LOAD_IMMEDIATE,
    0x7: Op.ADD_IMMEDIATE,
    0x9: Op.SKIP_NE_REGISTER,
    0xA: Op.LOAD_INDEX,
    0xB: Op.JUMP_OFFSET,
    0xC: Op.RANDOM,
    0xD: Op.DRAW,
}

# 0x0 and 0xE/0xF families select on the low byte, 0x8 on the last nibble
_SYSTEM = {0xE0: Op.CLEAR_SCREEN, 0xEE: Op.RETURN}

_ALU = {
    0x0: Op.MOVE,
    0x1: Op.OR,
    0x2: Op.AND,
    0x3: Op.XOR,
    0x4: Op.ADD,
    0x5: Op.SUB,
    0x6: Op.SHIFT_RIGHT,
    0x7: Op.SUB_REVERSE,
    0xE: Op.SHIFT_LEFT,
}

_KEY = {0x9E: Op.SKIP_KEY, 0xA1: Op.SKIP_NO_KEY}

_MISC = {
    0x07: Op.GET_DELAY,
    0x0A: Op.WAIT_KEY,
    0x15: Op.SET_DELAY,
    0x18: Op.SET_SOUND,
    0x1E: Op.ADD_INDEX,
    0x29: Op.FONT_CHARACTER,
    0x33: Op.BCD,
    0x55: Op.STORE_REGISTERS,
    0x65: Op.LOAD_REGISTERS,
}


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded instruction with extracted operands."""
    raw: int
    high: int
    low: int
    opcode: int  # First nibble
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Fourth nibble (4-bit immediate)
    nn: int      # Last byte (8-bit immediate)
    nnn: int     # Last 12 bits (12-bit address)
    op: int      # Op value, kept as a plain int so the instruction stays a valid pytree


def classify(opcode: int, n: int, nn: int) -> Op:
    """Map the opcode nibble and sub-opcode fields to an Op."""
    if opcode == 0x0:
        return _SYSTEM.get(nn, Op.UNKNOWN)
    if opcode == 0x8:
        return _ALU.get(n, Op.UNKNOWN)
    if opcode == 0xE:
        return _KEY.get(nn, Op.UNKNOWN)
    if opcode == 0xF:
        return _MISC.get(nn, Op.UNKNOWN)
    return _BY_OPCODE[opcode]


def decode(high: int, low: int) -> DecodedInstruction:
    """Decode an instruction from its two bytes."""
    high &= 0xFF
    low &= 0xFF
    opcode = high >> 4
    n = low & 0x0F
    return DecodedInstruction(
        raw=(high << 8) | low,
        high=high,
        low=low,
        opcode=opcode,
        x=high & 0x0F,
        y=low >> 4,
        n=n,
        nn=low,
        nnn=((high & 0x0F) << 8) | low,
        op=int(classify(opcode, n, low)),
    )


def decode_word(instruction: int) -> DecodedInstruction:
    """Decode 16-bit instruction into components."""
    return decode((instruction >> 8) & 0xFF, instruction & 0xFF)
