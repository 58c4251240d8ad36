"""Tests for the disassembler."""

import pytest
from octachan import decode_word, disassemble, disassemble_program
from octachan.disassemble import mnemonic


@pytest.mark.parametrize("word,text", [
    (0x00E0, "CLS"),
    (0x00EE, "RTS"),
    (0x1ABC, "JUMP #abc"),
    (0x2300, "CALL #300"),
    (0x3A12, "SKIP.EQ Va, #12"),
    (0x4B34, "SKIP.NE Vb, #34"),
    (0x5120, "SKIP.EQ V1, V2"),
    (0x6C7F, "MVI Vc, #7f"),
    (0x7D01, "ADD. Vd, #01"),
    (0x8120, "MOV V1, V2"),
    (0x8124, "ADD. V1, V2"),
    (0x8126, "SHR. V1"),
    (0x812E, "SHL. V1"),
    (0x9120, "SKIP.NE V1, V2"),
    (0xA123, "MVI I, #123"),
    (0xB200, "JUMP #200(V0)"),
    (0xC30F, "RAND V3, #0f"),
    (0xD125, "SPRITE V1, V2, #5"),
    (0xE59E, "SKIP.KEY V5"),
    (0xE5A1, "SKIP.NOKEY V5"),
    (0xF00A, "WAITKEY V0"),
    (0xF229, "SPRITECHAR V2"),
    (0xF355, "MOVM (I), V0-V3"),
    (0xF365, "MOVM V0-V3, (I)"),
    (0x0123, "DATA #0123"),
    (0xFFFF, "DATA #ffff"),
])
def test_mnemonics(word, text):
    assert mnemonic(decode_word(word)) == text


def test_line_layout():
    """Address, both bytes, then the mnemonic."""
    assert disassemble(decode_word(0x6A02), 0x200) == "0200 6a 02     MVI Va, #02"


def test_program_listing_addresses():
    lines = list(disassemble_program(bytes([0x60, 0x0A, 0x61, 0x05, 0x80, 0x14])))
    assert lines == [
        "0200 60 0a     MVI V0, #0a",
        "0202 61 05     MVI V1, #05",
        "0204 80 14     ADD. V0, V1",
    ]


def test_odd_trailing_byte():
    lines = list(disassemble_program(bytes([0x00, 0xE0, 0x12]), origin=0x300))
    assert lines[-1] == "0302 12 00     JUMP #200"
