"""Tests for ALU operations (8xxx)."""

import pytest
from octachan import execute
from conftest import set_registers

SAMPLE_VALUES = [0, 1, 2, 0x0F, 0x7F, 0x80, 0x81, 0xFE, 0xFF]


class TestBasicALU:
    """Test register moves and bitwise operations."""

    def test_alu_set_basic(self, fresh_state):
        """8XY0 - Set VX = VY."""
        state = set_registers(fresh_state, V1=0x42, V2=0x99)

        state = execute(state, 0x8120)  # V1 = V2

        assert state.cpu.V[1] == 0x99
        assert state.cpu.V[2] == 0x99

    def test_alu_or_basic(self, fresh_state):
        """8XY1 - OR operation."""
        state = set_registers(fresh_state, V1=0xF0, V2=0x0F)
        state = execute(state, 0x8121)  # V1 |= V2
        assert state.cpu.V[1] == 0xFF

    def test_alu_and_basic(self, fresh_state):
        """8XY2 - AND operation."""
        state = set_registers(fresh_state, V1=0xF0, V2=0xF1)
        state = execute(state, 0x8122)  # V1 &= V2
        assert state.cpu.V[1] == 0xF0

    def test_alu_xor_basic(self, fresh_state):
        """8XY3 - XOR operation."""
        state = set_registers(fresh_state, V1=0xFF, V2=0xF0)
        state = execute(state, 0x8123)  # V1 ^= V2
        assert state.cpu.V[1] == 0x0F

    def test_bitwise_ops_leave_flag_alone(self, fresh_state):
        """Logical operations do not touch VF."""
        state = set_registers(fresh_state, V1=0x0F, V2=0xF0, VF=0x77)
        for word in (0x8120, 0x8121, 0x8122, 0x8123):
            state = execute(state, word)
            assert state.cpu.V[15] == 0x77

    def test_bitwise_op_into_flag_register(self, fresh_state):
        """8FY1 stores the result in VF since no flag is produced."""
        state = set_registers(fresh_state, V1=0x0F, VF=0xF0)
        state = execute(state, 0x8F11)
        assert state.cpu.V[15] == 0xFF


class TestAdd:
    """Test 8XY4."""

    @pytest.mark.parametrize("a", SAMPLE_VALUES)
    @pytest.mark.parametrize("b", [0, 1, 0x7F, 0x80, 0xFF])
    def test_add_wraps_and_sets_carry(self, fresh_state, a, b):
        """VX = (a + b) mod 256, VF = 1 iff a + b > 255."""
        state = set_registers(fresh_state, V0=a, V1=b)
        state = execute(state, 0x8014)
        assert state.cpu.V[0] == (a + b) % 256
        assert state.cpu.V[15] == (1 if a + b > 255 else 0)

    def test_add_clears_stale_flag(self, fresh_state):
        """A sum that fits resets VF to 0."""
        state = set_registers(fresh_state, V0=1, V1=2, VF=1)
        state = execute(state, 0x8014)
        assert state.cpu.V[15] == 0

    def test_add_into_flag_register(self, fresh_state):
        """8FY4 - the carry overwrites the sum stored in VF."""
        state = set_registers(fresh_state, VF=0xFF, V1=0x02)
        state = execute(state, 0x8F14)
        assert state.cpu.V[15] == 1


class TestSubtract:
    """Test 8XY5 and 8XY7."""

    @pytest.mark.parametrize("a", SAMPLE_VALUES)
    @pytest.mark.parametrize("b", [0, 1, 0x80, 0xFF])
    def test_sub_flag_is_strict_greater(self, fresh_state, a, b):
        """VX = (a - b) mod 256, VF = 1 iff a > b."""
        state = set_registers(fresh_state, V2=a, V3=b)
        state = execute(state, 0x8235)
        assert state.cpu.V[2] == (a - b) % 256
        assert state.cpu.V[15] == (1 if a > b else 0)

    def test_sub_equal_operands_clear_flag(self, fresh_state):
        """Equal operands give 0 and VF = 0."""
        state = set_registers(fresh_state, V2=0x42, V3=0x42, VF=1)
        state = execute(state, 0x8235)
        assert state.cpu.V[2] == 0
        assert state.cpu.V[15] == 0

    @pytest.mark.parametrize("a", SAMPLE_VALUES)
    @pytest.mark.parametrize("b", [0, 1, 0x80, 0xFF])
    def test_reverse_sub(self, fresh_state, a, b):
        """8XY7 - VX = (b - a) mod 256, VF = 1 iff b > a."""
        state = set_registers(fresh_state, V4=a, V5=b)
        state = execute(state, 0x8457)
        assert state.cpu.V[4] == (b - a) % 256
        assert state.cpu.V[15] == (1 if b > a else 0)


class TestShifts:
    """Test 8XY6 and 8XYE."""

    @pytest.mark.parametrize("value", SAMPLE_VALUES)
    def test_shift_right(self, fresh_state, value):
        """VF = old low bit, VX = value // 2."""
        state = set_registers(fresh_state, V6=value, V7=0xAA)
        state = execute(state, 0x8676)
        assert state.cpu.V[6] == value // 2
        assert state.cpu.V[15] == value & 1
        assert state.cpu.V[7] == 0xAA  # VY is not used

    @pytest.mark.parametrize("value", SAMPLE_VALUES)
    def test_shift_left(self, fresh_state, value):
        """VF = old high bit, VX = value << 1 truncated to 8 bits."""
        state = set_registers(fresh_state, V6=value)
        state = execute(state, 0x867E)
        assert state.cpu.V[6] == (value << 1) & 0xFF
        assert state.cpu.V[15] == value >> 7


def test_undefined_alu_op_is_noop(fresh_state):
    """8XY8 changes nothing but the unknown counter."""
    state = set_registers(fresh_state, V1=0x12, V2=0x34, VF=0x56)
    new_state = execute(state, 0x8128)
    assert (new_state.cpu.V == state.cpu.V).all()
    assert new_state.unknown_instructions == 1
