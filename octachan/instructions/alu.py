"""Register ALU operations (8XYN).

Each operation maps ``(vx, vy)`` to ``(result, vf)``. The result is written
to VX first and VF second, so when X is F the flag wins. Operations that
leave VF alone return ``None`` for it.
"""

import jax.numpy as jnp
from octachan.state import ExecutionState
from octachan.decode import DecodedInstruction
from octachan.constants import FLAG_REGISTER


def _flag(condition) -> jnp.ndarray:
    return jnp.astype(condition, jnp.uint8)


def alu_set(vx, vy):
    """8XY0 - Set: VX = VY."""
    return vy, None


def alu_or(vx, vy):
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy, None


def alu_and(vx, vy):
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy, None


def alu_xor(vx, vy):
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy, None


def alu_add(vx, vy):
    """8XY4 - Add: VX += VY, VF = carry."""
    result = jnp.astype(vx, jnp.int32) + jnp.astype(vy, jnp.int32)
    return result & 0xFF, _flag(result > 255)


def alu_sub_xy(vx, vy):
    """8XY5 - Subtract: VX -= VY, VF = 1 iff VX > VY."""
    a = jnp.astype(vx, jnp.int32)
    b = jnp.astype(vy, jnp.int32)
    return (a - b) & 0xFF, _flag(a > b)


def alu_shift_right(vx, vy):
    """8XY6 - Shift right: VX >>= 1, VF = old low bit."""
    return vx // 2, vx & 1


def alu_sub_yx(vx, vy):
    """8XY7 - Subtract: VX = VY - VX, VF = 1 iff VY > VX."""
    a = jnp.astype(vx, jnp.int32)
    b = jnp.astype(vy, jnp.int32)
    return (b - a) & 0xFF, _flag(b > a)


def alu_shift_left(vx, vy):
    """8XYE - Shift left: VX <<= 1, VF = old high bit."""
    return (jnp.astype(vx, jnp.int32) << 1) & 0xFF, vx >> 7


def make_alu_instruction(alu_fn):
    """Wrap an ALU operation into an instruction handler."""
    def alu_instruction(state: ExecutionState, instruction: DecodedInstruction) -> ExecutionState:
        V = state.cpu.V
        result, vf = alu_fn(V[instruction.x], V[instruction.y])
        V = V.at[instruction.x].set(jnp.astype(result, jnp.uint8))
        if vf is not None:
            V = V.at[FLAG_REGISTER].set(jnp.astype(vf, jnp.uint8))
        return state.update_cpu(V=V)
    alu_instruction.__doc__ = alu_fn.__doc__
    return alu_instruction


execute_alu_set = make_alu_instruction(alu_set)
execute_alu_or = make_alu_instruction(alu_or)
execute_alu_and = make_alu_instruction(alu_and)
execute_alu_xor = make_alu_instruction(alu_xor)
execute_alu_add = make_alu_instruction(alu_add)
execute_alu_sub = make_alu_instruction(alu_sub_xy)
execute_alu_shift_right = make_alu_instruction(alu_shift_right)
execute_alu_sub_reverse = make_alu_instruction(alu_sub_yx)
execute_alu_shift_left = make_alu_instruction(alu_shift_left)
