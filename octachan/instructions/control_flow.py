"""Control flow instructions."""

import jax
import jax.lax
import jax.numpy as jnp
from octachan.state import ExecutionState
from octachan.decode import DecodedInstruction


def execute_jump(state: ExecutionState, instruction: DecodedInstruction) -> ExecutionState:
    """1NNN - Jump to address NNN."""
    return state.replace(pc=jnp.astype(instruction.nnn, jnp.uint16))


def execute_call(state: ExecutionState, instruction: DecodedInstruction) -> ExecutionState:
    """2NNN - Call subroutine at NNN.

    The return address is written big-endian into memory at the new stack
    pointer, so the stack shares the address space with everything else.
    """
    sp = state.sp + 2
    state = state.replace(cpu=state.cpu.poke_stack(sp, state.pc), sp=sp)
    return execute_jump(state, instruction)


def make_skip_instruction(condition_fn):
    """Factory for skip instructions."""
    def skip_instruction(state: ExecutionState, instruction: DecodedInstruction) -> ExecutionState:
        condition = condition_fn(state.cpu, instruction)
        return jax.lax.cond(
            condition,
            lambda s: s.replace(pc=s.pc + 2),
            lambda s: s,
            state
        )
    return skip_instruction


execute_skip_if_equal_immediate = make_skip_instruction(
    lambda cpu, inst: cpu.V[inst.x] == inst.nn
)

execute_skip_if_not_equal_immediate = make_skip_instruction(
    lambda cpu, inst: cpu.V[inst.x] != inst.nn
)

execute_skip_if_equal_register = make_skip_instruction(
    lambda cpu, inst: cpu.V[inst.x] == cpu.V[inst.y]
)

execute_skip_if_not_equal_register = make_skip_instruction(
    lambda cpu, inst: cpu.V[inst.x] != cpu.V[inst.y]
)

# Register values above 15 wrap onto the keypad
execute_skip_if_key = make_skip_instruction(
    lambda cpu, inst: cpu.keypad[cpu.V[inst.x] & 0xF]
)

execute_skip_if_not_key = make_skip_instruction(
    lambda cpu, inst: ~cpu.keypad[cpu.V[inst.x] & 0xF]
)


def execute_jump_with_offset(state: ExecutionState, instruction: DecodedInstruction) -> ExecutionState:
    """BNNN - Jump to address NNN + V0."""
    jump_address = instruction.nnn + jnp.astype(state.cpu.V[0], jnp.int32)
    return state.replace(pc=jnp.astype(jump_address, jnp.uint16))
