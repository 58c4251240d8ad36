"""Memory and register load instructions."""

import jax
import jax.numpy as jnp
from octachan.state import ExecutionState
from octachan.decode import DecodedInstruction


def execute_set(state: ExecutionState, instruction: DecodedInstruction) -> ExecutionState:
    """6XNN - Set VX = NN."""
    return state.update_cpu(V=state.cpu.V.at[instruction.x].set(jnp.astype(instruction.nn, jnp.uint8)))


def execute_add(state: ExecutionState, instruction: DecodedInstruction) -> ExecutionState:
    """7XNN - Add NN to VX, wrapping at 256 without touching VF."""
    total = (jnp.astype(state.cpu.V[instruction.x], jnp.int32) + instruction.nn) & 0xFF
    return state.update_cpu(V=state.cpu.V.at[instruction.x].set(jnp.astype(total, jnp.uint8)))


def execute_set_index(state: ExecutionState, instruction: DecodedInstruction) -> ExecutionState:
    """ANNN - Set I = NNN."""
    return state.update_cpu(I=jnp.astype(instruction.nnn, jnp.uint16))


def execute_random(state: ExecutionState, instruction: DecodedInstruction) -> ExecutionState:
    """CXNN - Set VX = random & NN."""
    key, subkey = jax.random.split(state.cpu.rng)
    random_value = jax.random.randint(subkey, shape=(), minval=0, maxval=256, dtype=jnp.int32)
    value = jnp.astype(random_value & instruction.nn, jnp.uint8)
    return state.update_cpu(V=state.cpu.V.at[instruction.x].set(value), rng=key)
