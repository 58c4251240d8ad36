"""System instructions (0x0xxx) and the unknown-instruction fallback."""

import jax.numpy as jnp
from octachan.state import ExecutionState
from octachan.decode import DecodedInstruction


def execute_unknown(state: ExecutionState, instruction: DecodedInstruction) -> ExecutionState:
    """Undefined instruction: no effect besides being counted."""
    return state.replace(unknown_instructions=state.unknown_instructions + 1)


def execute_clear_screen(state: ExecutionState, instruction: DecodedInstruction) -> ExecutionState:
    """00E0 - Clear display."""
    display = state.cpu.display
    return state.update_cpu(
        display=jnp.zeros_like(display),
        display_dirty=state.cpu.display_dirty | jnp.any(display),
    )


def execute_return(state: ExecutionState, instruction: DecodedInstruction) -> ExecutionState:
    """00EE - Return from subroutine."""
    address = state.cpu.peek_stack(state.sp)
    return state.replace(pc=address, sp=state.sp - 2)
