"""Timer, index and register-block instructions (Fxxx)."""

import jax.numpy as jnp
from octachan.state import ExecutionState
from octachan.decode import DecodedInstruction
from octachan.constants import ADDRESS_MASK, FONT_GLYPH_SIZE, FONT_START, NUM_REGISTERS


def execute_get_delay_timer(state: ExecutionState, instruction: DecodedInstruction) -> ExecutionState:
    """FX07 - Set VX to delay timer value."""
    return state.update_cpu(V=state.cpu.V.at[instruction.x].set(state.cpu.delay_timer))


def execute_set_delay_timer(state: ExecutionState, instruction: DecodedInstruction) -> ExecutionState:
    """FX15 - Set delay timer to VX."""
    return state.update_cpu(delay_timer=state.cpu.V[instruction.x])


def execute_set_sound_timer(state: ExecutionState, instruction: DecodedInstruction) -> ExecutionState:
    """FX18 - Set sound timer to VX."""
    return state.update_cpu(sound_timer=state.cpu.V[instruction.x])


def execute_add_to_index(state: ExecutionState, instruction: DecodedInstruction) -> ExecutionState:
    """FX1E - Add VX to I (16-bit, no flag)."""
    total = (jnp.astype(state.cpu.I, jnp.int32) + jnp.astype(state.cpu.V[instruction.x], jnp.int32)) & 0xFFFF
    return state.update_cpu(I=jnp.astype(total, jnp.uint16))


def execute_key_received(state: ExecutionState, instruction: DecodedInstruction, key_index) -> ExecutionState:
    """FX0A completion - store the released key in VX and reset both timers."""
    cpu = state.cpu
    return state.update_cpu(
        V=cpu.V.at[instruction.x].set(jnp.astype(key_index, jnp.uint8)),
        delay_timer=jnp.zeros_like(cpu.delay_timer),
        sound_timer=jnp.zeros_like(cpu.sound_timer),
    )


def execute_font_character(state: ExecutionState, instruction: DecodedInstruction) -> ExecutionState:
    """FX29 - Set I to location of sprite for digit VX."""
    font_address = FONT_START + jnp.astype(state.cpu.V[instruction.x], jnp.int32) * FONT_GLYPH_SIZE
    return state.update_cpu(I=jnp.astype(font_address, jnp.uint16))


def execute_bcd_conversion(state: ExecutionState, instruction: DecodedInstruction) -> ExecutionState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    value = state.cpu.V[instruction.x]

    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ], dtype=jnp.uint8)

    indices = (jnp.astype(state.cpu.I, jnp.int32) + jnp.arange(3)) & ADDRESS_MASK
    return state.update_cpu(memory=state.cpu.memory.at[indices].set(digits))


def _block_indices(state: ExecutionState) -> jnp.ndarray:
    return (jnp.astype(state.cpu.I, jnp.int32) + jnp.arange(NUM_REGISTERS)) & ADDRESS_MASK


def execute_store_registers(state: ExecutionState, instruction: DecodedInstruction) -> ExecutionState:
    """FX55 - Store V0 through VX in memory starting at I."""
    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
    indices = _block_indices(state)
    current_memory_values = state.cpu.memory[indices]
    new_memory_values = jnp.where(register_mask, state.cpu.V, current_memory_values)
    return state.update_cpu(memory=state.cpu.memory.at[indices].set(new_memory_values))


def execute_load_registers(state: ExecutionState, instruction: DecodedInstruction) -> ExecutionState:
    """FX65 - Load V0 through VX from memory starting at I."""
    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
    memory_values = state.cpu.memory[_block_indices(state)]
    return state.update_cpu(V=jnp.where(register_mask, memory_values, state.cpu.V))
