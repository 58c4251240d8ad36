"""Display operations."""

import jax.numpy as jnp
from octachan.state import ExecutionState
from octachan.decode import DecodedInstruction
from octachan.constants import ADDRESS_MASK, FLAG_REGISTER, SCREEN_WIDTH, SCREEN_HEIGHT

# Pre-computed coordinate grids for display operations
xx, yy = jnp.meshgrid(jnp.arange(SCREEN_WIDTH), jnp.arange(SCREEN_HEIGHT), indexing='ij')


def execute_display(state: ExecutionState, instruction: DecodedInstruction) -> ExecutionState:
    """DXYN - Draw sprite at (VX, VY) with height N.

    The origin wraps onto the screen but the sprite itself is clipped at the
    right and bottom edges. Set sprite bits toggle the destination pixel and
    VF is 1 iff at least one lit pixel was turned off.
    """
    cpu = state.cpu
    sprite_x = jnp.astype(cpu.V[instruction.x] % SCREEN_WIDTH, jnp.int32)
    sprite_y = jnp.astype(cpu.V[instruction.y] % SCREEN_HEIGHT, jnp.int32)

    col_offset = xx - sprite_x
    row_offset = yy - sprite_y
    in_sprite = (col_offset >= 0) & (col_offset < 8) & (row_offset >= 0) & (row_offset < instruction.n)

    addresses = (jnp.astype(cpu.I, jnp.int32) + jnp.clip(row_offset, 0, 15)) & ADDRESS_MASK
    sprite_bytes = jnp.astype(cpu.memory[addresses], jnp.int32)
    bits = (sprite_bytes >> (7 - jnp.clip(col_offset, 0, 7))) & 1
    sprite = (bits == 1) & in_sprite

    collision = jnp.any(cpu.display & sprite)
    return state.update_cpu(
        display=cpu.display ^ sprite,
        display_dirty=jnp.astype(cpu.display_dirty | (instruction.n > 0), jnp.bool_),
        V=cpu.V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8)),
    )
