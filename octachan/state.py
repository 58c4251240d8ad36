"""Machine state structures."""

import jax
import jax.numpy as jnp
from flax.struct import PyTreeNode, field

from octachan.constants import (
    FONT_START, FONT_DATA, MEMORY_SIZE, NUM_KEYS, NUM_REGISTERS, PROGRAM_START, SCREEN_WIDTH, SCREEN_HEIGHT
)


class CpuState(PyTreeNode):
    """Memory, registers, timers, keypad levels and framebuffer."""
    rng: jax.Array
    memory: jnp.ndarray = field(default_factory=lambda: jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8))
    V: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8))
    I: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    delay_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    sound_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    keypad: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_KEYS, dtype=jnp.bool_))
    display: jnp.ndarray = field(default_factory=lambda: jnp.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=jnp.bool_))
    display_dirty: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.bool_))

    def register(self, index) -> jnp.ndarray:
        """Read general register ``index`` (0-15)."""
        return self.V[index]

    def peek_stack(self, sp) -> jnp.ndarray:
        """Read the big-endian 16-bit value stored at ``sp``."""
        high = self.memory[sp].astype(jnp.uint16)
        low = self.memory[sp + 1].astype(jnp.uint16)
        return (high << 8) | low

    def poke_stack(self, sp, value) -> "CpuState":
        """Write ``value`` as two big-endian bytes at ``sp``."""
        value = jnp.astype(value, jnp.uint16)
        memory = self.memory.at[sp].set((value >> 8).astype(jnp.uint8))
        memory = memory.at[sp + 1].set((value & 0xFF).astype(jnp.uint8))
        return self.replace(memory=memory)

    def with_keypad(self, levels) -> "CpuState":
        """Replace the whole keypad level-state."""
        return self.replace(keypad=jnp.asarray(levels, dtype=jnp.bool_).reshape(NUM_KEYS))


class ExecutionState(PyTreeNode):
    """CPU state plus program counter, stack pointer and bookkeeping."""
    cpu: CpuState
    pc: jnp.ndarray = field(default_factory=lambda: jnp.asarray(PROGRAM_START, dtype=jnp.uint16))
    sp: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    unknown_instructions: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.int32))

    def update_cpu(self, **changes) -> "ExecutionState":
        """Replace fields of the nested CPU state."""
        return self.replace(cpu=self.cpu.replace(**changes))


def create_state(rng: jax.Array = jax.random.PRNGKey(0)) -> ExecutionState:
    """Create initial emulator state with font data loaded."""
    cpu = CpuState(rng)
    cpu = cpu.replace(memory=cpu.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA))
    return ExecutionState(cpu)
