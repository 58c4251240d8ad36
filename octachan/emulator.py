"""Main execution engine: fetch, dispatch, side effects and program loading."""

import os
from typing import Optional, Tuple

import jax
import jax.lax
import jax.numpy as jnp
import numpy as np

from octachan.channels import CpuContext
from octachan.constants import ADDRESS_MASK, MAX_PROGRAM_SIZE, PROGRAM_START, STACK_LIMIT
from octachan.decode import DecodedInstruction, Op, decode_word
from octachan.errors import (
    ChannelClosed, ChannelInterrupted, EmulationStopped, ProgramLoadError, StackOverflowError, StackUnderflowError
)
from octachan.instructions.alu import (
    execute_alu_set, execute_alu_or, execute_alu_and, execute_alu_xor, execute_alu_add,
    execute_alu_sub, execute_alu_shift_right, execute_alu_sub_reverse, execute_alu_shift_left
)
from octachan.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate, execute_skip_if_not_equal_immediate,
    execute_skip_if_equal_register, execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key, execute_skip_if_not_key
)
from octachan.instructions.display import execute_display
from octachan.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from octachan.instructions.misc import (
    execute_get_delay_timer, execute_set_delay_timer, execute_set_sound_timer, execute_add_to_index,
    execute_key_received, execute_font_character, execute_bcd_conversion, execute_store_registers,
    execute_load_registers
)
from octachan.instructions.system import execute_clear_screen, execute_return, execute_unknown
from octachan.keyboard import char_to_index
from octachan.logging import get_logger
from octachan.state import ExecutionState

logger = get_logger("octachan.cpu")

HANDLERS = {
    Op.CLEAR_SCREEN: execute_clear_screen,
    Op.RETURN: execute_return,
    Op.JUMP: execute_jump,
    Op.CALL: execute_call,
    Op.SKIP_EQ_IMMEDIATE: execute_skip_if_equal_immediate,
    Op.SKIP_NE_IMMEDIATE: execute_skip_if_not_equal_immediate,
    Op.SKIP_EQ_REGISTER: execute_skip_if_equal_register,
    Op.LOAD_IMMEDIATE: execute_set,
    Op.ADD_IMMEDIATE: execute_add,
    Op.MOVE: execute_alu_set,
    Op.OR: execute_alu_or,
    Op.AND: execute_alu_and,
    Op.XOR: execute_alu_xor,
    Op.ADD: execute_alu_add,
    Op.SUB: execute_alu_sub,
    Op.SHIFT_RIGHT: execute_alu_shift_right,
    Op.SUB_REVERSE: execute_alu_sub_reverse,
    Op.SHIFT_LEFT: execute_alu_shift_left,
    Op.SKIP_NE_REGISTER: execute_skip_if_not_equal_register,
    Op.LOAD_INDEX: execute_set_index,
    Op.JUMP_OFFSET: execute_jump_with_offset,
    Op.RANDOM: execute_random,
    Op.DRAW: execute_display,
    Op.SKIP_KEY: execute_skip_if_key,
    Op.SKIP_NO_KEY: execute_skip_if_not_key,
    Op.GET_DELAY: execute_get_delay_timer,
    # The blocking half runs in execute(); inside dispatch this is a no-op
    Op.WAIT_KEY: lambda state, instruction: state,
    Op.SET_DELAY: execute_set_delay_timer,
    Op.SET_SOUND: execute_set_sound_timer,
    Op.ADD_INDEX: execute_add_to_index,
    Op.FONT_CHARACTER: execute_font_character,
    Op.BCD: execute_bcd_conversion,
    Op.STORE_REGISTERS: execute_store_registers,
    Op.LOAD_REGISTERS: execute_load_registers,
    Op.UNKNOWN: execute_unknown,
}

_unhandled = set(Op) - set(HANDLERS)
if _unhandled:
    raise RuntimeError(f"No handler for {sorted(op.name for op in _unhandled)}")


@jax.jit
def dispatch(state: ExecutionState, instruction: DecodedInstruction) -> ExecutionState:
    """Apply the pure semantics of a decoded instruction."""
    return jax.lax.switch(
        instruction.op,
        [HANDLERS[op] for op in Op],
        state, instruction
    )


apply_key = jax.jit(execute_key_received)


@jax.jit
def _fetch(state: ExecutionState) -> Tuple[ExecutionState, jnp.ndarray]:
    memory = state.cpu.memory
    pc = jnp.astype(state.pc, jnp.int32)
    high = jnp.astype(memory[pc & ADDRESS_MASK], jnp.uint16)
    low = jnp.astype(memory[(pc + 1) & ADDRESS_MASK], jnp.uint16)
    return state.replace(pc=state.pc + 2), (high << 8) | low


def fetch(state: ExecutionState) -> Tuple[ExecutionState, int]:
    """Read the instruction word at PC and advance PC past it."""
    state, word = _fetch(state)
    return state, int(word)


@jax.jit
def tick_timers(state: ExecutionState) -> ExecutionState:
    """Decrement each nonzero timer by one."""
    cpu = state.cpu
    return state.update_cpu(
        delay_timer=jnp.where(cpu.delay_timer > 0, cpu.delay_timer - 1, cpu.delay_timer),
        sound_timer=jnp.where(cpu.sound_timer > 0, cpu.sound_timer - 1, cpu.sound_timer),
    )


def flush_display(state: ExecutionState, context: Optional[CpuContext]) -> ExecutionState:
    """Send the framebuffer if it changed since the last flush.

    Delivery is best effort: a full or closed display channel drops the
    frame. The dirty flag is cleared either way.
    """
    if not bool(state.cpu.display_dirty):
        return state
    if context is not None:
        frame = np.array(state.cpu.display, dtype=np.bool_)
        try:
            delivered = context.display.try_send(frame)
        except ChannelClosed:
            delivered = False
        if not delivered:
            logger.debug("Display channel unavailable, frame dropped")
    return state.update_cpu(display_dirty=jnp.zeros((), dtype=jnp.bool_))


def _wait_for_key(context: CpuContext) -> int:
    """Block until a mapped key-release event arrives."""
    while True:
        try:
            symbol = context.single_key.recv(stop=context.stop)
        except ChannelInterrupted as e:
            raise EmulationStopped("Stop requested while waiting for a key") from e
        index = char_to_index(symbol)
        if index is None:
            logger.warning(f"Ignoring unmapped key {symbol!r}")
            continue
        return index


def execute(
    state: ExecutionState,
    instruction: DecodedInstruction | int,
    context: Optional[CpuContext] = None,
) -> ExecutionState:
    """Execute a single instruction.

    ``state.pc`` must already point past the instruction. Everything but the
    key wait is pure and runs through :func:`dispatch`; the key wait flushes
    the framebuffer, then blocks on the context's rendezvous channel.

    Raises:
        StackOverflowError: a call would push into the glyph sprites.
        StackUnderflowError: a return with no pushed address.
        EmulationStopped: a stop was requested during a key wait.
    """
    if isinstance(instruction, int):
        instruction = decode_word(instruction)
    op = Op(instruction.op)

    if op is Op.CALL and int(state.sp) + 2 > STACK_LIMIT:
        raise StackOverflowError("Call stack exhausted", int(state.pc), int(state.sp))
    if op is Op.RETURN and int(state.sp) == 0:
        raise StackUnderflowError("Return with empty call stack", int(state.pc), int(state.sp))
    if op is Op.UNKNOWN:
        logger.log_unknown_instruction((int(state.pc) - 2) & 0xFFFF, instruction.raw)

    if op is Op.WAIT_KEY:
        if context is None:
            raise ValueError("Waiting for a key requires a CpuContext")
        state = flush_display(state, context)
        return apply_key(state, instruction, _wait_for_key(context))

    return dispatch(state, instruction)


def load_program(state: ExecutionState, data: bytes) -> ExecutionState:
    """Copy program bytes into memory starting at 0x200."""
    data = bytes(data)
    if len(data) > MAX_PROGRAM_SIZE:
        raise ProgramLoadError(f"Program is {len(data)} bytes, at most {MAX_PROGRAM_SIZE} fit in memory")
    if not data:
        return state
    program = jnp.asarray(np.frombuffer(data, dtype=np.uint8))
    memory = state.cpu.memory.at[PROGRAM_START:PROGRAM_START + len(data)].set(program)
    return state.update_cpu(memory=memory)


def read_rom(filename: str | os.PathLike) -> bytes:
    """Read program bytes from a file."""
    try:
        with open(filename, 'rb') as f:
            return f.read()
    except OSError as e:
        raise ProgramLoadError(e.strerror or str(e), path=os.fspath(filename)) from e


def load_rom(state: ExecutionState, filename: str | os.PathLike) -> ExecutionState:
    """Load ROM data into memory starting at 0x200."""
    data = read_rom(filename)
    try:
        return load_program(state, data)
    except ProgramLoadError as e:
        raise ProgramLoadError(str(e), path=os.fspath(filename)) from e
