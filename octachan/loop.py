"""Fixed-rate execution loop."""

import enum
import os
import time
from typing import Callable, Optional

import jax

from octachan.channels import CpuContext
from octachan.constants import DEFAULT_FPS, DEFAULT_FREQUENCY, PROGRAM_START
from octachan.decode import DecodedInstruction, decode_word
from octachan.emulator import execute, fetch, flush_display, load_program, read_rom, tick_timers
from octachan.errors import ChannelClosed, EmulationStopped, StackError
from octachan.logging import frame_progress, get_logger
from octachan.state import ExecutionState, create_state

logger = get_logger("octachan.loop")


class LoopStatus(enum.Enum):
    RUNNING = "running"
    HALTED = "halted"    # PC moved past the end of the program
    STOPPED = "stopped"  # stop requested through the context


class ExecutionLoop:
    """Owns the machine state and runs a program at a fixed frame rate.

    Every frame executes up to ``frequency / fps`` instructions, then ticks
    the timers, triggers the sound channel while the sound timer is active
    and flushes the framebuffer. The loop halts once PC leaves the loaded
    program; there is no halt instruction.

    Args:
        program: Program bytes, loaded at 0x200.
        frequency: Instructions per second.
        fps: Frames per second.
        rng: Key for the random instruction. Defaults to ``PRNGKey(seed)``.
        seed: Seed used when no ``rng`` is given.
        sleep: Called with the frame duration after every frame.
    """

    def __init__(
        self,
        program: bytes,
        frequency: int = DEFAULT_FREQUENCY,
        fps: int = DEFAULT_FPS,
        rng: Optional[jax.Array] = None,
        seed: int = 0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if frequency <= 0 or fps <= 0:
            raise ValueError("frequency and fps must be positive")
        if rng is None:
            rng = jax.random.PRNGKey(seed)
        self.state: ExecutionState = load_program(create_state(rng), program)
        self.program_length = len(program)
        self.frequency = frequency
        self.fps = fps
        self.sleep = sleep
        self.frames = 0
        self.instructions = 0
        self.status = LoopStatus.RUNNING
        logger.log_program_loaded(self.program_length)

    @classmethod
    def from_rom(cls, filename: str | os.PathLike, **kwargs) -> "ExecutionLoop":
        """Build a loop for the program stored in ``filename``."""
        return cls(read_rom(filename), **kwargs)

    @property
    def frame_duration(self) -> float:
        return 1.0 / self.fps

    @property
    def instructions_per_frame(self) -> int:
        return self.frequency // self.fps

    @property
    def end_address(self) -> int:
        return PROGRAM_START + self.program_length

    @property
    def running(self) -> bool:
        """Whether PC still points inside the loaded program."""
        return int(self.state.pc) < self.end_address

    def _drain_keyboard(self, context: Optional[CpuContext]):
        if context is None:
            return
        try:
            levels = context.keyboard.try_recv()
        except ChannelClosed:
            return
        if levels is not None:
            self.state = self.state.replace(cpu=self.state.cpu.with_keypad(levels))

    def step(self, context: Optional[CpuContext] = None) -> DecodedInstruction:
        """Fetch, decode and execute one instruction."""
        self.state, word = fetch(self.state)
        instruction = decode_word(word)
        self._drain_keyboard(context)
        self.state = execute(self.state, instruction, context)
        self.instructions += 1
        return instruction

    def _trigger_sound(self, context: Optional[CpuContext]):
        if context is None:
            return
        try:
            if not context.sound.try_send(True):
                logger.debug("Sound channel full, trigger dropped")
        except ChannelClosed:
            logger.debug("Sound channel closed, trigger dropped")

    def run_frame(self, context: Optional[CpuContext] = None) -> int:
        """Run one frame without sleeping. Returns the instructions executed."""
        executed = 0
        for _ in range(self.instructions_per_frame):
            if not self.running:
                break
            self.step(context)
            executed += 1

        if int(self.state.cpu.sound_timer) > 0:
            self._trigger_sound(context)
        self.state = tick_timers(self.state)
        self.state = flush_display(self.state, context)
        self.frames += 1
        return executed

    def run(
        self,
        context: Optional[CpuContext] = None,
        max_frames: Optional[int] = None,
        progress: bool = False,
    ) -> LoopStatus:
        """Run until the program ends, a stop is requested or ``max_frames`` elapse.

        A stack overflow or underflow propagates to the caller.
        """
        self.status = LoopStatus.RUNNING
        with frame_progress(total=max_frames, disable=not progress) as bar:
            while self.running:
                if context is not None and context.stop.is_set():
                    self.status = LoopStatus.STOPPED
                    break
                if max_frames is not None and self.frames >= max_frames:
                    self.status = LoopStatus.STOPPED
                    break
                try:
                    self.run_frame(context)
                except EmulationStopped:
                    self.status = LoopStatus.STOPPED
                    break
                except StackError:
                    logger.log_registers(self.state, level="ERROR")
                    raise
                bar.update(1)
                self.sleep(self.frame_duration)
            else:
                self.status = LoopStatus.HALTED

        logger.log_halt(
            self.status.value, self.frames, self.instructions, int(self.state.unknown_instructions)
        )
        logger.log_registers(self.state)
        return self.status
