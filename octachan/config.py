"""Emulator configuration.

The schema is registered with hydra's ConfigStore as ``base_config`` and
extended by the packaged ``conf/config.yaml``, which is the primary config
of the ``octachan`` command.
"""

from dataclasses import dataclass
from typing import Optional

from hydra.core.config_store import ConfigStore

from octachan.constants import DEFAULT_FPS, DEFAULT_FREQUENCY

CONFIG_MODULE = "octachan.conf"
CONFIG_NAME = "config"


@dataclass
class EmulatorConfig:
    """Settings for a run.

    Attributes:
        rom: Path of the program to load
        frequency: Instructions executed per second
        fps: Frames per second (timer ticks, display flushes)
        seed: Seed for the random instruction
        max_frames: Stop after this many frames (None runs to completion)
        headless: Run without opening a window
        disassemble: Print the program listing instead of running it
        scale: Window pixels per emulated pixel
        color_scheme: Rendering colours
        stop_on_quit: Closing the window also stops the CPU; when false the CPU
            keeps running the program to completion
        log_level: Minimum console log level
    """
    rom: Optional[str] = None
    frequency: int = DEFAULT_FREQUENCY
    fps: int = DEFAULT_FPS
    seed: int = 0
    max_frames: Optional[int] = None
    headless: bool = False
    disassemble: bool = False
    scale: int = 10
    color_scheme: str = "classic"
    stop_on_quit: bool = True
    log_level: str = "INFO"


ConfigStore.instance().store(name="base_config", node=EmulatorConfig)
