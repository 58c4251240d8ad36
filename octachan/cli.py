"""Command line entry point.

Examples:
    octachan rom=games/pong.ch8
    octachan rom=games/pong.ch8 headless=true max_frames=600
    octachan rom=games/pong.ch8 disassemble=true
"""

import threading
import sys

import hydra
from omegaconf import DictConfig, OmegaConf

from octachan.channels import create_contexts
from octachan.config import CONFIG_NAME
from octachan.disassemble import disassemble_program
from octachan.emulator import read_rom
from octachan.errors import OctachanError
from octachan.logging import get_logger, set_log_level
from octachan.loop import ExecutionLoop
from octachan.rendering import display_to_text

logger = get_logger("octachan")


def run(cfg: DictConfig) -> int:
    """Run the configured program. Returns a process exit code."""
    set_log_level(cfg.log_level)
    if cfg.rom is None:
        logger.error("No program given, pass rom=<path>")
        return 2

    try:
        program = read_rom(cfg.rom)
    except OctachanError as e:
        logger.error(str(e))
        return 1

    if cfg.disassemble:
        for line in disassemble_program(program):
            print(line)
        return 0

    loop = ExecutionLoop(program, frequency=cfg.frequency, fps=cfg.fps, seed=cfg.seed)
    platform_context, cpu_context = create_contexts()

    if cfg.headless:
        try:
            loop.run(cpu_context, max_frames=cfg.max_frames, progress=True)
        except OctachanError as e:
            logger.error(str(e))
            return 1
        print(display_to_text(loop.state.cpu.display))
        return 0

    from octachan.platform import PygamePlatform

    failure = []

    def cpu_thread():
        try:
            loop.run(cpu_context, max_frames=cfg.max_frames)
        except OctachanError as e:
            failure.append(e)
            logger.error(str(e))
        finally:
            cpu_context.close()

    worker = threading.Thread(target=cpu_thread, name="octachan-cpu", daemon=True)
    worker.start()

    platform = PygamePlatform(
        platform_context,
        scale=cfg.scale,
        color_scheme=cfg.color_scheme,
        fps=cfg.fps,
        stop_on_quit=cfg.stop_on_quit,
    )
    platform.start()
    worker.join()
    return 1 if failure else 0


@hydra.main(version_base=None, config_path="conf", config_name=CONFIG_NAME)
def _main(cfg: DictConfig) -> None:
    logger.debug(OmegaConf.to_yaml(cfg))
    code = run(cfg)
    if code:
        sys.exit(code)


def main():
    _main()


if __name__ == "__main__":
    main()
