"""Pygame presentation loop.

Runs on the main thread and owns every device: the window, the keyboard
and the speaker. It talks to the execution loop only through a
:class:`~octachan.channels.PlatformContext`.
"""

from typing import Dict, Optional

import numpy as np
import pygame

from octachan.channels import PlatformContext
from octachan.constants import NUM_KEYS, SCREEN_HEIGHT, SCREEN_WIDTH
from octachan.errors import ChannelClosed
from octachan.keyboard import char_to_index, index_to_char
from octachan.logging import get_logger
from octachan.rendering import create_color_scheme, display_to_rgb

logger = get_logger("octachan.platform")

# pygame names its keys K_0..K_9 and K_a..K_f
KEY_MAP: Dict[int, str] = {
    getattr(pygame, f"K_{index_to_char(index).lower()}"): index_to_char(index)
    for index in range(NUM_KEYS)
}

BEEP_FREQUENCY = 440
SAMPLE_RATE = 22050


def _make_beep(duration: float) -> Optional["pygame.mixer.Sound"]:
    try:
        pygame.mixer.init(frequency=SAMPLE_RATE, size=-16, channels=1)
    except pygame.error as e:
        logger.warning(f"Audio unavailable, sound disabled: {e}")
        return None
    t = np.arange(int(SAMPLE_RATE * duration)) / SAMPLE_RATE
    wave = np.where(np.sin(2 * np.pi * BEEP_FREQUENCY * t) >= 0, 1, -1)
    samples = (wave * 0.25 * 32767).astype(np.int16)
    channels = pygame.mixer.get_init()[2]
    if channels > 1:
        samples = np.repeat(samples[:, None], channels, axis=1)
    return pygame.sndarray.make_sound(samples)


class PygamePlatform:
    """Window, keypad and speaker for the emulator.

    Args:
        context: Platform side of the channels.
        scale: Size in screen pixels of one emulated pixel.
        color_scheme: Name of a scheme from :mod:`octachan.rendering`.
        fps: Rate of the presentation loop.
        stop_on_quit: Also ask the execution loop to stop when the window
            closes. By default only the presentation side ends.
    """

    def __init__(
        self,
        context: PlatformContext,
        scale: int = 10,
        color_scheme: str = "classic",
        fps: int = 60,
        stop_on_quit: bool = False,
    ):
        self.context = context
        self.scale = scale
        self.on_color, self.off_color = create_color_scheme(color_scheme)
        self.fps = fps
        self.stop_on_quit = stop_on_quit
        self.keyboard_state = np.zeros(NUM_KEYS, dtype=np.bool_)
        self.frame = np.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=np.bool_)
        self.running = False

    def start(self):
        """Run the presentation loop until the window is closed."""
        pygame.init()
        screen = pygame.display.set_mode((SCREEN_WIDTH * self.scale, SCREEN_HEIGHT * self.scale))
        pygame.display.set_caption("octachan")
        clock = pygame.time.Clock()
        beep = _make_beep(1.0 / self.fps)

        self.running = True
        try:
            while self.running:
                self.update()
                self.render(screen, beep)
                clock.tick(self.fps)
        finally:
            pygame.quit()
        if self.stop_on_quit:
            self.context.request_stop()

    def update(self):
        """Poll input events and forward them to the CPU."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN and event.key in KEY_MAP:
                self.keyboard_state[char_to_index(KEY_MAP[event.key])] = True
            elif event.type == pygame.KEYUP and event.key in KEY_MAP:
                symbol = KEY_MAP[event.key]
                index = char_to_index(symbol)
                if self.keyboard_state[index]:
                    # Only reaches the CPU if it is blocked waiting for a key
                    try:
                        self.context.single_key.try_send(symbol)
                    except ChannelClosed:
                        pass
                self.keyboard_state[index] = False

        try:
            self.context.keyboard.try_send(self.keyboard_state.copy())
        except ChannelClosed:
            pass

    def render(self, screen, beep=None):
        """Play a pending sound trigger and draw the latest frame."""
        try:
            if self.context.sound.try_recv() and beep is not None:
                beep.play()
        except ChannelClosed:
            pass
        try:
            frame = self.context.display.try_recv()
        except ChannelClosed:
            frame = None
        if frame is not None:
            self.frame = frame

        rgb = display_to_rgb(self.frame, self.scale, self.on_color, self.off_color)
        # pygame surfaces are indexed [x, y]
        pygame.surfarray.blit_array(screen, rgb.swapaxes(0, 1))
        pygame.display.flip()
