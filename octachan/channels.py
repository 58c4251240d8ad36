"""Bounded channels connecting the execution loop to a presentation loop.

The CPU thread and the presentation thread share no machine state; they
only exchange values through four one-way channels whose capacities encode
the delivery policy:

========== ================= ======== ==========================================
channel    direction         capacity policy
========== ================= ======== ==========================================
keyboard   platform -> cpu   1        latest value, sender drops when full
single_key platform -> cpu   0        rendezvous, only delivered to a waiting CPU
sound      cpu -> platform   1        best effort, dropped when full
display    cpu -> platform   2        frames in order, dropped when full
========== ================= ======== ==========================================
"""

import queue
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Optional, Tuple

from octachan.errors import ChannelClosed, ChannelInterrupted, ChannelTimeout

KEYBOARD_CAPACITY = 1
SINGLE_KEY_CAPACITY = 0
SOUND_CAPACITY = 1
DISPLAY_CAPACITY = 2

# Blocking operations wake up this often to notice a close()
_POLL_INTERVAL = 0.05

_EMPTY = object()


def _deadline(timeout: Optional[float]) -> Optional[float]:
    return None if timeout is None else time.monotonic() + timeout


def _remaining(deadline: Optional[float]) -> Optional[float]:
    return None if deadline is None else max(0.0, deadline - time.monotonic())


class Channel:
    """Bounded FIFO channel with blocking and non-blocking operations."""

    def __init__(self, capacity: int, name: str = "channel"):
        if capacity < 1:
            raise ValueError("Use RendezvousChannel for a zero-capacity channel")
        self.name = name
        self.capacity = capacity
        self._queue = queue.Queue(maxsize=capacity)
        self._closed = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def close(self):
        """Close the channel. Pending items can still be received."""
        self._closed.set()

    def __len__(self) -> int:
        return self._queue.qsize()

    def try_send(self, item: Any) -> bool:
        """Send without blocking. Returns False if the channel is full."""
        if self.closed:
            raise ChannelClosed(f"{self.name} channel is closed")
        try:
            self._queue.put_nowait(item)
        except queue.Full:
            return False
        return True

    def send(self, item: Any, timeout: Optional[float] = None):
        """Send, blocking while the channel is full."""
        deadline = _deadline(timeout)
        while True:
            if self.closed:
                raise ChannelClosed(f"{self.name} channel is closed")
            remaining = _remaining(deadline)
            if remaining == 0.0:
                raise ChannelTimeout(f"send on {self.name} channel timed out")
            wait = _POLL_INTERVAL if remaining is None else min(_POLL_INTERVAL, remaining)
            try:
                self._queue.put(item, timeout=wait)
                return
            except queue.Full:
                continue

    def try_recv(self, default: Any = None) -> Any:
        """Receive without blocking, returning ``default`` if nothing is pending."""
        try:
            return self._queue.get_nowait()
        except queue.Empty:
            if self.closed:
                raise ChannelClosed(f"{self.name} channel is closed")
            return default

    def recv(self, timeout: Optional[float] = None) -> Any:
        """Receive, blocking until an item is available."""
        deadline = _deadline(timeout)
        while True:
            try:
                return self._queue.get_nowait()
            except queue.Empty:
                pass
            if self.closed:
                raise ChannelClosed(f"{self.name} channel is closed")
            remaining = _remaining(deadline)
            if remaining == 0.0:
                raise ChannelTimeout(f"recv on {self.name} channel timed out")
            wait = _POLL_INTERVAL if remaining is None else min(_POLL_INTERVAL, remaining)
            try:
                return self._queue.get(timeout=wait)
            except queue.Empty:
                continue


class RendezvousChannel:
    """Zero-capacity channel: a send completes only when a receiver takes it.

    ``send`` hands the item over only while a receiver is blocked in
    ``recv``; with ``timeout=0`` it is the non-blocking offer used by the
    presentation side for key-release events.
    """

    capacity = 0

    def __init__(self, name: str = "rendezvous"):
        self.name = name
        self._cond = threading.Condition()
        self._slot = _EMPTY
        self._waiting = 0  # receivers not yet matched with a sender
        self._sent = 0
        self._taken = 0
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def receiver_waiting(self) -> bool:
        with self._cond:
            return self._waiting > 0

    def __len__(self) -> int:
        return 0

    def close(self):
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def send(self, item: Any, timeout: Optional[float] = None) -> bool:
        """Hand ``item`` to a waiting receiver.

        Returns False if no receiver showed up before ``timeout``.
        """
        deadline = _deadline(timeout)
        with self._cond:
            while not self._closed and (self._waiting == 0 or self._slot is not _EMPTY):
                remaining = _remaining(deadline)
                if remaining == 0.0:
                    return False
                self._cond.wait(remaining)
            if self._closed:
                raise ChannelClosed(f"{self.name} channel is closed")
            self._slot = item
            self._waiting -= 1
            self._sent += 1
            ticket = self._sent
            self._cond.notify_all()
            # The matched receiver is committed to taking the item
            while self._taken < ticket:
                self._cond.wait()
            return True

    def try_send(self, item: Any) -> bool:
        return self.send(item, timeout=0)

    def recv(self, timeout: Optional[float] = None, stop: Optional[threading.Event] = None) -> Any:
        """Block until a sender hands over an item.

        The receiver stays registered for the whole wait, so a sender can
        match it at any moment until it returns. Setting ``stop`` makes it
        give up with :class:`ChannelInterrupted`.
        """
        deadline = _deadline(timeout)
        with self._cond:
            self._waiting += 1
            self._cond.notify_all()
            while self._slot is _EMPTY:
                remaining = _remaining(deadline)
                interrupted = stop is not None and stop.is_set()
                if self._closed or interrupted or remaining == 0.0:
                    self._waiting -= 1
                    if self._closed:
                        raise ChannelClosed(f"{self.name} channel is closed")
                    if interrupted:
                        raise ChannelInterrupted(f"recv on {self.name} channel interrupted")
                    raise ChannelTimeout(f"recv on {self.name} channel timed out")
                if stop is not None:
                    # threading.Event cannot notify a Condition, so poll it
                    remaining = _POLL_INTERVAL if remaining is None else min(_POLL_INTERVAL, remaining)
                self._cond.wait(remaining)
            item = self._slot
            self._slot = _EMPTY
            self._taken += 1
            self._cond.notify_all()
            return item


@dataclass
class PlatformContext:
    """Endpoints used by the presentation loop.

    Sends on ``keyboard`` and ``single_key``; receives on ``sound`` and
    ``display``.
    """
    keyboard: Channel
    single_key: RendezvousChannel
    sound: Channel
    display: Channel
    stop: threading.Event = field(default_factory=threading.Event)

    def request_stop(self):
        """Ask the execution loop to stop at its next check."""
        self.stop.set()


@dataclass
class CpuContext:
    """Endpoints used by the execution loop.

    Receives on ``keyboard`` and ``single_key``; sends on ``sound`` and
    ``display``. ``stop`` is only ever read by the CPU side.
    """
    keyboard: Channel
    single_key: RendezvousChannel
    sound: Channel
    display: Channel
    stop: threading.Event = field(default_factory=threading.Event)

    def close(self):
        """Close the CPU-to-platform channels."""
        self.sound.close()
        self.display.close()


def create_contexts() -> Tuple[PlatformContext, CpuContext]:
    """Create the four channels and the endpoint bundles for both sides."""
    keyboard = Channel(KEYBOARD_CAPACITY, "keyboard")
    single_key = RendezvousChannel("single_key")
    sound = Channel(SOUND_CAPACITY, "sound")
    display = Channel(DISPLAY_CAPACITY, "display")
    stop = threading.Event()

    return (
        PlatformContext(keyboard=keyboard, single_key=single_key, sound=sound, display=display, stop=stop),
        CpuContext(keyboard=keyboard, single_key=single_key, sound=sound, display=display, stop=stop),
    )
