"""Tests for the bounded channels between the two loops."""

import threading
import time

import pytest
from octachan.channels import Channel, RendezvousChannel, create_contexts
from octachan.errors import ChannelClosed, ChannelInterrupted, ChannelTimeout


class TestChannel:
    """Test the bounded FIFO channel."""

    def test_try_send_drops_when_full(self):
        channel = Channel(1)
        assert channel.try_send("a")
        assert not channel.try_send("b")
        assert channel.try_recv() == "a"
        assert channel.try_recv() is None

    def test_fifo_order(self):
        channel = Channel(2)
        channel.try_send(1)
        channel.try_send(2)
        assert not channel.try_send(3)
        assert [channel.recv(timeout=1), channel.recv(timeout=1)] == [1, 2]

    def test_try_recv_default(self):
        assert Channel(1).try_recv(default="none") == "none"

    def test_recv_timeout(self):
        with pytest.raises(ChannelTimeout):
            Channel(1).recv(timeout=0.05)

    def test_send_timeout_when_full(self):
        channel = Channel(1)
        channel.send("a")
        with pytest.raises(ChannelTimeout):
            channel.send("b", timeout=0.05)

    def test_blocking_send_waits_for_space(self):
        channel = Channel(1)
        channel.send("a")
        thread = threading.Thread(target=lambda: channel.send("b", timeout=5))
        thread.start()
        assert channel.recv(timeout=1) == "a"
        thread.join(timeout=5)
        assert channel.recv(timeout=1) == "b"

    def test_closed_channel_refuses_sends(self):
        channel = Channel(1)
        channel.close()
        with pytest.raises(ChannelClosed):
            channel.try_send("a")
        with pytest.raises(ChannelClosed):
            channel.send("a")

    def test_pending_items_survive_close(self):
        channel = Channel(2)
        channel.try_send("a")
        channel.close()
        assert channel.try_recv() == "a"
        with pytest.raises(ChannelClosed):
            channel.try_recv()

    def test_close_wakes_blocked_receiver(self):
        channel = Channel(1)
        threading.Timer(0.1, channel.close).start()
        with pytest.raises(ChannelClosed):
            channel.recv(timeout=5)

    def test_zero_capacity_rejected(self):
        with pytest.raises(ValueError):
            Channel(0)


class TestRendezvousChannel:
    """Test the zero-capacity handoff."""

    def test_try_send_without_receiver_fails(self):
        channel = RendezvousChannel()
        assert not channel.try_send("A")
        assert len(channel) == 0

    def test_handoff_to_waiting_receiver(self):
        channel = RendezvousChannel()
        result = []
        receiver = threading.Thread(target=lambda: result.append(channel.recv(timeout=5)))
        receiver.start()
        while not channel.receiver_waiting:
            time.sleep(0.001)
        assert channel.try_send("A")
        receiver.join(timeout=5)
        assert result == ["A"]
        assert not channel.receiver_waiting

    def test_blocking_send_waits_for_receiver(self):
        channel = RendezvousChannel()
        sent = []
        sender = threading.Thread(target=lambda: sent.append(channel.send("B", timeout=5)))
        sender.start()
        time.sleep(0.05)
        assert sent == []
        assert channel.recv(timeout=5) == "B"
        sender.join(timeout=5)
        assert sent == [True]

    def test_send_timeout_returns_false(self):
        assert not RendezvousChannel().send("A", timeout=0.05)

    def test_one_item_per_receive(self):
        """A single waiting receiver accepts exactly one of two offers."""
        channel = RendezvousChannel()
        result = []
        receiver = threading.Thread(target=lambda: result.append(channel.recv(timeout=5)))
        receiver.start()
        while not channel.receiver_waiting:
            time.sleep(0.001)
        assert channel.try_send("first")
        receiver.join(timeout=5)
        assert not channel.try_send("second")
        assert result == ["first"]

    def test_recv_timeout(self):
        channel = RendezvousChannel()
        with pytest.raises(ChannelTimeout):
            channel.recv(timeout=0.05)
        assert not channel.receiver_waiting

    def test_close_wakes_receiver(self):
        channel = RendezvousChannel()
        threading.Timer(0.1, channel.close).start()
        with pytest.raises(ChannelClosed):
            channel.recv(timeout=5)

    def test_receiver_stays_registered_while_watching_stop(self):
        """A release offered between stop checks still finds the receiver."""
        channel = RendezvousChannel()
        stop = threading.Event()
        result = []
        receiver = threading.Thread(target=lambda: result.append(channel.recv(stop=stop)), daemon=True)
        receiver.start()
        while not channel.receiver_waiting:
            time.sleep(0.001)

        samples = []
        deadline = time.monotonic() + 0.3
        while time.monotonic() < deadline:
            samples.append(channel.receiver_waiting)
            time.sleep(0.001)
        assert all(samples)

        assert channel.try_send("D")
        receiver.join(timeout=5)
        assert result == ["D"]

    def test_stop_interrupts_receiver(self):
        channel = RendezvousChannel()
        stop = threading.Event()
        threading.Timer(0.1, stop.set).start()
        with pytest.raises(ChannelInterrupted):
            channel.recv(stop=stop)
        assert not channel.receiver_waiting

    def test_stop_already_set(self):
        stop = threading.Event()
        stop.set()
        with pytest.raises(ChannelInterrupted):
            RendezvousChannel().recv(timeout=5, stop=stop)


class TestContexts:
    """Test the endpoint bundles."""

    def test_capacities(self, contexts):
        platform, cpu = contexts
        assert platform.keyboard.capacity == 1
        assert platform.single_key.capacity == 0
        assert platform.sound.capacity == 1
        assert platform.display.capacity == 2

    def test_both_sides_share_channels(self):
        platform, cpu = create_contexts()
        for name in ("keyboard", "single_key", "sound", "display", "stop"):
            assert getattr(platform, name) is getattr(cpu, name)

    def test_request_stop_is_seen_by_cpu(self, contexts):
        platform, cpu = contexts
        assert not cpu.stop.is_set()
        platform.request_stop()
        assert cpu.stop.is_set()

    def test_cpu_close_only_closes_outgoing(self, contexts):
        platform, cpu = contexts
        cpu.close()
        assert cpu.sound.closed
        assert cpu.display.closed
        assert not cpu.keyboard.closed
        assert not cpu.single_key.closed
