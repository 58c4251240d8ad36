"""Test configuration and fixtures for emulator tests."""

import jax
import jax.numpy as jnp
import pytest
from octachan import create_state, create_contexts
from octachan.loop import ExecutionLoop


@pytest.fixture
def fresh_state():
    """Provide a fresh emulator state for each test."""
    return create_state()


@pytest.fixture
def seeded_state():
    """Provide a fresh state with a non-default random key."""
    return create_state(jax.random.PRNGKey(1234))


@pytest.fixture
def contexts():
    """Provide (platform, cpu) channel endpoints."""
    return create_contexts()


def setup_memory(state, address, data):
    """Helper to put bytes in memory."""
    return state.update_cpu(
        memory=state.cpu.memory.at[address:address + len(data)].set(
            jnp.array(data, dtype=jnp.uint8)
        )
    )


def set_registers(state, **registers):
    """Helper to set registers by name, e.g. ``set_registers(state, V0=1, VF=0)``."""
    V = state.cpu.V
    for name, value in registers.items():
        V = V.at[int(name[1:], 16)].set(value)
    return state.update_cpu(V=V)


def run_program(program, **kwargs):
    """Run ``program`` headless to completion without sleeping."""
    loop = ExecutionLoop(bytes(program), sleep=lambda _: None, **kwargs)
    loop.run()
    return loop
