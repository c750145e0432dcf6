"""Test configuration and fixtures for CHIP-8 machine tests."""

import pytest
import jax.numpy as jnp
from chip8vm import create_state, PROGRAM_START


@pytest.fixture
def fresh_state():
    """Provide a fresh machine state for each test."""
    return create_state()


def set_registers(state, **registers):
    """Helper to set registers by name, e.g. ``set_registers(state, V1=0x10, VF=1)``."""
    V = state.V
    for name, value in registers.items():
        V = V.at[int(name[1:], 16)].set(value)
    return state.replace(V=V)


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def setup_program(state, words, address=PROGRAM_START):
    """Helper to write 16-bit instructions into memory, big-endian."""
    program = []
    for word in words:
        program += [word >> 8, word & 0xFF]
    return setup_sprite_in_memory(state, address, program)
