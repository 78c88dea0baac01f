"""Test configuration and fixtures for CHIP-8 emulator tests."""

import pytest
import jax.numpy as jnp
from chipcore import create_state, Quirks, PROGRAM_START


@pytest.fixture
def fresh_state():
    """Provide a fresh emulator state with canonical semantics."""
    return create_state()


@pytest.fixture
def legacy_state():
    """Provide a fresh state with the COSMAC VIP quirks."""
    return create_state(quirks=Quirks.legacy())


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def load_words(state, words, address=PROGRAM_START):
    """Helper to write 16-bit opcodes into memory, most significant byte first."""
    data = []
    for word in words:
        data.extend([(word >> 8) & 0xFF, word & 0xFF])
    return setup_sprite_in_memory(state, address, data)


def set_registers(state, **registers):
    """Helper to set registers by name, e.g. ``set_registers(state, V1=0x10, VF=1)``."""
    V = state.V
    for name, value in registers.items():
        V = V.at[int(name[1:], 16)].set(value)
    return state.replace(V=V)
