"""CHIP-8 register load and index instructions."""

import jax
import jax.numpy as jnp
from chipcore.state import EmulatorState
from chipcore.decode import DecodedInstruction


def execute_set(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """6XKK - Set VX = KK."""
    return state.replace(V=state.V.at[instruction.x].set(jnp.astype(instruction.kk, jnp.uint8)))


def execute_add(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """7XKK - Add KK to VX, wrapping, VF untouched."""
    return state.replace(V=state.V.at[instruction.x].add(jnp.astype(instruction.kk, jnp.uint8)))


def execute_set_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """ANNN - Set I = NNN."""
    return state.replace(I=jnp.astype(instruction.nnn, jnp.uint16))


def execute_random(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """CXKK - Set VX = random byte & KK."""
    key, subkey = jax.random.split(state.rng)
    random_byte = jax.random.bits(subkey, shape=(), dtype=jnp.uint8)
    masked = random_byte & jnp.astype(instruction.kk, jnp.uint8)
    return state.replace(V=state.V.at[instruction.x].set(masked), rng=key)
