"""CHIP-8 emulator state structures."""

import jax
import jax.numpy as jnp
from flax.struct import PyTreeNode, field

from chipcore.constants import (
    MEMORY_SIZE, NUM_KEYS, NUM_REGISTERS, PROGRAM_START, FONT_START, FONT_DATA,
    SCREEN_WIDTH, SCREEN_HEIGHT, STACK_SIZE
)
from chipcore.quirks import Quirks


class StackState(PyTreeNode):
    """Stack state for subroutine calls."""
    data: jnp.ndarray = field(default_factory=lambda: jnp.zeros(STACK_SIZE, dtype=jnp.uint16))
    pointer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.int32))


class EmulatorState(PyTreeNode):
    """Main CHIP-8 emulator state.

    The display is indexed ``[x, y]`` and holds one 32-bit word per pixel,
    either ``PIXEL_OFF`` or ``PIXEL_ON``. ``awaiting_key`` and ``key_register``
    record a pending FX0A; ``fault`` is a sticky code that halts the machine.
    """
    rng: jax.Array
    memory: jnp.ndarray = field(default_factory=lambda: jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8))
    pc: jnp.ndarray = field(default_factory=lambda: jnp.astype(PROGRAM_START, jnp.uint16))
    display: jnp.ndarray = field(
        default_factory=lambda: jnp.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=jnp.uint32)
    )
    stack: StackState = field(default_factory=StackState)
    delay_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    sound_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    keypad: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_KEYS, dtype=jnp.bool_))
    V: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8))
    I: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    awaiting_key: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.bool_))
    key_register: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    fault: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    quirks: Quirks = field(pytree_node=False, default=Quirks())


def create_state(rng: jax.Array = jax.random.PRNGKey(0), quirks: Quirks = Quirks()) -> EmulatorState:
    """Create initial emulator state with font data loaded."""
    state = EmulatorState(rng, quirks=quirks)
    return state.replace(memory=state.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA))
