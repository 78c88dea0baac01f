"""CHIP-8 display operations."""

import jax.numpy as jnp
from chipcore.state import EmulatorState
from chipcore.decode import DecodedInstruction
from chipcore.constants import (
    ADDRESS_MASK, FLAG_REGISTER, PIXEL_OFF, PIXEL_ON, SCREEN_WIDTH, SCREEN_HEIGHT
)

SPRITE_WIDTH = 8

# Pre-computed coordinate grids for display operations
xx, yy = jnp.meshgrid(jnp.arange(SCREEN_WIDTH), jnp.arange(SCREEN_HEIGHT), indexing='ij')


def sprite_pixels(memory: jnp.ndarray, index: jnp.ndarray, x: jnp.ndarray, y: jnp.ndarray,
                  height) -> jnp.ndarray:
    """Boolean ``(SCREEN_WIDTH, SCREEN_HEIGHT)`` mask of the sprite bits that are set.

    Only the anchor ``(x, y)`` wraps around the screen; rows and columns that
    run past the right or bottom edge are clipped.
    """
    sprite_x = x % SCREEN_WIDTH
    sprite_y = y % SCREEN_HEIGHT

    in_sprite = (
        (xx >= sprite_x) & (xx < sprite_x + SPRITE_WIDTH)
        & (yy >= sprite_y) & (yy < sprite_y + height)
    )

    row_offset = yy - sprite_y
    col_offset = jnp.clip(xx - sprite_x, 0, SPRITE_WIDTH - 1)
    sprite_bytes = memory[(index + row_offset) & ADDRESS_MASK]
    bits = (sprite_bytes >> (SPRITE_WIDTH - 1 - col_offset)) & 1
    return (bits == 1) & in_sprite


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - XOR an N-row sprite from memory[I] onto the display at (VX, VY).

    VF is set to 1 when any pixel that was on is turned off, 0 otherwise.
    """
    sprite = sprite_pixels(
        state.memory, state.I, state.V[instruction.x], state.V[instruction.y], instruction.n
    )
    collision = jnp.any((state.display != PIXEL_OFF) & sprite)

    return state.replace(
        display=state.display ^ jnp.where(sprite, PIXEL_ON, PIXEL_OFF),
        V=state.V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8))
    )
