"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chipcore.state import EmulatorState
from chipcore.decode import DecodedInstruction
from chipcore.dispatch import DispatchTable
from chipcore.constants import ADDRESS_MASK, FONT_START, FONT_GLYPH_HEIGHT, NUM_REGISTERS


def execute_get_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX07 - Set VX to delay timer value."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer))


def execute_set_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=state.V[instruction.x])


def execute_add_to_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX1E - Add VX to I, wrapping within the address space. VF is not touched."""
    new_i = (state.I + jnp.astype(state.V[instruction.x], jnp.uint16)) & ADDRESS_MASK
    return state.replace(I=jnp.astype(new_i, jnp.uint16))


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX0A - Wait for a key press and store its index in VX.

    If a key is already down the lowest pressed key is stored right away.
    Otherwise the machine enters the awaiting-key state; ``step`` stops
    fetching instructions until a key arrives.
    """
    def key_pressed_action(state):
        pressed_key = jnp.astype(jnp.argmax(state.keypad), jnp.uint8)
        return state.replace(V=state.V.at[instruction.x].set(pressed_key))

    def wait_action(state):
        return state.replace(
            awaiting_key=jnp.ones((), dtype=jnp.bool_),
            key_register=jnp.astype(instruction.x, jnp.uint8),
        )

    return jax.lax.cond(jnp.any(state.keypad), key_pressed_action, wait_action, state)


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX29 - Set I to the font glyph of the hex digit in the low nibble of VX."""
    digit = jnp.astype(state.V[instruction.x], jnp.uint16) & 0xF
    return state.replace(I=jnp.astype(FONT_START + FONT_GLYPH_HEIGHT * digit, jnp.uint16))


def execute_bcd_conversion(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX33 - Store hundreds, tens and ones of VX at I, I+1, I+2."""
    value = state.V[instruction.x]

    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ], dtype=jnp.uint8)

    indices = (state.I + jnp.arange(3)) & ADDRESS_MASK
    return state.replace(memory=state.memory.at[indices].set(digits))


def _register_block(state: EmulatorState, instruction: DecodedInstruction):
    """Mask of V0..VX inclusive and the memory addresses they map to."""
    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
    addresses = (state.I + jnp.arange(NUM_REGISTERS)) & ADDRESS_MASK
    return register_mask, addresses


def _advance_index(state: EmulatorState, instruction: DecodedInstruction) -> jnp.ndarray:
    if state.quirks.load_store_increments_index:
        return jnp.astype((state.I + instruction.x + 1) & ADDRESS_MASK, jnp.uint16)
    return state.I


def execute_store_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX55 - Store V0 through VX in memory starting at I."""
    register_mask, addresses = _register_block(state, instruction)
    new_values = jnp.where(register_mask, state.V, state.memory[addresses])
    return state.replace(
        memory=state.memory.at[addresses].set(new_values),
        I=_advance_index(state, instruction),
    )


def execute_load_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX65 - Load V0 through VX from memory starting at I."""
    register_mask, addresses = _register_block(state, instruction)
    return state.replace(
        V=jnp.where(register_mask, state.memory[addresses], state.V),
        I=_advance_index(state, instruction),
    )


# Selected by the low byte
MISC_TABLE = DispatchTable(256, {
    0x07: execute_get_delay_timer,
    0x0A: execute_wait_for_key,
    0x15: execute_set_delay_timer,
    0x18: execute_set_sound_timer,
    0x1E: execute_add_to_index,
    0x29: execute_font_character,
    0x33: execute_bcd_conversion,
    0x55: execute_store_registers,
    0x65: execute_load_registers,
})


def execute_misc_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Dispatch misc instructions on the low byte."""
    return MISC_TABLE(instruction.kk, state, instruction)
