"""CHIP-8 control flow instructions."""

import jax
import jax.lax
import jax.numpy as jnp
from chipcore.state import EmulatorState
from chipcore.decode import DecodedInstruction
from chipcore.dispatch import DispatchTable
from chipcore.constants import ADDRESS_MASK, FAULT_STACK_OVERFLOW
from chipcore.stack import push


def execute_jump(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """1NNN - Jump to address NNN."""
    return state.replace(pc=jnp.astype(instruction.nnn, jnp.uint16))


def execute_call(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """2NNN - Call subroutine at NNN.

    Calling with a full stack records a stack overflow fault and does not jump.
    """
    stack, overflow = push(state.stack, state.pc)
    return state.replace(
        stack=stack,
        pc=jnp.where(overflow, state.pc, jnp.astype(instruction.nnn, jnp.uint16)),
        fault=jnp.where(overflow, jnp.uint8(FAULT_STACK_OVERFLOW), state.fault),
    )


def make_skip_instruction(condition_fn):
    """Factory for skip instructions."""
    def skip_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        condition = condition_fn(state, instruction)
        return jax.lax.cond(
            condition,
            lambda s: s.replace(pc=jnp.astype(s.pc + 2, jnp.uint16)),
            lambda s: s,
            state
        )
    return skip_instruction


execute_skip_if_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == inst.kk
)

execute_skip_if_not_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != inst.kk
)

execute_skip_if_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == state.V[inst.y]
)

execute_skip_if_not_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != state.V[inst.y]
)

execute_skip_if_key_pressed = make_skip_instruction(
    lambda state, inst: state.keypad[state.V[inst.x] & 0xF]
)

execute_skip_if_key_not_pressed = make_skip_instruction(
    lambda state, inst: ~state.keypad[state.V[inst.x] & 0xF]
)


def execute_jump_with_offset(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """BNNN - Jump to address NNN + V0."""
    jump_address = (instruction.nnn + jnp.astype(state.V[0], jnp.uint16)) & ADDRESS_MASK
    return state.replace(pc=jnp.astype(jump_address, jnp.uint16))


def execute_jump_with_offset_vx(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """BXNN - Jump to address XNN + VX (``jump_uses_vx`` quirk)."""
    jump_address = (instruction.nnn + jnp.astype(state.V[instruction.x], jnp.uint16)) & ADDRESS_MASK
    return state.replace(pc=jnp.astype(jump_address, jnp.uint16))


# Selected by the low nibble: EX9E, EXA1
KEY_TABLE = DispatchTable(16, {
    0xE: execute_skip_if_key_pressed,
    0x1: execute_skip_if_key_not_pressed,
})


def execute_key_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """EX9E/EXA1 - Skip if key pressed/not pressed."""
    return KEY_TABLE(instruction.n, state, instruction)
