"""CHIP-8 system instructions (0x0xxx)."""

import jax.numpy as jnp
from chipcore.state import EmulatorState
from chipcore.decode import DecodedInstruction
from chipcore.dispatch import DispatchTable
from chipcore.constants import FAULT_STACK_UNDERFLOW
from chipcore.stack import pop


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00E0 - Clear display."""
    return state.replace(display=jnp.zeros_like(state.display))


def execute_return(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00EE - Return from subroutine.

    Returning with an empty stack records a stack underflow fault and leaves
    PC where it is.
    """
    stack, address, underflow = pop(state.stack)
    return state.replace(
        stack=stack,
        pc=jnp.where(underflow, state.pc, address),
        fault=jnp.where(underflow, jnp.uint8(FAULT_STACK_UNDERFLOW), state.fault),
    )


# Selected by the low nibble
SYSTEM_TABLE = DispatchTable(16, {
    0x0: execute_clear_screen,
    0xE: execute_return,
})


def execute_system_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Dispatch system instructions."""
    return SYSTEM_TABLE(instruction.n, state, instruction)
