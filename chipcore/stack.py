"""CHIP-8 stack operations.

Both operations leave the stack untouched and report a flag instead of
corrupting it when the call discipline is violated.
"""

import jax.numpy as jnp
from chipcore.constants import ADDRESS_MASK, STACK_SIZE
from chipcore.state import StackState


def push(stack: StackState, address: jnp.ndarray) -> tuple[StackState, jnp.ndarray]:
    """Push address onto stack. Returns the new stack and an overflow flag."""
    overflow = stack.pointer >= STACK_SIZE
    slot = jnp.minimum(stack.pointer, STACK_SIZE - 1)
    masked_address = jnp.astype(address & ADDRESS_MASK, jnp.uint16)
    new_data = jnp.where(overflow, stack.data, stack.data.at[slot].set(masked_address))
    new_pointer = jnp.where(overflow, stack.pointer, stack.pointer + 1)
    return stack.replace(data=new_data, pointer=new_pointer), overflow


def pop(stack: StackState) -> tuple[StackState, jnp.ndarray, jnp.ndarray]:
    """Pop address from stack. Returns the new stack, the address and an underflow flag."""
    underflow = stack.pointer <= 0
    new_pointer = jnp.where(underflow, stack.pointer, stack.pointer - 1)
    popped_address = stack.data[new_pointer]
    new_data = jnp.where(underflow, stack.data, stack.data.at[new_pointer].set(0))
    return stack.replace(data=new_data, pointer=new_pointer), popped_address, underflow
