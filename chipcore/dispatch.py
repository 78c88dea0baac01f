"""Secondary dispatch tables.

Families that overload their low nibble (0x0, 0x8, 0xE) or low byte (0xF)
are routed through a dense index table: slot ``k`` holds the branch number of
the handler registered for selector ``k``, and every unmapped slot points at
the default branch. One table lookup plus one ``jax.lax.switch`` keeps
dispatch O(1) without a 65536-entry table.
"""

from typing import Callable, Mapping

import jax
import jax.numpy as jnp
from chipcore.state import EmulatorState
from chipcore.decode import DecodedInstruction


def no_op(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """No operation."""
    return state


class DispatchTable:
    """Selector -> handler table resolved with ``jax.lax.switch``."""

    def __init__(self, size: int, handlers: Mapping[int, Callable], default: Callable = no_op):
        branches = [default]
        indices = [0] * size
        for selector, handler in handlers.items():
            if not 0 <= selector < size:
                raise ValueError(f"Selector 0x{selector:X} out of range for a table of size {size}")
            indices[selector] = len(branches)
            branches.append(handler)

        self.size = size
        self.branches = branches
        self.indices = jnp.array(indices, dtype=jnp.int32)
        self._handlers = dict(handlers)

    def lookup(self, selector: int) -> Callable:
        """Return the handler registered for a concrete selector."""
        return self._handlers.get(selector, self.branches[0])

    def __call__(self, selector, *operands):
        return jax.lax.switch(self.indices[selector], self.branches, *operands)
