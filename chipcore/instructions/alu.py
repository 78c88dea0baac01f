"""CHIP-8 ALU operations (8xxx).

Each operation maps ``(vx, vy)`` to ``(result, flag)``. The dispatcher writes
the result to VX first and the flag to VF second, so when X is F the flag is
what remains in VF.
"""

import jax.numpy as jnp
from chipcore.state import EmulatorState
from chipcore.decode import DecodedInstruction
from chipcore.dispatch import DispatchTable
from chipcore.constants import FLAG_REGISTER


def _no_flag() -> jnp.ndarray:
    return jnp.zeros((), dtype=jnp.uint8)


def alu_set(vx: int, vy: int) -> tuple[int, int]:
    """8XY0 - Set: VX = VY."""
    return vy, _no_flag()


def alu_or(vx: int, vy: int) -> tuple[int, int]:
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy, _no_flag()


def alu_and(vx: int, vy: int) -> tuple[int, int]:
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy, _no_flag()


def alu_xor(vx: int, vy: int) -> tuple[int, int]:
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy, _no_flag()


def alu_add(vx: int, vy: int) -> tuple[int, int]:
    """8XY4 - Add: VX += VY, VF = carry."""
    total = jnp.astype(vx, jnp.uint16) + jnp.astype(vy, jnp.uint16)
    carry = jnp.astype(total > 0xFF, jnp.uint8)
    return jnp.astype(total & 0xFF, jnp.uint8), carry


def alu_sub_xy(vx: int, vy: int) -> tuple[int, int]:
    """8XY5 - Subtract: VX -= VY, VF = no borrow."""
    no_borrow = jnp.astype(vx >= vy, jnp.uint8)
    return jnp.astype((vx - vy) & 0xFF, jnp.uint8), no_borrow


def alu_shift_right(vx: int, vy: int) -> tuple[int, int]:
    """8XY6 - Shift right: VX >>= 1, VF = shifted out bit."""
    return jnp.astype(vx >> 1, jnp.uint8), jnp.astype(vx & 0x1, jnp.uint8)


def alu_sub_yx(vx: int, vy: int) -> tuple[int, int]:
    """8XY7 - Subtract: VX = VY - VX, VF = no borrow."""
    no_borrow = jnp.astype(vy >= vx, jnp.uint8)
    return jnp.astype((vy - vx) & 0xFF, jnp.uint8), no_borrow


def alu_shift_left(vx: int, vy: int) -> tuple[int, int]:
    """8XYE - Shift left: VX <<= 1, VF = shifted out bit."""
    return jnp.astype((vx << 1) & 0xFF, jnp.uint8), jnp.astype((vx >> 7) & 0x1, jnp.uint8)


def alu_undefined(vx: int, vy: int) -> tuple[int, int]:
    """Unmapped 8XYN selector: VX unchanged."""
    return vx, _no_flag()


LOGIC_OPERATIONS = (0x1, 0x2, 0x3)
FLAG_OPERATIONS = (0x4, 0x5, 0x6, 0x7, 0xE)


def _flag_mask(selectors) -> jnp.ndarray:
    mask = [False] * 16
    for selector in selectors:
        mask[selector] = True
    return jnp.array(mask, dtype=jnp.bool_)


WRITES_FLAG = _flag_mask(FLAG_OPERATIONS)
WRITES_FLAG_LOGIC_RESET = _flag_mask(FLAG_OPERATIONS + LOGIC_OPERATIONS)


def _alu_table(shift_uses_vy: bool) -> DispatchTable:
    if shift_uses_vy:
        shift_right = lambda vx, vy: alu_shift_right(vy, vy)
        shift_left = lambda vx, vy: alu_shift_left(vy, vy)
    else:
        shift_right, shift_left = alu_shift_right, alu_shift_left

    return DispatchTable(16, {
        0x0: alu_set,
        0x1: alu_or,
        0x2: alu_and,
        0x3: alu_xor,
        0x4: alu_add,
        0x5: alu_sub_xy,
        0x6: shift_right,
        0x7: alu_sub_yx,
        0xE: shift_left,
    }, default=alu_undefined)


ALU_TABLE = _alu_table(shift_uses_vy=False)
ALU_TABLE_SHIFT_VY = _alu_table(shift_uses_vy=True)


def execute_alu_operation(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XYN - ALU operations dispatcher."""
    quirks = state.quirks
    table = ALU_TABLE_SHIFT_VY if quirks.shift_uses_vy else ALU_TABLE
    writes_flag = WRITES_FLAG_LOGIC_RESET if quirks.logic_resets_vf else WRITES_FLAG

    result, vf = table(instruction.n, state.V[instruction.x], state.V[instruction.y])

    new_V = state.V.at[instruction.x].set(result)
    new_V = jnp.where(writes_flag[instruction.n], new_V.at[FLAG_REGISTER].set(vf), new_V)
    return state.replace(V=new_V)
