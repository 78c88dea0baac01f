"""Main CHIP-8 emulator execution engine."""

from functools import partial
from typing import Optional, Sequence, Union

import jax
import jax.lax
import jax.numpy as jnp
from chipcore.state import EmulatorState
from chipcore.decode import decode
from chipcore.constants import (
    ADDRESS_MASK, FAULT_NONE, FAULT_STACK_OVERFLOW, FAULT_STACK_UNDERFLOW, MAX_PROGRAM_SIZE,
    NUM_KEYS, PROGRAM_START, STACK_SIZE
)
from chipcore.errors import EmptyRomError, RomTooLargeError, StackOverflowError, StackUnderflowError
from chipcore.logging import scan_with_progress
from chipcore.instructions.system import execute_system_instruction
from chipcore.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_jump_with_offset_vx, execute_key_instruction
)
from chipcore.instructions.alu import execute_alu_operation
from chipcore.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chipcore.instructions.display import execute_display
from chipcore.instructions.misc import execute_misc_instruction


def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction.

    PC is expected to already point past the instruction.
    """
    decoded_instruction = decode(instruction)

    return jax.lax.switch(
        decoded_instruction.family,
        [
            execute_system_instruction,
            execute_jump,
            execute_call,
            execute_skip_if_equal_immediate,
            execute_skip_if_not_equal_immediate,
            execute_skip_if_equal_register,
            execute_set,
            execute_add,
            execute_alu_operation,
            execute_skip_if_not_equal_register,
            execute_set_index,
            execute_jump_with_offset_vx if state.quirks.jump_uses_vx else execute_jump_with_offset,
            execute_random,
            execute_display,
            execute_key_instruction,
            execute_misc_instruction,
        ],
        state, decoded_instruction
    )


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.uint16]:
    """Fetch next instruction from memory and advance PC by 2."""
    instruction = _pack_u16(
        state.memory[state.pc & ADDRESS_MASK],
        state.memory[(state.pc + 1) & ADDRESS_MASK],
    )
    return state.replace(pc=jnp.astype(state.pc + 2, jnp.uint16)), instruction


def tick_timers(state: EmulatorState) -> EmulatorState:
    """Decrement delay and sound timers by one, stopping at zero."""
    return state.replace(
        delay_timer=jnp.where(state.delay_timer > 0, state.delay_timer - 1, state.delay_timer),
        sound_timer=jnp.where(state.sound_timer > 0, state.sound_timer - 1, state.sound_timer),
    )


def _run_instruction(state: EmulatorState) -> EmulatorState:
    state, instruction = fetch(state)
    return execute(state, instruction)


def _resolve_key_wait(state: EmulatorState) -> EmulatorState:
    pressed_key = jnp.astype(jnp.argmax(state.keypad), jnp.uint8)
    return state.replace(
        V=state.V.at[state.key_register].set(pressed_key),
        awaiting_key=jnp.zeros((), dtype=jnp.bool_),
    )


def _idle(state: EmulatorState) -> EmulatorState:
    return state


def step(state: EmulatorState) -> EmulatorState:
    """Run one fetch-decode-execute cycle followed by a timer tick.

    A faulted machine is halted and returned unchanged. A machine awaiting a
    key fetches nothing: the cycle either delivers the pressed key to the
    waiting register or idles, and the timers still tick.
    """
    faulted = state.fault != FAULT_NONE
    branch = jnp.where(
        faulted,
        2,
        jnp.where(state.awaiting_key, jnp.where(jnp.any(state.keypad), 1, 2), 0),
    )
    state = jax.lax.switch(branch, [_run_instruction, _resolve_key_wait, _idle], state)
    return jax.lax.cond(state.fault != FAULT_NONE, _idle, tick_timers, state)


def run_steps(state: EmulatorState, num_steps: int) -> EmulatorState:
    """Run ``num_steps`` cycles with ``jax.lax.scan``."""
    def _step(state, _):
        return step(state), None

    state, _ = jax.lax.scan(_step, state, length=num_steps)
    return state


run = partial(jax.jit, static_argnums=1)(run_steps)


def run_with_progress(state: EmulatorState, num_steps: int, print_rate: Optional[int] = None,
                      desc: Optional[str] = None) -> EmulatorState:
    """Run ``num_steps`` cycles under jit while reporting progress with tqdm."""
    @scan_with_progress(num_steps, print_rate=print_rate, desc=desc)
    def _step(state, _):
        return step(state), None

    @jax.jit
    def _run(state):
        state, _ = jax.lax.scan(_step, state, jnp.arange(num_steps))
        return state

    return _run(state)


def check_fault(state: EmulatorState) -> None:
    """Raise the host-side exception matching the machine's fault code, if any."""
    fault = int(state.fault)
    if fault == FAULT_NONE:
        return
    pc = int(state.pc) - 2
    if fault == FAULT_STACK_OVERFLOW:
        raise StackOverflowError(
            f"Call at 0x{pc:03X} with a full stack ({STACK_SIZE} entries)", pc
        )
    if fault == FAULT_STACK_UNDERFLOW:
        raise StackUnderflowError(f"Return at 0x{pc:03X} with an empty stack", pc)
    raise ValueError(f"Unknown fault code {fault}")


def load_program(state: EmulatorState, program: bytes) -> EmulatorState:
    """Write a program image into memory starting at 0x200."""
    if len(program) == 0:
        raise EmptyRomError("Program image is empty")
    if len(program) > MAX_PROGRAM_SIZE:
        raise RomTooLargeError(
            f"Program image is {len(program)} bytes, at most {MAX_PROGRAM_SIZE} fit above 0x{PROGRAM_START:03X}"
        )
    program_array = jnp.array(list(program), dtype=jnp.uint8)
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(program)].set(program_array)
    return state.replace(memory=new_memory)


def load_rom(state: EmulatorState, filename: str) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    return load_program(state, rom_data)


def framebuffer(state: EmulatorState) -> jnp.ndarray:
    """Display as a flat row-major ``uint32`` array, pixel ``(x, y)`` at ``y * width + x``."""
    return state.display.T.reshape(-1)


def sound_active(state: EmulatorState) -> jnp.ndarray:
    """Whether the buzzer should sound (sound timer non-zero)."""
    return state.sound_timer > 0


def set_keys(state: EmulatorState, keys: Union[Sequence[bool], jnp.ndarray]) -> EmulatorState:
    """Replace the whole key state with 16 booleans indexed 0x0-0xF."""
    keypad = jnp.asarray(keys, dtype=jnp.bool_)
    if keypad.shape != (NUM_KEYS,):
        raise ValueError(f"Expected {NUM_KEYS} key states, got shape {keypad.shape}")
    return state.replace(keypad=keypad)


def press_key(state: EmulatorState, key: int) -> EmulatorState:
    if not 0 <= key < NUM_KEYS:
        raise ValueError(f"Key must be in 0x0-0xF, got {key}")
    return state.replace(keypad=state.keypad.at[key].set(True))


def release_key(state: EmulatorState, key: int) -> EmulatorState:
    if not 0 <= key < NUM_KEYS:
        raise ValueError(f"Key must be in 0x0-0xF, got {key}")
    return state.replace(keypad=state.keypad.at[key].set(False))
