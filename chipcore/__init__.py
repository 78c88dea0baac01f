"""CHIP-8 virtual CPU package."""

from chipcore.state import EmulatorState, StackState, create_state
from chipcore.quirks import Quirks
from chipcore.emulator import (
    execute, fetch, step, tick_timers, run, run_steps, run_with_progress, check_fault,
    load_program, load_rom, framebuffer, sound_active, set_keys, press_key, release_key
)
from chipcore.decode import DecodedInstruction, decode
from chipcore.errors import (
    Chip8Error, RomLoadError, EmptyRomError, RomTooLargeError,
    StackFault, StackOverflowError, StackUnderflowError
)
from chipcore.constants import *

__all__ = [
    "EmulatorState",
    "StackState",
    "create_state",
    "Quirks",
    "fetch",
    "execute",
    "step",
    "tick_timers",
    "run",
    "run_steps",
    "run_with_progress",
    "check_fault",
    "load_program",
    "load_rom",
    "framebuffer",
    "sound_active",
    "set_keys",
    "press_key",
    "release_key",
    "DecodedInstruction",
    "decode",
    "Chip8Error",
    "RomLoadError",
    "EmptyRomError",
    "RomTooLargeError",
    "StackFault",
    "StackOverflowError",
    "StackUnderflowError",
    "PROGRAM_START",
    "MAX_PROGRAM_SIZE",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "PIXEL_ON",
    "PIXEL_OFF",
]
