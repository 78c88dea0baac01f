"""CHIP-8 machine constants."""

import jax.numpy as jnp
import numpy as np

MEMORY_SIZE = 4096
ADDRESS_MASK = 0xFFF

PROGRAM_START = 0x200
MAX_PROGRAM_SIZE = MEMORY_SIZE - PROGRAM_START

SCREEN_WIDTH = 64
SCREEN_HEIGHT = 32

NUM_REGISTERS = 16
FLAG_REGISTER = 0xF
STACK_SIZE = 16
NUM_KEYS = 16

# Framebuffer words are either all bits clear or all bits set
PIXEL_OFF = np.uint32(0x00000000)
PIXEL_ON = np.uint32(0xFFFFFFFF)

# Sticky fault codes recorded on the machine state
FAULT_NONE = 0
FAULT_STACK_OVERFLOW = 1
FAULT_STACK_UNDERFLOW = 2

FONT_START = 0x050
FONT_GLYPH_HEIGHT = 5
FONT_DATA = jnp.array([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
], dtype=jnp.uint8)

__all__ = [
    "MEMORY_SIZE",
    "ADDRESS_MASK",
    "PROGRAM_START",
    "MAX_PROGRAM_SIZE",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "NUM_REGISTERS",
    "FLAG_REGISTER",
    "STACK_SIZE",
    "NUM_KEYS",
    "PIXEL_OFF",
    "PIXEL_ON",
    "FAULT_NONE",
    "FAULT_STACK_OVERFLOW",
    "FAULT_STACK_UNDERFLOW",
    "FONT_START",
    "FONT_GLYPH_HEIGHT",
    "FONT_DATA",
]
