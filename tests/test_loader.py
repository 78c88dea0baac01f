"""Tests for program loading and host-side I/O helpers."""

import jax.numpy as jnp
import numpy as np
import pytest
from chipcore import (
    load_program, load_rom, framebuffer, set_keys, press_key, release_key, sound_active,
    EmptyRomError, RomTooLargeError, RomLoadError, MAX_PROGRAM_SIZE, PROGRAM_START,
    FONT_START, FONT_DATA, SCREEN_WIDTH, SCREEN_HEIGHT, PIXEL_ON
)


class TestLoadProgram:
    """Test loading program images."""

    def test_program_written_at_0x200(self, fresh_state):
        state = load_program(fresh_state, bytes([0x12, 0x34, 0x56]))

        assert [int(b) for b in state.memory[PROGRAM_START:PROGRAM_START + 3]] == [0x12, 0x34, 0x56]
        assert state.memory[PROGRAM_START + 3] == 0
        assert state.pc == PROGRAM_START

    def test_font_survives_load(self, fresh_state):
        state = load_program(fresh_state, b"\x00\xE0")

        assert jnp.array_equal(state.memory[FONT_START:FONT_START + 80], FONT_DATA)

    def test_empty_program_rejected(self, fresh_state):
        with pytest.raises(EmptyRomError):
            load_program(fresh_state, b"")

    def test_too_large_program_rejected(self, fresh_state):
        with pytest.raises(RomTooLargeError):
            load_program(fresh_state, bytes(MAX_PROGRAM_SIZE + 1))

    def test_load_errors_are_value_errors(self, fresh_state):
        with pytest.raises(ValueError):
            load_program(fresh_state, b"")
        assert issubclass(RomTooLargeError, RomLoadError)

    def test_largest_program_fits(self, fresh_state):
        program = bytes([0xAB]) * MAX_PROGRAM_SIZE

        state = load_program(fresh_state, program)

        assert state.memory[0xFFF] == 0xAB

    def test_load_rom_from_file(self, fresh_state, tmp_path):
        rom = tmp_path / "test.ch8"
        rom.write_bytes(bytes([0x60, 0x2A, 0x12, 0x02]))

        state = load_rom(fresh_state, str(rom))

        assert state.memory[0x200] == 0x60
        assert state.memory[0x203] == 0x02

    def test_load_rom_missing_file(self, fresh_state, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_rom(fresh_state, str(tmp_path / "missing.ch8"))


class TestFramebuffer:
    """Test the flat framebuffer view."""

    def test_framebuffer_row_major(self, fresh_state):
        display = fresh_state.display.at[5, 2].set(PIXEL_ON)
        state = fresh_state.replace(display=display)

        pixels = framebuffer(state)

        assert pixels.shape == (SCREEN_WIDTH * SCREEN_HEIGHT,)
        assert pixels.dtype == jnp.uint32
        assert pixels[2 * SCREEN_WIDTH + 5] == PIXEL_ON
        assert jnp.sum(pixels != 0) == 1


class TestInput:
    """Test keypad helpers."""

    def test_set_keys(self, fresh_state):
        keys = np.zeros(16, dtype=bool)
        keys[[1, 0xF]] = True

        state = set_keys(fresh_state, keys)

        assert state.keypad.dtype == jnp.bool_
        assert [int(k) for k in jnp.nonzero(state.keypad)[0]] == [1, 0xF]

    def test_set_keys_wrong_shape(self, fresh_state):
        with pytest.raises(ValueError):
            set_keys(fresh_state, [True] * 15)

    def test_press_and_release(self, fresh_state):
        state = press_key(fresh_state, 0xA)
        assert bool(state.keypad[0xA])

        state = release_key(state, 0xA)
        assert not bool(jnp.any(state.keypad))

    @pytest.mark.parametrize("key", [-1, 16])
    def test_press_out_of_range(self, fresh_state, key):
        with pytest.raises(ValueError):
            press_key(fresh_state, key)
        with pytest.raises(ValueError):
            release_key(fresh_state, key)


def test_sound_active(fresh_state):
    assert not bool(sound_active(fresh_state))
    assert bool(sound_active(fresh_state.replace(sound_timer=jnp.uint8(3))))
