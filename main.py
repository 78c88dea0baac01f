"""
Interactive CHIP-8 runner: pygame window, hex keypad and buzzer.

    python main.py rom=path/to/game.ch8 scale=12 cycle_delay_ms=1 quirks=[shift_uses_vy]
"""

import os
import time

import hydra
import jax
import numpy as np
import pygame
from hydra.utils import to_absolute_path
from omegaconf import DictConfig, OmegaConf

from chipcore import (
    Quirks, Chip8Error, create_state, load_rom, run, check_fault, set_keys, sound_active,
    SCREEN_WIDTH, SCREEN_HEIGHT
)
from chipcore.logging import RunLogger
from chipcore.rendering import display_to_rgb, create_color_scheme, save_screenshot

# COSMAC VIP keypad laid over the left of a QWERTY keyboard:
#   1 2 3 C      1 2 3 4
#   4 5 6 D  <-  Q W E R
#   7 8 9 E      A S D F
#   A 0 B F      Z X C V
KEY_MAP = {
    pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3, pygame.K_4: 0xC,
    pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_r: 0xD,
    pygame.K_a: 0x7, pygame.K_s: 0x8, pygame.K_d: 0x9, pygame.K_f: 0xE,
    pygame.K_z: 0xA, pygame.K_x: 0x0, pygame.K_c: 0xB, pygame.K_v: 0xF,
}

TONE_FREQUENCY = 440
SAMPLE_RATE = 44100


def steps_per_frame(cycle_delay_ms: float, fps: int) -> int:
    """Number of execution steps to batch into one frame."""
    if cycle_delay_ms <= 0:
        raise ValueError(f"cycle_delay_ms must be positive, got {cycle_delay_ms}")
    return max(1, round(1000.0 / (fps * cycle_delay_ms)))


def make_tone(logger: RunLogger):
    """Square-wave buzzer, or None when no audio device is available."""
    try:
        pygame.mixer.init(frequency=SAMPLE_RATE, size=-16, channels=1)
    except pygame.error as e:
        logger.warning(f"Sound disabled: {e}")
        return None
    period = SAMPLE_RATE // TONE_FREQUENCY
    wave = np.where(np.arange(period) < period // 2, 4096, -4096).astype(np.int16)
    return pygame.mixer.Sound(buffer=np.tile(wave, TONE_FREQUENCY).tobytes())


def reset_machine(cfg: DictConfig, rom_path: str, logger: RunLogger):
    state = create_state(jax.random.PRNGKey(cfg.seed), quirks=Quirks.from_names(cfg.quirks))
    state = load_rom(state, rom_path)
    logger.log_rom_loaded(rom_path, os.path.getsize(rom_path))
    return state


@hydra.main(version_base=None, config_path="conf", config_name="config")
def main(cfg: DictConfig) -> None:
    logger = RunLogger(log_level=cfg.log_level)
    rom_path = to_absolute_path(cfg.rom)
    num_steps = steps_per_frame(cfg.cycle_delay_ms, cfg.fps)
    on_color, off_color = create_color_scheme(cfg.color_scheme)

    try:
        state = reset_machine(cfg, rom_path, logger)
    except (OSError, Chip8Error) as e:
        logger.error(f"Cannot load {rom_path}: {e}")
        return

    logger.log_run_start({**OmegaConf.to_container(cfg), "steps_per_frame": num_steps})

    pygame.init()
    screen = pygame.display.set_mode((SCREEN_WIDTH * cfg.scale, SCREEN_HEIGHT * cfg.scale))
    pygame.display.set_caption(f"chipcore - {rom_path}")
    clock = pygame.time.Clock()
    tone = make_tone(logger) if cfg.sound else None

    keypad = np.zeros(16, dtype=np.bool_)
    running = True
    paused = False
    buzzing = False

    while running:
        clock.tick(cfg.fps)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_p:
                    paused = not paused
                    logger.info("Paused" if paused else "Resumed")
                elif event.key == pygame.K_F5:
                    state = reset_machine(cfg, rom_path, logger)
                    keypad[:] = False
                    logger.info("Reset")
                elif event.key == pygame.K_F12:
                    path = save_screenshot(
                        state.display,
                        f"{to_absolute_path(cfg.screenshot_dir)}/{time.strftime('%Y%m%d_%H%M%S')}.png",
                        scale=cfg.scale,
                        color_scheme=cfg.color_scheme,
                    )
                    logger.info(f"Screenshot saved to {path}")
                elif event.key in KEY_MAP:
                    keypad[KEY_MAP[event.key]] = True
            elif event.type == pygame.KEYUP and event.key in KEY_MAP:
                keypad[KEY_MAP[event.key]] = False

        if not paused:
            state = run(set_keys(state, keypad), num_steps)
            logger.log_steps(num_steps)
            try:
                check_fault(state)
            except Chip8Error as e:
                logger.log_fault(e)
                running = False

        if tone is not None:
            should_buzz = bool(sound_active(state)) and not paused
            if should_buzz and not buzzing:
                tone.play(loops=-1)
            elif buzzing and not should_buzz:
                tone.stop()
            buzzing = should_buzz

        frame = display_to_rgb(state.display, cfg.scale, on_color, off_color)
        # pygame surfaces are indexed [x, y]
        pygame.surfarray.blit_array(screen, frame.swapaxes(0, 1))
        pygame.display.flip()

    logger.log_run_end()
    pygame.quit()


if __name__ == "__main__":
    main()
