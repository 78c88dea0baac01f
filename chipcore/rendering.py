"""CHIP-8 rendering utilities for visualization."""

from pathlib import Path
from typing import Tuple, Union

import jax.numpy as jnp
import numpy as np
from PIL import Image

from chipcore.constants import PIXEL_OFF


def display_to_rgb(
    display: jnp.ndarray,
    scale: int = 8,
    on_color: Tuple[int, int, int] = (0, 255, 0),
    off_color: Tuple[int, int, int] = (0, 0, 0),
) -> np.ndarray:
    """Convert the CHIP-8 display to an RGB array with optional upscaling.

    Args:
        display: Array of shape (64, 32) indexed [x, y]; non-zero pixels are on
        scale: Upscaling factor for better visibility (default: 8x)
        on_color: RGB color for "on" pixels (default: green)
        off_color: RGB color for "off" pixels (default: black)

    Returns:
        RGB array of shape (height*scale, width*scale, 3) with uint8 values
    """
    if scale < 1:
        raise ValueError(f"Scale must be a positive integer, got {scale}")

    # (64 width, 32 height) -> (32 height, 64 width)
    pixels = (np.asarray(display) != PIXEL_OFF).T
    height, width = pixels.shape

    rgb_frame = np.zeros((height, width, 3), dtype=np.uint8)
    rgb_frame[pixels] = on_color
    rgb_frame[~pixels] = off_color

    if scale > 1:
        rgb_frame = np.repeat(np.repeat(rgb_frame, scale, axis=0), scale, axis=1)

    return rgb_frame


def create_color_scheme(
    scheme: str = "classic",
) -> Tuple[Tuple[int, int, int], Tuple[int, int, int]]:
    """Get predefined color schemes for CHIP-8 rendering.

    Args:
        scheme: Color scheme name ("classic", "amber", "white", "blue", "retro", "plum")

    Returns:
        Tuple of (on_color, off_color) as RGB tuples
    """
    schemes = {
        "classic": ((0, 255, 0), (0, 0, 0)),  # Green on black
        "amber": ((255, 176, 0), (0, 0, 0)),  # Amber on black
        "white": ((255, 255, 255), (0, 0, 0)),  # White on black
        "blue": ((0, 255, 255), (0, 0, 64)),  # Cyan on dark blue
        "retro": ((255, 255, 0), (64, 0, 64)),  # Yellow on purple
        "plum": ((179, 102, 184), (45, 25, 61)),
    }

    if scheme not in schemes:
        raise ValueError(
            f"Unknown color scheme '{scheme}'. Available: {list(schemes.keys())}"
        )

    return schemes[scheme]


def save_screenshot(
    display: jnp.ndarray,
    filename: Union[str, Path],
    scale: int = 8,
    color_scheme: str = "classic",
) -> Path:
    """Save the display as an image file; the format follows the file extension."""
    on_color, off_color = create_color_scheme(color_scheme)
    rgb = display_to_rgb(display, scale, on_color, off_color)
    path = Path(filename)
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(rgb).save(path)
    return path
