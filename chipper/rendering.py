"""CHIP-8 rendering utilities for headless visualization."""

from typing import Tuple

import numpy as np
from PIL import Image

from chipper.display import FrameBuffer


def display_to_rgb(
    display: FrameBuffer,
    scale: int = 8,
    on_color: Tuple[int, int, int] = (0, 255, 0),
    off_color: Tuple[int, int, int] = (0, 0, 0),
) -> np.ndarray:
    """Convert a CHIP-8 frame buffer to an RGB array with optional upscaling.

    Args:
        display: Frame buffer with pixels of shape (32, 64)
        scale: Upscaling factor for better visibility (default: 8x)
        on_color: RGB color for "on" pixels (default: green)
        off_color: RGB color for "off" pixels (default: black)

    Returns:
        RGB array of shape (height*scale, width*scale, 3) with uint8 values
    """
    pixels = np.asarray(display.pixels, dtype=np.bool_)
    height, width = pixels.shape

    rgb_frame = np.zeros((height, width, 3), dtype=np.uint8)
    rgb_frame[pixels] = on_color
    rgb_frame[~pixels] = off_color

    # Nearest neighbor upscaling
    if scale > 1:
        rgb_frame = np.repeat(np.repeat(rgb_frame, scale, axis=0), scale, axis=1)

    return rgb_frame


def create_color_scheme(
    scheme: str = "classic",
) -> Tuple[Tuple[int, int, int], Tuple[int, int, int]]:
    """Get predefined color schemes for CHIP-8 rendering.

    Args:
        scheme: Color scheme name ("classic", "amber", "white", "blue", "retro")

    Returns:
        Tuple of (on_color, off_color) as RGB tuples
    """
    schemes = {
        "classic": ((0, 255, 0), (0, 0, 0)),  # Green on black
        "amber": ((255, 176, 0), (0, 0, 0)),  # Amber on black
        "white": ((255, 255, 255), (0, 0, 0)),  # White on black
        "blue": ((0, 255, 255), (0, 0, 64)),  # Cyan on dark blue
        "retro": ((255, 255, 0), (64, 0, 64)),  # Yellow on purple
    }

    if scheme not in schemes:
        raise ValueError(
            f"Unknown color scheme '{scheme}'. Available: {list(schemes.keys())}"
        )

    return schemes[scheme]


def save_screenshot(
    display: FrameBuffer, filename: str, scale: int = 8, color_scheme: str = "classic"
) -> Image.Image:
    """Save the frame buffer as an image file (format chosen from the extension)."""
    on_color, off_color = create_color_scheme(color_scheme)
    image = Image.fromarray(display_to_rgb(display, scale, on_color, off_color))
    image.save(filename)
    return image


def display_to_text(display: FrameBuffer, on: str = "#", off: str = ".") -> str:
    """ASCII dump of the frame buffer, one line per row."""
    pixels = np.asarray(display.pixels)
    return "\n".join("".join(on if p else off for p in row) for row in pixels)
