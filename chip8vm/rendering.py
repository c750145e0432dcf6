"""CHIP-8 rendering utilities for visualization."""

import jax.numpy as jnp
import numpy as np
from typing import Tuple
import cv2

from PIL import Image

from chip8vm.emulator import framebuffer_to_display


def chip8_display_to_rgb(
    display: jnp.ndarray,
    scale: int = 8,
    on_color: Tuple[int, int, int] = (0, 255, 0),
    off_color: Tuple[int, int, int] = (0, 0, 0),
) -> np.ndarray:
    """Convert CHIP-8 boolean display to RGB array with optional upscaling.

    Args:
        display: Boolean array of shape (64, 32) representing CHIP-8 display
        scale: Upscaling factor for better visibility (default: 8x)
        on_color: RGB color for "on" pixels (default: green)
        off_color: RGB color for "off" pixels (default: black)

    Returns:
        RGB array of shape (height*scale, width*scale, 3) with uint8 values
    """
    pixels = np.array(display, dtype=np.bool_)

    # (64 width, 32 height) -> (32 height, 64 width)
    pixels = pixels.T
    height, width = pixels.shape

    rgb_frame = np.zeros((height, width, 3), dtype=np.uint8)

    rgb_frame[pixels] = on_color
    rgb_frame[~pixels] = off_color

    # Nearest neighbor upscaling
    if scale > 1:
        rgb_frame = np.repeat(np.repeat(rgb_frame, scale, axis=0), scale, axis=1)

    return rgb_frame


COLOR_SCHEMES = {
    "classic": ((0, 255, 0), (0, 0, 0)),  # Green on black
    "amber": ((255, 176, 0), (0, 0, 0)),  # Amber on black
    "white": ((255, 255, 255), (0, 0, 0)),  # White on black
    "blue": ((0, 255, 255), (0, 0, 64)),  # Cyan on dark blue
    "retro": ((255, 255, 0), (64, 0, 64)),  # Yellow on purple
}


def create_color_scheme(
    scheme: str = "classic",
) -> Tuple[Tuple[int, int, int], Tuple[int, int, int]]:
    """Get predefined color schemes for CHIP-8 rendering.

    Args:
        scheme: Color scheme name, one of ``COLOR_SCHEMES``

    Returns:
        Tuple of (on_color, off_color) as RGB tuples
    """
    if scheme not in COLOR_SCHEMES:
        raise ValueError(
            f"Unknown color scheme '{scheme}'. Available: {list(COLOR_SCHEMES.keys())}"
        )

    return COLOR_SCHEMES[scheme]


def framebuffer_to_text(framebuffer, on: str = "█", off: str = " ") -> str:
    """Render the flat framebuffer as 32 lines of 64 characters."""
    rows = np.asarray(framebuffer, dtype=np.bool_).reshape(32, 64)
    return "\n".join("".join(on if pixel else off for pixel in row) for row in rows)


def save_frame(
    framebuffer,
    filename: str,
    scale: int = 8,
    color_scheme: str = "classic",
) -> None:
    """Save a flat framebuffer as an image file (format chosen by extension)."""
    on_color, off_color = create_color_scheme(color_scheme)
    rgb = chip8_display_to_rgb(framebuffer_to_display(framebuffer), scale, on_color, off_color)
    Image.fromarray(rgb).save(filename)


def create_video(
        framebuffers,
        filename: str,
        fps: float = 60.0,
        scale: int = 8,
        color_scheme: str = "classic",
        persistence: bool = True,
) -> int:
    """Write a sequence of framebuffers to an MP4 file.

    Args:
        framebuffers: Array of shape (N, 2048), e.g. from ``run_trace``
        filename: Output MP4 path
        fps: Video frame rate
        scale: Upscaling factor
        color_scheme: Color scheme for rendering
        persistence: Enable phosphor screen simulation (smooth fading)

    Returns:
        Number of frames written
    """
    displays = framebuffer_to_display(framebuffers)
    if displays.ndim != 3 or displays.shape[1:] != (64, 32):
        raise ValueError(f"Expected framebuffers of shape (N, 2048), got {np.shape(framebuffers)}")

    height, width = 32 * scale, 64 * scale
    on_color, off_color = np.array(create_color_scheme(color_scheme))

    fourcc = cv2.VideoWriter_fourcc(*'mp4v')
    writer = cv2.VideoWriter(filename, fourcc, fps, (width, height))

    glow = np.zeros((64, 32), dtype=np.float32) if persistence else None
    decay = 0.8

    try:
        for frame_display in displays:
            if persistence:
                glow = glow * decay + frame_display.astype(np.float32)
                glow = np.clip(glow, 0.0, 1.0)
                pixel_values = glow.T  # (32, 64)
            else:
                pixel_values = frame_display.T.astype(np.float32)  # (32, 64)

            frame = np.zeros((32, 64, 3), dtype=np.uint8)
            for c in range(3):
                frame[:, :, c] = off_color[c] + pixel_values * (on_color[c] - off_color[c])

            if scale > 1:
                frame = np.repeat(np.repeat(frame, scale, axis=0), scale, axis=1)
            writer.write(cv2.cvtColor(frame, cv2.COLOR_RGB2BGR))
    finally:
        writer.release()

    return len(displays)
