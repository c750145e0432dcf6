"""Tests for framebuffer rendering helpers."""

import numpy as np
import pytest
from PIL import Image
from chip8vm.rendering import (
    chip8_display_to_rgb, create_color_scheme, framebuffer_to_text, save_frame, create_video
)


def framebuffer_with(*cells):
    framebuffer = np.zeros(2048, dtype=np.uint8)
    framebuffer[list(cells)] = 1
    return framebuffer


def test_display_to_rgb_scales_and_colors():
    display = np.zeros((64, 32), dtype=bool)
    display[2, 1] = True

    rgb = chip8_display_to_rgb(display, scale=2, on_color=(1, 2, 3), off_color=(9, 9, 9))

    assert rgb.shape == (64, 128, 3)
    assert tuple(rgb[2, 4]) == (1, 2, 3)
    assert tuple(rgb[3, 5]) == (1, 2, 3)
    assert tuple(rgb[0, 0]) == (9, 9, 9)


def test_unknown_color_scheme():
    with pytest.raises(ValueError):
        create_color_scheme("sepia")


def test_framebuffer_to_text():
    text = framebuffer_to_text(framebuffer_with(0, 64 + 63), on="#", off=".")

    lines = text.split("\n")
    assert len(lines) == 32
    assert all(len(line) == 64 for line in lines)
    assert lines[0] == "#" + "." * 63
    assert lines[1] == "." * 63 + "#"


def test_save_frame(tmp_path):
    path = tmp_path / "frame.png"

    save_frame(framebuffer_with(0), str(path), scale=4, color_scheme="white")

    image = np.asarray(Image.open(path).convert("RGB"))
    assert image.shape == (128, 256, 3)
    assert tuple(image[0, 0]) == (255, 255, 255)
    assert tuple(image[0, 4]) == (0, 0, 0)


def test_create_video_rejects_bad_shape(tmp_path):
    with pytest.raises(ValueError):
        create_video(np.zeros((64, 32)), str(tmp_path / "bad.mp4"))


def test_create_video_writes_frames(tmp_path):
    path = tmp_path / "trace.mp4"
    frames = np.stack([framebuffer_with(i) for i in range(3)])

    written = create_video(frames, str(path), fps=10, scale=2)

    assert written == 3
    assert path.exists()
