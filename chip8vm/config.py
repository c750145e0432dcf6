"""Run configuration for the chip8vm command line."""

import dataclasses
from typing import Optional

from chip8vm.constants import DEFAULT_STEP_DELAY
from chip8vm.rendering import COLOR_SCHEMES


@dataclasses.dataclass(frozen=True)
class RunConfig:
    """Settings for one emulator run.

    Attributes:
        rom_path: ROM image to load at 0x200
        steps: Number of fetch/execute steps to run
        step_delay: Seconds slept after each step when ``paced``
        paced: Sleep ``step_delay`` between steps like a real-time driver
        batch: Run all steps in one compiled scan instead of stepping from Python
        log_level: Console log level
        scale: Upscaling factor for image and video output
        color_scheme: Color scheme for image and video output
        png_path: Save the final framebuffer to this image file
        video_path: Save an MP4 of every step's framebuffer to this file
        fps: Video frame rate
        show_ascii: Print the final framebuffer to the terminal
        progress: Show a tqdm progress bar while running
    """
    rom_path: str
    steps: int = 1000
    step_delay: float = DEFAULT_STEP_DELAY
    paced: bool = False
    batch: bool = False
    log_level: str = "INFO"
    scale: int = 8
    color_scheme: str = "classic"
    png_path: Optional[str] = None
    video_path: Optional[str] = None
    fps: float = 60.0
    show_ascii: bool = False
    progress: bool = False

    def validate(self) -> "RunConfig":
        if self.steps < 0:
            raise ValueError(f"steps must be non-negative, got {self.steps}")
        if self.step_delay < 0:
            raise ValueError(f"step_delay must be non-negative, got {self.step_delay}")
        if self.scale < 1:
            raise ValueError(f"scale must be at least 1, got {self.scale}")
        if self.fps <= 0:
            raise ValueError(f"fps must be positive, got {self.fps}")
        if self.color_scheme not in COLOR_SCHEMES:
            raise ValueError(
                f"Unknown color scheme '{self.color_scheme}'. Available: {list(COLOR_SCHEMES.keys())}"
            )
        return self

    @classmethod
    def from_args(cls, args) -> "RunConfig":
        """Build a config from an ``argparse`` namespace."""
        return cls(
            rom_path=args.rom,
            steps=args.steps,
            step_delay=args.delay,
            paced=args.paced,
            batch=args.batch,
            log_level=args.log_level,
            scale=args.scale,
            color_scheme=args.color_scheme,
            png_path=args.png,
            video_path=args.video,
            fps=args.fps,
            show_ascii=args.ascii,
            progress=args.progress,
        ).validate()
