"""Command line entry point: run a ROM and export what it drew."""

import argparse
import sys

from chip8vm.config import RunConfig
from chip8vm.constants import DEFAULT_STEP_DELAY
from chip8vm.driver import Machine
from chip8vm.errors import MachineFault, RomLoadError
from chip8vm.logging import ConsoleLogger
from chip8vm.rendering import COLOR_SCHEMES, framebuffer_to_text, save_frame, create_video


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chip8vm",
        description="Run a CHIP-8 ROM for a number of steps",
    )
    parser.add_argument("rom", help="Path to the ROM image")
    parser.add_argument(
        "--steps",
        type=int,
        default=1000,
        help="Number of instructions to execute (default: 1000)",
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=DEFAULT_STEP_DELAY,
        help=f"Seconds between steps with --paced (default: {DEFAULT_STEP_DELAY})",
    )
    parser.add_argument("--paced", action="store_true", help="Sleep --delay after each step")
    parser.add_argument(
        "--batch",
        action="store_true",
        help="Run all steps in a single compiled scan",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Console log level; DEBUG traces every instruction",
    )
    parser.add_argument("--png", help="Save the final framebuffer to this image file")
    parser.add_argument("--video", help="Save an MP4 with one frame per step")
    parser.add_argument("--fps", type=float, default=60.0, help="Video frame rate (default: 60)")
    parser.add_argument("--scale", type=int, default=8, help="Image upscaling factor (default: 8)")
    parser.add_argument(
        "--color-scheme",
        default="classic",
        choices=sorted(COLOR_SCHEMES),
        help="Colors for image and video output",
    )
    parser.add_argument("--ascii", action="store_true", help="Print the final framebuffer")
    parser.add_argument("--progress", action="store_true", help="Show a progress bar while running")
    return parser


def _save_video(config: RunConfig, machine: Machine, framebuffers) -> None:
    if len(framebuffers) == 0:
        machine.logger.warning(f"No frames to write to {config.video_path}")
        return
    frames = create_video(framebuffers, config.video_path, config.fps, config.scale, config.color_scheme)
    machine.logger.info(f"Video saved: {config.video_path} ({frames} frames, {config.fps} FPS)")


def run(config: RunConfig, machine: Machine) -> None:
    """Advance the machine as configured; machine faults propagate.

    A video is still written for the steps that ran before a fault.
    """
    if config.video_path:
        try:
            framebuffers = machine.run_trace(config.steps, progress=config.progress)
        except MachineFault as fault:
            _save_video(config, machine, fault.framebuffers)
            raise
        _save_video(config, machine, framebuffers)
    elif config.batch:
        machine.run_batch(config.steps, progress=config.progress)
    else:
        machine.run(config.steps, paced=config.paced, progress=config.progress)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logger = ConsoleLogger(log_level=args.log_level)

    try:
        config = RunConfig.from_args(args)
    except ValueError as e:
        logger.error(str(e))
        return 2

    try:
        machine = Machine.from_rom(config.rom_path, step_delay=config.step_delay, logger=logger)
    except (RomLoadError, OSError) as e:
        logger.error(f"Cannot load ROM: {e}")
        return 2

    status = 0
    try:
        run(config, machine)
    except MachineFault:
        status = 1

    logger.info(repr(machine))
    if config.png_path:
        save_frame(machine.framebuffer, config.png_path, config.scale, config.color_scheme)
        logger.info(f"Frame saved: {config.png_path}")
    if config.show_ascii:
        print(framebuffer_to_text(machine.framebuffer))

    return status


if __name__ == "__main__":
    sys.exit(main())
