"""CHIP-8 machine constants."""

MEMORY_SIZE = 4096
PROGRAM_START = 0x200

SCREEN_WIDTH = 64
SCREEN_HEIGHT = 32
FRAMEBUFFER_SIZE = SCREEN_WIDTH * SCREEN_HEIGHT

NUM_REGISTERS = 16
FLAG_REGISTER = 0xF

STACK_SIZE = 16
ADDRESS_MASK = 0xFFF

# Seconds between steps when the driver paces itself
DEFAULT_STEP_DELAY = 0.06
