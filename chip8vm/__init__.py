"""CHIP-8 virtual machine package."""

from chip8vm.state import MachineState, StackState, create_state
from chip8vm.emulator import (
    execute, fetch, step, load_rom, load_rom_bytes, run_n_instructions, run_trace,
    framebuffer_snapshot, framebuffer_to_display,
)
from chip8vm.decode import DecodedInstruction, decode, decode_bytes, disassemble
from chip8vm.errors import (
    FaultCode, MachineFault, MemoryFault, ExecutionFault, RomLoadError, raise_for_fault,
)
from chip8vm.constants import *
from chip8vm.driver import Machine

__all__ = [
    "MachineState",
    "StackState",
    "create_state",
    "fetch",
    "execute",
    "step",
    "load_rom",
    "load_rom_bytes",
    "run_n_instructions",
    "run_trace",
    "framebuffer_snapshot",
    "framebuffer_to_display",
    "DecodedInstruction",
    "decode",
    "decode_bytes",
    "disassemble",
    "FaultCode",
    "MachineFault",
    "MemoryFault",
    "ExecutionFault",
    "RomLoadError",
    "raise_for_fault",
    "Machine",
    "MEMORY_SIZE",
    "PROGRAM_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "FRAMEBUFFER_SIZE",
    "STACK_SIZE",
]
