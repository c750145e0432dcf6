"""Stepping driver that owns a machine and raises its faults."""

import time
from typing import Optional

import jax
import numpy as np
from tqdm import tqdm

from chip8vm.constants import DEFAULT_STEP_DELAY
from chip8vm.decode import disassemble
from chip8vm.emulator import (
    step, run_n_instructions, run_trace, load_rom, framebuffer_snapshot,
    framebuffer_to_display
)
from chip8vm.errors import fault_of
from chip8vm.logging import ConsoleLogger
from chip8vm.state import MachineState, create_state

_jit_step = jax.jit(step)


class Machine:
    """Single CHIP-8 machine driven one step at a time.

    All state changes go through ``step``; the state itself is immutable and
    replaced after every step. A fault halts the machine and is raised as
    ``MemoryFault`` or ``ExecutionFault``; the halted state stays inspectable.
    """

    def __init__(
        self,
        state: Optional[MachineState] = None,
        step_delay: float = DEFAULT_STEP_DELAY,
        logger: Optional[ConsoleLogger] = None,
    ):
        self.state = state if state is not None else create_state()
        self.step_delay = step_delay
        self.logger = logger or ConsoleLogger()
        self.rom_path = None
        self.steps_executed = 0

    @classmethod
    def from_rom(cls, rom_path: str, **kwargs) -> "Machine":
        machine = cls(**kwargs)
        machine.load(rom_path)
        return machine

    def load(self, rom_path: str) -> None:
        """Load a ROM into a fresh machine state."""
        self.state = load_rom(create_state(), rom_path)
        self.rom_path = rom_path
        self.steps_executed = 0
        self.logger.info(f"Loaded ROM {rom_path}")

    def reset(self) -> None:
        """Reload the last ROM, or clear the machine if none was loaded."""
        if self.rom_path is None:
            self.state = create_state()
            self.steps_executed = 0
        else:
            self.load(self.rom_path)

    def raise_for_fault(self, framebuffers: Optional[np.ndarray] = None) -> None:
        """Log and raise the fault the machine halted on, if any.

        ``framebuffers`` is attached to the raised fault for traced runs.
        """
        fault = fault_of(self.state)
        if fault is not None:
            fault.framebuffers = framebuffers
            self.logger.error(f"{type(fault).__name__}: {fault}")
            raise fault

    def step(self) -> MachineState:
        """Fetch and execute exactly one instruction."""
        if self.logger.is_enabled_for("DEBUG"):
            pc = int(self.state.pc)
            self.logger.debug(f"0x{pc:03X}  {disassemble(self._peek(pc))}")

        self.state = _jit_step(self.state)
        self.raise_for_fault()
        self.steps_executed += 1
        return self.state

    def _peek(self, address: int) -> int:
        memory = self.state.memory
        if address + 1 >= memory.shape[0]:
            return 0
        return (int(memory[address]) << 8) | int(memory[address + 1])

    def tick(self) -> MachineState:
        """One step followed by the pacing delay."""
        state = self.step()
        time.sleep(self.step_delay)
        return state

    def run(self, num_steps: int, paced: bool = False, progress: bool = False) -> MachineState:
        """Step ``num_steps`` times, stopping at the first fault."""
        advance = self.tick if paced else self.step
        steps = range(num_steps)
        if progress:
            steps = tqdm(steps, desc=f"Running ({num_steps:,} steps)", unit="step")
        for _ in steps:
            advance()
        return self.state

    def run_batch(self, num_steps: int, progress: bool = False) -> MachineState:
        """Run ``num_steps`` in one compiled scan, then raise any fault.

        Steps that completed before a fault are counted like ``run`` counts them.
        """
        self.state, completed = run_n_instructions(self.state, num_steps, progress)
        self.steps_executed += int(completed)
        self.raise_for_fault()
        return self.state

    def run_trace(self, num_steps: int, progress: bool = False) -> np.ndarray:
        """Run like ``run_batch`` and return every step's framebuffer, shape (n, 2048).

        On a fault the frames of the completed steps travel with the exception.
        """
        self.state, framebuffers, completed = run_trace(self.state, num_steps, progress)
        completed = int(completed)
        self.steps_executed += completed
        framebuffers = np.asarray(framebuffers)
        self.raise_for_fault(framebuffers[:completed])
        return framebuffers

    @property
    def framebuffer(self) -> np.ndarray:
        """Read-only flat framebuffer snapshot."""
        return framebuffer_snapshot(self.state)

    @property
    def display(self) -> np.ndarray:
        """Framebuffer as a (64, 32) boolean grid."""
        return framebuffer_to_display(self.framebuffer)

    @property
    def halted(self) -> bool:
        return bool(self.state.halted)

    def __repr__(self) -> str:
        return (
            f"Machine(pc=0x{int(self.state.pc):03X}, I=0x{int(self.state.I):03X}, "
            f"steps={self.steps_executed}, halted={self.halted})"
        )
