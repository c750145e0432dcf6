"""CHIP-8 machine state structures."""

import jax.numpy as jnp
from flax.struct import PyTreeNode

from chip8vm.constants import (
    MEMORY_SIZE, PROGRAM_START, FRAMEBUFFER_SIZE, NUM_REGISTERS, STACK_SIZE
)
from chip8vm.errors import FaultCode


class StackState(PyTreeNode):
    """Call stack of saved program counters."""
    data: jnp.ndarray
    pointer: jnp.ndarray


class MachineState(PyTreeNode):
    """Main CHIP-8 machine state.

    ``framebuffer`` is the flat 64x32 display, row-major, one cell per pixel.
    ``fault`` is non-zero once the machine has halted on a fault.
    """
    memory: jnp.ndarray
    V: jnp.ndarray
    I: jnp.ndarray
    pc: jnp.ndarray
    stack: StackState
    framebuffer: jnp.ndarray
    current_instruction: jnp.ndarray
    fault: jnp.ndarray
    fault_address: jnp.ndarray

    @property
    def halted(self) -> jnp.ndarray:
        return self.fault != int(FaultCode.NONE)


def create_stack() -> StackState:
    return StackState(
        data=jnp.zeros(STACK_SIZE, dtype=jnp.uint16),
        pointer=jnp.zeros((), dtype=jnp.int32),
    )


def create_state() -> MachineState:
    """Create zeroed machine state with the program counter at 0x200."""
    return MachineState(
        memory=jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8),
        V=jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8),
        I=jnp.zeros((), dtype=jnp.uint16),
        pc=jnp.asarray(PROGRAM_START, dtype=jnp.uint16),
        stack=create_stack(),
        framebuffer=jnp.zeros(FRAMEBUFFER_SIZE, dtype=jnp.uint8),
        current_instruction=jnp.zeros((), dtype=jnp.uint16),
        fault=jnp.asarray(int(FaultCode.NONE), dtype=jnp.uint8),
        fault_address=jnp.zeros((), dtype=jnp.int32),
    )


def signal_fault(state: MachineState, code: FaultCode, address) -> MachineState:
    """Halt the machine with ``code``, recording the offending address."""
    return state.replace(
        fault=jnp.asarray(int(code), dtype=jnp.uint8),
        fault_address=jnp.asarray(address, dtype=jnp.int32),
    )
