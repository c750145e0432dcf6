"""CHIP-8 system instructions (0x0xxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import MachineState, signal_fault
from chip8vm.decode import DecodedInstruction
from chip8vm.errors import FaultCode
from chip8vm.stack import pop


def no_op(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """No operation."""
    return state


def execute_clear_screen(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """00E0 - Clear display."""
    return state.replace(framebuffer=jnp.zeros_like(state.framebuffer))


def _return(state: MachineState) -> MachineState:
    stack, address = pop(state.stack)
    return state.replace(stack=stack, pc=address)


def _stack_underflow(state: MachineState) -> MachineState:
    return signal_fault(state, FaultCode.STACK_UNDERFLOW, state.pc.astype(jnp.int32) - 2)


def execute_return(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """00EE - Return from subroutine."""
    return jax.lax.cond(state.stack.pointer > 0, _return, _stack_underflow, state)


def execute_system_instruction(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """Dispatch system instructions on the low byte; other 0NNN words are ignored."""
    return jax.lax.cond(
        instruction.nn == 0xE0,
        execute_clear_screen,
        lambda state, instruction: jax.lax.cond(
            instruction.nn == 0xEE,
            execute_return,
            no_op,
            state, instruction
        ),
        state, instruction
    )
