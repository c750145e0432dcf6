"""CHIP-8 control flow instructions."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.constants import MEMORY_SIZE, STACK_SIZE
from chip8vm.state import MachineState, signal_fault
from chip8vm.decode import DecodedInstruction
from chip8vm.errors import FaultCode
from chip8vm.stack import push


def execute_jump(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """1NNN - Jump to address NNN."""
    return state.replace(pc=jnp.asarray(instruction.nnn, dtype=jnp.uint16))


def execute_call(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """2NNN - Call subroutine at NNN.

    The saved address is the already advanced program counter, so a return
    resumes at the instruction following the call.
    """
    def call(state):
        state = state.replace(stack=push(state.stack, state.pc))
        return execute_jump(state, instruction)

    def overflow(state):
        return signal_fault(state, FaultCode.STACK_OVERFLOW, state.pc.astype(jnp.int32) - 2)

    return jax.lax.cond(state.stack.pointer < STACK_SIZE, call, overflow, state)


def make_skip_instruction(condition_fn):
    """Factory for skip instructions."""
    def skip_instruction(state: MachineState, instruction: DecodedInstruction) -> MachineState:
        condition = condition_fn(state, instruction)
        return jax.lax.cond(
            condition,
            lambda s: s.replace(pc=s.pc + 2),
            lambda s: s,
            state
        )
    return skip_instruction


execute_skip_if_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == inst.nn
)

execute_skip_if_not_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != inst.nn
)

# The low nibble of 5XY0 / 9XY0 is not checked
execute_skip_if_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == state.V[inst.y]
)

execute_skip_if_not_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != state.V[inst.y]
)


def execute_jump_with_offset(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """BNNN - Jump to address NNN + V0."""
    jump_address = jnp.asarray(instruction.nnn, dtype=jnp.int32) + state.V[0].astype(jnp.int32)

    return jax.lax.cond(
        jump_address < MEMORY_SIZE,
        lambda s: s.replace(pc=jump_address.astype(jnp.uint16)),
        lambda s: signal_fault(s, FaultCode.JUMP_OUT_OF_BOUNDS, jump_address),
        state
    )
