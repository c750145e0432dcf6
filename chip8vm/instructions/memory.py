"""CHIP-8 register and index operations."""

import jax.numpy as jnp
from chip8vm.state import MachineState
from chip8vm.decode import DecodedInstruction


def execute_set(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """6XNN - Set VX = NN."""
    value = jnp.asarray(instruction.nn, dtype=jnp.uint8)
    return state.replace(V=state.V.at[instruction.x].set(value))


def execute_add(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """7XNN - Add NN to VX, wrapping at 8 bits. VF is not touched."""
    total = state.V[instruction.x].astype(jnp.int32) + jnp.asarray(instruction.nn, dtype=jnp.int32)
    return state.replace(V=state.V.at[instruction.x].set((total & 0xFF).astype(jnp.uint8)))


def execute_set_index(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """ANNN - Set I = NNN."""
    return state.replace(I=jnp.asarray(instruction.nnn, dtype=jnp.uint16))
