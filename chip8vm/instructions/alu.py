"""CHIP-8 ALU operations (8xxx).

Each operation takes the whole register file and returns the updated one.
Flag and result writes happen in order, with registers re-read after the flag
write, so an operation whose X or Y is VF sees the freshly written flag.
"""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.constants import FLAG_REGISTER
from chip8vm.state import MachineState
from chip8vm.decode import DecodedInstruction


def _write(V: jnp.ndarray, index, value) -> jnp.ndarray:
    return V.at[index].set(jnp.asarray(value & 0xFF, dtype=jnp.int32).astype(jnp.uint8))


def _wide(V: jnp.ndarray, index) -> jnp.ndarray:
    return V[index].astype(jnp.int32)


def _set_flag_if(V: jnp.ndarray, condition) -> jnp.ndarray:
    """VF = 1 when condition holds, otherwise VF keeps its value."""
    return V.at[FLAG_REGISTER].set(jnp.where(condition, jnp.uint8(1), V[FLAG_REGISTER]))


def alu_set(V, x, y):
    """8XY0 - Set: VX = VY."""
    return V.at[x].set(V[y])


def alu_or(V, x, y):
    """8XY1 - Binary OR: VX |= VY."""
    return V.at[x].set(V[x] | V[y])


def alu_and(V, x, y):
    """8XY2 - Binary AND: VX &= VY."""
    return V.at[x].set(V[x] & V[y])


def alu_xor(V, x, y):
    """8XY3 - Logical XOR: VX ^= VY."""
    return V.at[x].set(V[x] ^ V[y])


def alu_add(V, x, y):
    """8XY4 - Add: VX += VY, VF = 1 on carry. VF is left alone without carry."""
    total = _wide(V, x) + _wide(V, y)
    V = _set_flag_if(V, total > 0xFF)
    return _write(V, x, total)


def alu_sub_xy(V, x, y):
    """8XY5 - Subtract: VX -= VY, VF = 1 when VX > VY, otherwise untouched."""
    V = _set_flag_if(V, V[x] > V[y])
    return _write(V, x, _wide(V, x) - _wide(V, y))


def alu_shift_right(V, x, y):
    """8XY6 - Shift right: VF = VX & 1, VX >>= 1. VY is not used."""
    V = V.at[FLAG_REGISTER].set(V[x] & 1)
    return V.at[x].set(V[x] >> 1)


def alu_sub_yx(V, x, y):
    """8XY7 - Subtract: VX = VY - VX, VF = 1 when VX < VY, otherwise untouched."""
    V = _set_flag_if(V, V[x] < V[y])
    return _write(V, x, _wide(V, y) - _wide(V, x))


def alu_shift_left(V, x, y):
    """8XYE - Shift left: VF = VX & 0x80 (not normalized), VX <<= 1."""
    V = V.at[FLAG_REGISTER].set(V[x] & 0x80)
    return _write(V, x, _wide(V, x) * 2)


def alu_undefined(V, x, y):
    """Undefined ALU operation."""
    return V


ALU_OPERATIONS = [
    alu_set, alu_or, alu_and, alu_xor,
    alu_add, alu_sub_xy, alu_shift_right, alu_sub_yx,
    alu_undefined, alu_undefined, alu_undefined, alu_undefined,
    alu_undefined, alu_undefined, alu_shift_left, alu_undefined,
]


def execute_alu_operation(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """8XYN - ALU operations dispatcher."""
    new_V = jax.lax.switch(instruction.n, ALU_OPERATIONS, state.V, instruction.x, instruction.y)
    return state.replace(V=new_V)
