"""CHIP-8 display operations."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.constants import (
    MEMORY_SIZE, SCREEN_WIDTH, SCREEN_HEIGHT, FRAMEBUFFER_SIZE, FLAG_REGISTER
)
from chip8vm.state import MachineState, signal_fault
from chip8vm.decode import DecodedInstruction
from chip8vm.errors import FaultCode

# Pre-computed sprite grid: up to 15 rows of 8 bits, most significant bit first
rows = jnp.arange(16, dtype=jnp.int32)[:, None]
bits = jnp.arange(8, dtype=jnp.int32)[None, :]


def execute_display(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """DXYN - Draw an N-row sprite from memory[I] at (VX, VY).

    Pixels are XORed into the flat framebuffer at
    ``((x + bit) + 64 * (y + row)) % 2048``, so a sprite crossing the right
    edge continues on the following row. Only the base row is clipped: when
    VY >= 32 nothing is drawn, otherwise all N rows are. VF is cleared first
    and set to 1 if any lit pixel is turned off.
    """
    x_coord = state.V[instruction.x].astype(jnp.int32)
    y_coord = state.V[instruction.y].astype(jnp.int32)

    drawn_rows = (rows < instruction.n) & (y_coord < SCREEN_HEIGHT)
    addresses = state.I.astype(jnp.int32) + rows
    out_of_bounds = drawn_rows & (addresses >= MEMORY_SIZE)

    def draw(state):
        sprite_bytes = state.memory[jnp.where(drawn_rows, addresses, 0)].astype(jnp.int32)
        sprite = ((sprite_bytes >> (7 - bits)) & 1) * drawn_rows
        cells = ((x_coord + bits) + SCREEN_WIDTH * (y_coord + rows)) % FRAMEBUFFER_SIZE

        previous = state.framebuffer[cells]
        collision = jnp.any((previous == 1) & (sprite == 1))
        updated = (previous ^ sprite).astype(jnp.uint8)

        return state.replace(
            framebuffer=state.framebuffer.at[cells].set(updated),
            V=state.V.at[FLAG_REGISTER].set(collision.astype(jnp.uint8)),
        )

    def fault(state):
        first_bad_row = jnp.argmax(out_of_bounds[:, 0])
        return signal_fault(state, FaultCode.SPRITE_OUT_OF_BOUNDS, addresses[first_bad_row, 0])

    return jax.lax.cond(jnp.any(out_of_bounds), fault, draw, state)
