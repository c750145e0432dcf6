"""Main CHIP-8 execution engine."""

from functools import partial

import jax
import jax.lax
import jax.numpy as jnp
import numpy as np
from chip8vm.state import MachineState, signal_fault
from chip8vm.decode import decode
from chip8vm.errors import FaultCode, RomLoadError
from chip8vm.constants import MEMORY_SIZE, PROGRAM_START, SCREEN_WIDTH, SCREEN_HEIGHT
from chip8vm.instructions.system import execute_system_instruction, no_op
from chip8vm.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset
)
from chip8vm.instructions.alu import execute_alu_operation
from chip8vm.instructions.memory import execute_set, execute_add, execute_set_index
from chip8vm.instructions.display import execute_display
from chip8vm.logging import scan_with_progress


def execute(state: MachineState, instruction: int) -> MachineState:
    """Execute single CHIP-8 instruction.

    Families 0xC, 0xE and 0xF are not implemented and leave the state as is.
    """
    decoded_instruction = decode(instruction)

    return jax.lax.switch(
        decoded_instruction.opcode,
        [
            execute_system_instruction,
            execute_jump,
            execute_call,
            execute_skip_if_equal_immediate,
            execute_skip_if_not_equal_immediate,
            execute_skip_if_equal_register,
            execute_set,
            execute_add,
            execute_alu_operation,
            execute_skip_if_not_equal_register,
            execute_set_index,
            execute_jump_with_offset,
            no_op,
            execute_display,
            no_op,
            no_op,
        ],
        state, decoded_instruction
    )


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: MachineState) -> tuple[MachineState, jnp.uint16]:
    """Fetch next instruction from memory and advance the program counter.

    A program counter whose second byte lies outside memory halts the machine
    with the program counter left in place.
    """
    address = state.pc.astype(jnp.int32)
    in_bounds = address + 1 < MEMORY_SIZE
    safe_address = jnp.where(in_bounds, address, 0)
    instruction = jnp.where(
        in_bounds,
        _pack_u16(state.memory[safe_address], state.memory[safe_address + 1]),
        jnp.uint16(0),
    )

    state = jax.lax.cond(
        in_bounds,
        lambda s: s.replace(pc=s.pc + 2, current_instruction=instruction),
        lambda s: signal_fault(s, FaultCode.FETCH_OUT_OF_BOUNDS, address),
        state
    )
    return state, instruction


def _fetch_and_execute(state: MachineState) -> MachineState:
    state, instruction = fetch(state)
    return jax.lax.cond(
        state.halted,
        lambda s, _: s,
        execute,
        state, instruction
    )


def step(state: MachineState) -> MachineState:
    """Run one fetch + execute cycle. A halted state is returned unchanged."""
    return jax.lax.cond(state.halted, lambda s: s, _fetch_and_execute, state)


def run_instruction(state, _):
    state = step(state)
    return state, (state.framebuffer, ~state.halted)


def _scan_steps(state: MachineState, n: int, progress: bool):
    body = run_instruction
    if progress:
        body = scan_with_progress(n, desc=f"Running ({n:,} steps)")(run_instruction)
    state, (framebuffers, running) = jax.lax.scan(body, state, jnp.arange(n))
    return state, framebuffers, jnp.sum(running, dtype=jnp.int32)


@partial(jax.jit, static_argnums=(1, 2))
def run_n_instructions(state: MachineState, n: int, progress: bool = False) -> tuple[MachineState, jnp.ndarray]:
    """Run ``n`` steps as a single compiled scan.

    Returns the final state and how many steps completed before the machine
    halted (``n`` when it never did).
    """
    state, _, completed = _scan_steps(state, n, progress)
    return state, completed


@partial(jax.jit, static_argnums=(1, 2))
def run_trace(state: MachineState, n: int, progress: bool = False) -> tuple[MachineState, jnp.ndarray, jnp.ndarray]:
    """Run ``n`` steps and keep the framebuffer after each one, shape (n, 2048).

    Also returns the completed step count. Frames past a halt repeat the
    halted framebuffer.
    """
    return _scan_steps(state, n, progress)


def load_rom_bytes(state: MachineState, rom_data: bytes) -> MachineState:
    """Copy ROM bytes into memory at 0x200 and point the program counter there.

    An empty ROM leaves memory untouched.
    """
    if PROGRAM_START + len(rom_data) > MEMORY_SIZE:
        raise RomLoadError(
            f"ROM is {len(rom_data)} bytes, at most {MEMORY_SIZE - PROGRAM_START} fit above 0x{PROGRAM_START:03X}"
        )
    new_memory = state.memory
    if rom_data:
        rom_array = jnp.array(list(rom_data), dtype=jnp.uint8)
        new_memory = new_memory.at[PROGRAM_START:PROGRAM_START + len(rom_data)].set(rom_array)
    return state.replace(memory=new_memory, pc=jnp.asarray(PROGRAM_START, dtype=jnp.uint16))


def load_rom(state: MachineState, filename: str) -> MachineState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    return load_rom_bytes(state, rom_data)


def framebuffer_snapshot(state: MachineState) -> np.ndarray:
    """Read-only host copy of the flat framebuffer."""
    snapshot = np.array(state.framebuffer, dtype=np.uint8)
    snapshot.setflags(write=False)
    return snapshot


def framebuffer_to_display(framebuffer) -> np.ndarray:
    """Map flat cells to a (64, 32) boolean grid, cell i at (i % 64, i // 64)."""
    pixels = np.asarray(framebuffer, dtype=np.bool_)
    return pixels.reshape(pixels.shape[:-1] + (SCREEN_HEIGHT, SCREEN_WIDTH)).swapaxes(-1, -2)
