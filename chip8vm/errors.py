"""Machine faults and their host-side translation.

Handlers running under ``jax.jit`` cannot raise, so a fault is recorded in the
state (``fault`` / ``fault_address``) and halts the machine. ``raise_for_fault``
turns those fields into a typed exception once the state is back on the host.
"""

from enum import IntEnum


class FaultCode(IntEnum):
    NONE = 0
    FETCH_OUT_OF_BOUNDS = 1
    SPRITE_OUT_OF_BOUNDS = 2
    JUMP_OUT_OF_BOUNDS = 3
    STACK_UNDERFLOW = 4
    STACK_OVERFLOW = 5


class MachineFault(Exception):
    """Fatal condition that halts the machine.

    Raised from a traced run, ``framebuffers`` holds the frames of the steps
    that completed before the halt.
    """

    def __init__(self, message: str, code: FaultCode, address: int):
        super().__init__(message)
        self.code = code
        self.address = address
        self.framebuffers = None


class MemoryFault(MachineFault):
    """Access outside the 4096-byte address space."""


class ExecutionFault(MachineFault):
    """Call stack misuse."""


class RomLoadError(ValueError):
    """ROM image cannot be placed in memory."""


_FAULTS = {
    FaultCode.FETCH_OUT_OF_BOUNDS: (MemoryFault, "instruction fetch at 0x{address:04X} is outside memory"),
    FaultCode.SPRITE_OUT_OF_BOUNDS: (MemoryFault, "sprite read at 0x{address:04X} is outside memory"),
    FaultCode.JUMP_OUT_OF_BOUNDS: (MemoryFault, "jump target 0x{address:04X} is outside memory"),
    FaultCode.STACK_UNDERFLOW: (ExecutionFault, "return with empty call stack at 0x{address:04X}"),
    FaultCode.STACK_OVERFLOW: (ExecutionFault, "call stack overflow at 0x{address:04X}"),
}


def fault_of(state) -> MachineFault | None:
    """Build the exception matching the state's fault fields, if any."""
    code = FaultCode(int(state.fault))
    if code == FaultCode.NONE:
        return None
    address = int(state.fault_address)
    fault_class, template = _FAULTS[code]
    return fault_class(template.format(address=address), code, address)


def raise_for_fault(state) -> None:
    """Raise the typed fault recorded in ``state``."""
    fault = fault_of(state)
    if fault is not None:
        raise fault
