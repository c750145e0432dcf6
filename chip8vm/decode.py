"""CHIP-8 instruction decoding."""

from chex import dataclass

from chip8vm.constants import ADDRESS_MASK


@dataclass(frozen=True)
class DecodedInstruction:
    """Fields of an instruction word laid out as ``0xKXYN``.

    ``opcode`` is the family nibble K. ``x`` and ``y`` select registers,
    ``n`` is the low nibble, ``nn`` the low byte and ``nnn`` the low 12 bits
    used as an address.
    """
    raw: int
    opcode: int
    x: int
    y: int
    n: int
    nn: int
    nnn: int


def decode(instruction: int) -> DecodedInstruction:
    """Split a 16-bit word into its fields. Every word decodes."""
    return DecodedInstruction(
        raw=instruction,
        opcode=(instruction >> 12) & 0xF,
        x=(instruction >> 8) & 0xF,
        y=(instruction >> 4) & 0xF,
        n=instruction & 0xF,
        nn=instruction & 0xFF,
        nnn=instruction & ADDRESS_MASK,
    )


def decode_bytes(high: int, low: int) -> DecodedInstruction:
    """Decode the two bytes of an instruction, high byte first."""
    return decode((high << 8) | low)


_ALU_MNEMONICS = {
    0x0: "LD V{x:X}, V{y:X}",
    0x1: "OR V{x:X}, V{y:X}",
    0x2: "AND V{x:X}, V{y:X}",
    0x3: "XOR V{x:X}, V{y:X}",
    0x4: "ADD V{x:X}, V{y:X}",
    0x5: "SUB V{x:X}, V{y:X}",
    0x6: "SHR V{x:X}",
    0x7: "SUBN V{x:X}, V{y:X}",
    0xE: "SHL V{x:X}",
}


def disassemble(instruction: int) -> str:
    """Render a 16-bit instruction as ``"WORD  MNEMONIC"`` for traces.

    Words the machine ignores are shown as data (``DW``).
    """
    instruction = int(instruction)
    d = decode(instruction)
    fields = dict(x=d.x, y=d.y, n=d.n, nn=d.nn, nnn=d.nnn)

    if d.opcode == 0x0 and d.nn == 0xE0:
        text = "CLS"
    elif d.opcode == 0x0 and d.nn == 0xEE:
        text = "RET"
    elif d.opcode == 0x8 and d.n in _ALU_MNEMONICS:
        text = _ALU_MNEMONICS[d.n].format(**fields)
    else:
        template = {
            0x1: "JP 0x{nnn:03X}",
            0x2: "CALL 0x{nnn:03X}",
            0x3: "SE V{x:X}, 0x{nn:02X}",
            0x4: "SNE V{x:X}, 0x{nn:02X}",
            0x5: "SE V{x:X}, V{y:X}",
            0x6: "LD V{x:X}, 0x{nn:02X}",
            0x7: "ADD V{x:X}, 0x{nn:02X}",
            0x9: "SNE V{x:X}, V{y:X}",
            0xA: "LD I, 0x{nnn:03X}",
            0xB: "JP V0, 0x{nnn:03X}",
            0xD: "DRW V{x:X}, V{y:X}, {n}",
        }.get(d.opcode)
        text = template.format(**fields) if template else f"DW 0x{instruction:04X}"

    return f"{instruction:04X}  {text}"
