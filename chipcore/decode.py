"""CHIP-8 opcode decoding."""

from chex import dataclass


@dataclass(frozen=True)
class DecodedInstruction:
    """A fetched opcode split into its operand fields.

    Fields hold Python ints when decoding a literal opcode and ``uint16``
    scalars when decoding a traced one.
    """
    raw: int
    family: int  # bits 12-15, primary dispatch selector
    x: int       # bits 8-11, VX register index
    y: int       # bits 4-7, VY register index
    n: int       # bits 0-3, nibble immediate / secondary selector
    kk: int      # bits 0-7, byte immediate / secondary selector of family F
    nnn: int     # bits 0-11, address


def decode(opcode: int) -> DecodedInstruction:
    """Decode a 16-bit opcode."""
    return DecodedInstruction(
        raw=opcode,
        family=(opcode >> 12) & 0xF,
        x=(opcode >> 8) & 0xF,
        y=(opcode >> 4) & 0xF,
        n=opcode & 0xF,
        kk=opcode & 0xFF,
        nnn=opcode & 0xFFF,
    )
