"""Interpreter quirk switches.

The defaults give the canonical instruction semantics. Each switch turns on
one of the behaviours some historical interpreters (and the ROMs written for
them) rely on.
"""

import dataclasses
from typing import Iterable


@dataclasses.dataclass(frozen=True)
class Quirks:
    """Behaviour switches for ambiguous CHIP-8 instructions.

    Attributes:
        shift_uses_vy: 8XY6/8XYE shift VY into VX instead of shifting VX in place
        jump_uses_vx: BXNN jumps to XNN + VX instead of NNN + V0
        load_store_increments_index: FX55/FX65 leave I pointing past the last register
        logic_resets_vf: 8XY1/8XY2/8XY3 clear VF
    """
    shift_uses_vy: bool = False
    jump_uses_vx: bool = False
    load_store_increments_index: bool = False
    logic_resets_vf: bool = False

    @classmethod
    def names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in dataclasses.fields(cls))

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "Quirks":
        """Build a quirk set with the given switches turned on."""
        names = list(names)
        unknown = sorted(set(names) - set(cls.names()))
        if unknown:
            raise ValueError(
                f"Unknown quirks {unknown}. Available: {list(cls.names())}"
            )
        return cls(**{name: True for name in names})

    @classmethod
    def legacy(cls) -> "Quirks":
        """Quirks of the original COSMAC VIP interpreter."""
        return cls(shift_uses_vy=True, load_store_increments_index=True, logic_resets_vf=True)

    def enabled(self) -> list[str]:
        return [name for name in self.names() if getattr(self, name)]
