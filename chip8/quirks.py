# COMPATIBILITY QUIRKS TABLE
# https://games.gulrak.net/cadmium/chip8-opcode-table.html#quirk6

from dataclasses import dataclass, fields


@dataclass(frozen=True)
class Quirks:
    """
    behaviour switches reproducing the differences between historical interpreters
    every switch defaults to False, which is the behaviour most modern ROMs expect
    """
    bitshift_ignores_vy: bool = False               # 8XY6/8XYE shift VX in place instead of copying VY first
    jump_with_offset_uses_vx: bool = False          # BNNN adds VX instead of V0
    add_to_index_ignores_overflow: bool = False     # FX1E leaves VF untouched
    store_and_load_increment_index: bool = False    # FX55/FX65 leave I past the last register copied
    draw_wraps: bool = False                        # DXYN wraps sprites around the screen edges instead of clipping
    logic_resets_flag: bool = False                 # 8XY1/8XY2/8XY3 set VF to 0

    @classmethod
    def names(cls):
        return [f.name for f in fields(cls)]

    def enabled(self):
        """names of the switches turned on"""
        return [name for name in self.names() if getattr(self, name)]
