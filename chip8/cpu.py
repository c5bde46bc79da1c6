import logging
import random
from functools import wraps

from .constants import (
    FONT_CHAR_SIZE,
    FONT_START_ADDRESS,
    LAST_INSTRUCTION_ADDRESS,
    REGISTER_COUNT,
    ROM_START_ADDRESS,
)
from .display import Display
from .errors import AddressError, Chip8Error, UnknownOpcodeError
from .keypad import Keypad
from .memory import Memory, Stack
from .quirks import Quirks

logger = logging.getLogger(__name__)


# ******************** UTILITIES SECTION
def asm(msg):
    """decorator to log the ASM of the instruction being called"""
    def decorator(fn):
        @wraps(fn)
        def wrapper_fn(*args, **kwargs):
            vals = fn(*args, **kwargs)  # use the locals() values of each decorated function in the log line
            if logger.isEnabledFor(logging.DEBUG):
                vals['mem_addr'] = args[0].opcode_addr     # args[0] equals self of the decorated method
                logger.debug(msg.format(**vals))
        return wrapper_fn
    return decorator


# ******************** CPU SECTION
class Chip8:
    # WATCH OUT: an opcode is matched against each mask in turn and the first
    # family containing (opcode & mask) wins, every family appears under one mask only
    MASKS = {
        0xFFFF: (0x00E0, 0x00EE),
        0xF0FF: (0xE09E, 0xE0A1, 0xF007, 0xF00A, 0xF015, 0xF018, 0xF01E, 0xF029, 0xF033, 0xF055, 0xF065),
        0xF00F: (0x5000, 0x8000, 0x8001, 0x8002, 0x8003, 0x8004, 0x8005, 0x8006, 0x8007, 0x800E, 0x9000),
        0xF000: (0x1000, 0x2000, 0x3000, 0x4000, 0x6000, 0x7000, 0xA000, 0xB000, 0xC000, 0xD000),
    }

    def __init__(self, display=None, keypad=None, quirks=None, rng=None):
        self.mem = Memory()
        self.stack = Stack()
        self.v_regs = [0] * REGISTER_COUNT
        self.pc = ROM_START_ADDRESS
        self.opcode_addr = ROM_START_ADDRESS    # address of the instruction being executed
        self.idx = 0    # specify where the sprites reside in memory
        self.dt = 0     # delay timer, active when non-zero
        self.st = 0     # sound timer, active when non-zero
        self.draw = False
        self.waiting_register = None    # register waiting for a keypress, None when not waiting
        self.display = display if display is not None else Display()
        self.keypad = keypad if keypad is not None else Keypad()
        self.quirks = quirks if quirks is not None else Quirks()
        self.rng = rng if rng is not None else random.Random()
        self.instructions = {
            0x00E0: self._clear_screen,
            0x00EE: self._return,
            0x1000: self._jump,
            0x2000: self._call_addr,
            0x3000: self._skip_if_eq,
            0x4000: self._skip_if_not_eq,
            0x5000: self._skip_if_eq_regs,
            0x6000: self._set_vk,
            0x7000: self._add_to_vk,
            0x8000: self._set_vx_to_vy,
            0x8001: self._set_vx_or_vy,
            0x8002: self._set_vx_and_vy,
            0x8003: self._set_vx_xor_vy,
            0x8004: self._add_vx_vy,
            0x8005: self._sub_vx_vy,
            0x8006: self._shr,
            0x8007: self._subn_vx_vy,
            0x800E: self._shl,
            0x9000: self._skip_if_not_eq_regs,
            0xA000: self._set_idx,
            0xB000: self._jump_plus,
            0xC000: self._random_byte_and,
            0xD000: self._to_screen,
            0xE09E: self._skip_if_pressed,
            0xE0A1: self._skip_if_not_pressed,
            0xF007: self._set_vx_dt,
            0xF00A: self._wait_keypress,
            0xF015: self._set_dt_vx,
            0xF018: self._set_st,
            0xF01E: self._add_to_idx,
            0xF029: self._select_char,
            0xF033: self._bcd_repr,
            0xF055: self._store_vregs,
            0xF065: self._load_vregs,
        }

    def __str__(self):
        registers = " ".join(f"V{i:X}:0x{v:02x}" for i, v in enumerate(self.v_regs))
        pointers = f"PC_REGISTER:0x{self.pc:04x} | IDX_REGISTER:0x{self.idx:04x} | DT:{self.dt} | ST:{self.st}"
        stack = f"STACK:{self.stack!r}"
        devices = f"KEYPAD:{self.keypad}"
        return f"{pointers}\n{registers}\n{stack}\n{devices}"

    @property
    def waiting(self):
        return self.waiting_register is not None

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SKP V{x}")
    def _skip_if_pressed(self, opcode):
        """skip the following instruction if the key corresponding to the hex value stored in Vx is pressed"""
        x = (opcode & 0x0F00) >> 8
        if self.keypad[self.v_regs[x]]:
            self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SKNP V{x}")
    def _skip_if_not_pressed(self, opcode):
        """skip the following instruction if the key corresponding to the hex value stored in Vx is NOT pressed"""
        x = (opcode & 0x0F00) >> 8
        if not self.keypad[self.v_regs[x]]:
            self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{x}, K")
    def _wait_keypress(self, opcode):
        """wait for a key press and store its value in Vx"""
        x = (opcode & 0x0F00) >> 8
        key = self.keypad.first()
        if key is None:
            self.pc -= 0x2      # stay on the same instruction until a key is pressed
            self.waiting_register = x
        else:
            self.v_regs[x] = key
        return locals()

    def resume_with_key(self, key):
        """complete a pending wait for keypress, storing the key and moving past the instruction"""
        self.v_regs[self.waiting_register] = key
        self.waiting_register = None
        self._goto_next_instruction()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{x}, DT")
    def _set_vx_dt(self, opcode):
        """set Vx = DT (delay timer) value"""
        x = (opcode & 0x0F00) >> 8
        self.v_regs[x] = self.dt
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD DT, V{x}")
    def _set_dt_vx(self, opcode):
        """set DT (delay timer) = Vx"""
        x = (opcode & 0x0F00) >> 8
        self.dt = self.v_regs[x]
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: CLS")
    def _clear_screen(self, opcode):
        self.display.clear()
        self.draw = True
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: RET")
    def _return(self, opcode):
        """return from a subroutine"""
        self.pc = self.stack.pop()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: JP 0x{address:04x}")
    def _jump(self, opcode):
        address = opcode & 0x0FFF
        self.pc = address
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: CALL 0x{address:04x}")
    def _call_addr(self, opcode):
        address = opcode & 0x0FFF
        self.stack.append(self.pc)
        self.pc = address
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SE V{x}, 0x{comparison_value:02x}")
    def _skip_if_eq(self, opcode):
        x = (opcode & 0x0F00) >> 8
        comparison_value = opcode & 0x00FF
        if self.v_regs[x] == comparison_value:
            self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SNE V{x}, 0x{comparison_value:02x}")
    def _skip_if_not_eq(self, opcode):
        x = (opcode & 0x0F00) >> 8
        comparison_value = opcode & 0x00FF
        if self.v_regs[x] != comparison_value:
            self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SE V{x}, V{y}")
    def _skip_if_eq_regs(self, opcode):
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        if self.v_regs[x] == self.v_regs[y]:
            self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SNE V{x}, V{y}")
    def _skip_if_not_eq_regs(self, opcode):
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        if self.v_regs[x] != self.v_regs[y]:
            self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{x}, 0x{value:02x}")
    def _set_vk(self, opcode):
        """set the value of one of the 16 variable registers, Vx"""
        x, value = (opcode & 0x0F00) >> 8, opcode & 0x00FF
        self.v_regs[x] = value
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{x}, V{y}")
    def _set_vx_to_vy(self, opcode):
        """set the value of Vx equal to that of Vy"""
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        self.v_regs[x] = self.v_regs[y]
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: OR V{x}, V{y}")
    def _set_vx_or_vy(self, opcode):
        """set the value of Vx to Vx OR Vy"""
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        self.v_regs[x] |= self.v_regs[y]
        if self.quirks.logic_resets_flag:
            self.v_regs[0xF] = 0
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: AND V{x}, V{y}")
    def _set_vx_and_vy(self, opcode):
        """set the value of Vx to Vx AND Vy"""
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        self.v_regs[x] &= self.v_regs[y]
        if self.quirks.logic_resets_flag:
            self.v_regs[0xF] = 0
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: XOR V{x}, V{y}")
    def _set_vx_xor_vy(self, opcode):
        """set the value of Vx to Vx XOR Vy"""
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        self.v_regs[x] ^= self.v_regs[y]
        if self.quirks.logic_resets_flag:
            self.v_regs[0xF] = 0
        return locals()

    # VF is always written last so that the flag wins when x is 0xF

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: ADD V{x}, V{y}")
    def _add_vx_vy(self, opcode):
        """set the value of Vx to Vx + Vy, VF = carry"""
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        total = self.v_regs[x] + self.v_regs[y]
        self.v_regs[x] = total & 0xFF   # keep only the lowest 8 bits from the result and store them in Vx
        self.v_regs[0xF] = 1 if total > 0xFF else 0
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SUB V{x}, V{y}")
    def _sub_vx_vy(self, opcode):
        """set the value of Vx to Vx - Vy, VF = NOT borrow"""
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        no_borrow = self.v_regs[x] >= self.v_regs[y]
        self.v_regs[x] = (self.v_regs[x] - self.v_regs[y]) & 0xFF
        self.v_regs[0xF] = 1 if no_borrow else 0
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SHR V{x}, V{y}")
    def _shr(self, opcode):
        """set Vx equal to Vy SHR 1 (or Vx SHR 1 with the bitshift quirk), VF = bit shifted out"""
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        source = self.v_regs[x] if self.quirks.bitshift_ignores_vy else self.v_regs[y]
        LSB = source & 0x1
        self.v_regs[x] = source >> 1
        self.v_regs[0xF] = LSB
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SUBN V{x}, V{y}")
    def _subn_vx_vy(self, opcode):
        """set the value of Vx to Vy - Vx, VF = NOT borrow"""
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        no_borrow = self.v_regs[y] >= self.v_regs[x]
        self.v_regs[x] = (self.v_regs[y] - self.v_regs[x]) & 0xFF
        self.v_regs[0xF] = 1 if no_borrow else 0
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SHL V{x}, V{y}")
    def _shl(self, opcode):
        """set Vx equal to Vy SHL 1 (or Vx SHL 1 with the bitshift quirk), VF = bit shifted out"""
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        source = self.v_regs[x] if self.quirks.bitshift_ignores_vy else self.v_regs[y]
        MSB = (source & 0x80) >> 7
        self.v_regs[x] = (source << 1) & 0xFF   # multiply by 2 and keep only the lowest 8 bits from the result
        self.v_regs[0xF] = MSB
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: ADD V{x}, 0x{value:02x}")
    def _add_to_vk(self, opcode):
        """add to the value already present in one of the variable registers, VF is not affected"""
        x, value = (opcode & 0x0F00) >> 8, opcode & 0x00FF
        self.v_regs[x] = (self.v_regs[x] + value) & 0xFF
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD I, 0x{value:04x}")
    def _set_idx(self, opcode):
        """set the value of the I register"""
        value = opcode & 0x0FFF
        self.idx = value
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: JP V{register:X}, 0x{address:04x}")
    def _jump_plus(self, opcode):
        """jump to NNN + V0, or to NNN + Vx when the jump quirk is on (x being the highest nibble of NNN)"""
        address = opcode & 0x0FFF
        register = (opcode & 0x0F00) >> 8 if self.quirks.jump_with_offset_uses_vx else 0x0
        self.pc = address + self.v_regs[register]
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: RND V{x}, 0x{kk:02x}")
    def _random_byte_and(self, opcode):
        x, kk = (opcode & 0x0F00) >> 8, opcode & 0x00FF
        rnd = self.rng.randint(0, 255)
        self.v_regs[x] = rnd & kk
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD ST, V{register}")
    def _set_st(self, opcode):
        """set ST = Vx"""
        register = (opcode & 0x0F00) >> 8
        self.st = self.v_regs[register]
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: ADD I, V{register}")
    def _add_to_idx(self, opcode):
        """set I = I + Vx, VF = 1 when I goes past the addressable range unless the overflow quirk is on"""
        register = (opcode & 0x0F00) >> 8
        self.idx = (self.idx + self.v_regs[register]) & 0xFFFF
        if not self.quirks.add_to_index_ignores_overflow:
            self.v_regs[0xF] = 1 if self.idx > 0x0FFF else 0
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD F, V{register}")
    def _select_char(self, opcode):
        """set I to location of sprite for digit Vx"""
        register = (opcode & 0x0F00) >> 8
        self.idx = FONT_START_ADDRESS + (self.v_regs[register] & 0xF) * FONT_CHAR_SIZE
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD [I], V{x}")
    def _store_vregs(self, opcode):
        """store registers V0 through Vx (included) in memory starting at location I"""
        x = (opcode & 0x0F00) >> 8
        self.mem[self.idx:self.idx+x+1] = self.v_regs[:x+1]
        if self.quirks.store_and_load_increment_index:
            self.idx += x + 1
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{x}, [I]")
    def _load_vregs(self, opcode):
        """read registers V0 through Vx (included) from memory starting at location I"""
        x = (opcode & 0x0F00) >> 8
        self.v_regs[:x+1] = self.mem[self.idx:self.idx+x+1]
        if self.quirks.store_and_load_increment_index:
            self.idx += x + 1
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD B, V{x}")
    def _bcd_repr(self, opcode):
        """takes the decimal value of Vx and the hundreds digit in memory at I, the tens digit at I+1, the ones digit at I+2"""
        x = (opcode & 0x0F00) >> 8
        value = self.v_regs[x]
        hundreds, tens, ones = value // 100, (value // 10) % 10, value % 10
        self.mem[self.idx:self.idx+3] = (hundreds, tens, ones)
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: DRW V{x}, V{y}, {n_bytes}")
    def _to_screen(self, opcode):
        """display n-byte sprite starting at memory location I at (Vx, Vy), set VF = collision"""
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        n_bytes = opcode & 0x000F
        sprite = self.mem[self.idx:self.idx+n_bytes]
        # sprites are XORed onto the existing screen and if this
        # causes any pixel to be erased then VF=1, otherwise VF=0
        collision = self.display.draw_sprite(self.v_regs[x], self.v_regs[y], sprite, wrap=self.quirks.draw_wraps)
        self.v_regs[0xF] = 1 if collision else 0
        self.draw = True
        return locals()

    def _goto_next_instruction(self):
        self.pc += 0x2

    def decode(self, opcode):
        """decode opcodes using masks and return respective function"""
        for mask, ops in self.MASKS.items():
            if (opcode & mask) in ops:
                return self.instructions[opcode & mask]
        raise UnknownOpcodeError(f"Unknown instruction 0x{opcode:04x}", opcode=opcode)

    def tick_timers(self):
        """delay/sound timers (dt/st) count down to zero"""
        if self.dt > 0:
            self.dt -= 1
        if self.st > 0:
            self.st -= 1

    def cycle(self):
        """fetch, decode and execute a single instruction"""
        self.draw = False
        self.opcode_addr = self.pc
        opcode = None
        try:
            # fetch (each instruction is two bytes long)
            opcode = self.mem.read_word(self.pc)
            self._goto_next_instruction()
            # decode + execute
            instruction = self.decode(opcode)
            instruction(opcode)
            if self.pc & 0x1 or not ROM_START_ADDRESS <= self.pc <= LAST_INSTRUCTION_ADDRESS:
                raise AddressError(f"Program counter moved outside the program area to 0x{self.pc:04x}")
        except Chip8Error as err:
            raise err.annotate(self.opcode_addr, opcode, str(self))
        return opcode
