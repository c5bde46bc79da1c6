import logging

from .constants import (
    C8_FONTS,
    FONT_START_ADDRESS,
    MAX_ROM_SIZE,
    MEMORY_SIZE,
    ROM_START_ADDRESS,
    STACK_SIZE,
)
from .errors import AddressError, LoadError, StackError

logger = logging.getLogger(__name__)


# ********** WRAPS A LIST TO REPRESENT A STACK WITH A LIMITED SIZE OF 16 ADDRESSES
class Stack:
    def __init__(self, depth=STACK_SIZE):
        self.addr_list = []
        self.depth = depth

    def __len__(self):
        return len(self.addr_list)

    def __repr__(self):
        return "[" + ", ".join(f"0x{addr:04x}" for addr in self.addr_list) + "]"

    def append(self, address):
        if len(self.addr_list) >= self.depth:
            raise StackError(f"The CHIP-8 stack can contain at most {self.depth} addresses. Limit exceeded")
        self.addr_list.append(address)

    def pop(self):
        if not self.addr_list:
            raise StackError("Tried to return with an empty stack")
        return self.addr_list.pop()


# ********** WRAPS A BYTEARRAY TO REPRESENT THE MAIN MEMORY WITH A LIMITED SIZE OF 4KB
class Memory:
    def __init__(self):
        self.inner = bytearray(MEMORY_SIZE)
        self.inner[FONT_START_ADDRESS:FONT_START_ADDRESS+len(C8_FONTS)] = bytes(C8_FONTS)

    def __len__(self):
        return len(self.inner)

    @staticmethod
    def _check(key):
        """raise AddressError for any index or slice reaching outside 0x000-0xFFF"""
        if isinstance(key, slice):
            if key.step not in (None, 1):
                raise AddressError(f"Unsupported memory slice step {key.step}")
            start = 0 if key.start is None else key.start
            stop = MEMORY_SIZE if key.stop is None else key.stop
            if start < 0 or stop > MEMORY_SIZE or start > stop:
                raise AddressError(f"Memory range 0x{start:04x}-0x{stop:04x} is out of bounds", address=start)
        elif not 0 <= key < MEMORY_SIZE:
            raise AddressError(f"Memory address 0x{key:04x} is out of bounds", address=key)

    def __setitem__(self, key, value):
        self._check(key)
        if isinstance(key, slice):
            value = bytes(value)
            if len(value) != len(range(*key.indices(MEMORY_SIZE))):
                raise AddressError("Memory slice assignment must not resize memory", address=key.start)
        self.inner[key] = value

    def __getitem__(self, key):
        self._check(key)
        return self.inner[key]

    def read_word(self, address):
        """fetch the big-endian 16 bit word at address"""
        self._check(slice(address, address + 2))
        return self.inner[address] << 8 | self.inner[address + 1]

    def load_rom(self, rom):
        """copy the ROM bytes verbatim at ROM_START_ADDRESS, raise LoadError if they don't fit"""
        rom = bytes(rom)
        if len(rom) > MAX_ROM_SIZE:
            raise LoadError(f"ROM is {len(rom)} bytes long, at most {MAX_ROM_SIZE} bytes fit in memory")
        self.inner[ROM_START_ADDRESS:ROM_START_ADDRESS+len(rom)] = rom
        logger.info("Loaded a ROM of %d bytes at 0x%04x", len(rom), ROM_START_ADDRESS)
