class Chip8Error(Exception):
    """
    base class of every fault raised by the virtual machine
    address is the memory location involved in the fault, if any
    pc, opcode and state (a register dump) are attached by the CPU when the fault happens during a cycle
    """
    def __init__(self, msg, address=None, opcode=None):
        super().__init__(msg)
        self.msg = msg
        self.address = address
        self.opcode = opcode
        self.pc = None
        self.state = None

    def annotate(self, pc, opcode, state):
        """attach the context of the cycle that raised the fault"""
        self.pc = pc
        if self.opcode is None:
            self.opcode = opcode
        self.state = state
        return self

    def __str__(self):
        text = self.msg
        if self.pc is not None:
            text += f" at PC 0x{self.pc:04x}"
        if self.opcode is not None:
            text += f" (opcode 0x{self.opcode:04x})"
        if self.state:
            text += f"\n{self.state}"
        return text


class LoadError(Chip8Error):
    """the ROM is too large to fit in memory or could not be read"""


class AddressError(Chip8Error):
    """memory access outside 0x000-0xFFF, or program counter outside the program area"""


class StackError(Chip8Error):
    """call stack overflow or underflow"""


class UnknownOpcodeError(Chip8Error):
    """no instruction matches the fetched opcode"""
