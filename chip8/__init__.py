from .errors import AddressError, Chip8Error, LoadError, StackError, UnknownOpcodeError
from .machine import Machine, State
from .quirks import Quirks

__all__ = [
    "AddressError",
    "Chip8Error",
    "LoadError",
    "Machine",
    "Quirks",
    "StackError",
    "State",
    "UnknownOpcodeError",
]
