"""Exceptions raised on the host side of the interpreter."""


class Chip8Error(Exception):
    """Base class for interpreter errors."""


class RomLoadError(Chip8Error, ValueError):
    """Program image rejected before execution."""


class EmptyRomError(RomLoadError):
    pass


class RomTooLargeError(RomLoadError):
    pass


class StackFault(Chip8Error):
    """Fatal call stack discipline violation."""

    def __init__(self, message: str, pc: int):
        super().__init__(message)
        self.pc = pc


class StackOverflowError(StackFault):
    pass


class StackUnderflowError(StackFault):
    pass
