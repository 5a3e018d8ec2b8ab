"""A CHIP-8 emulator: machine state, CPU, beep sound and a pygame front end."""

__version__ = "0.1.0"
__all__ = ["machine", "cpu", "audio", "app"]