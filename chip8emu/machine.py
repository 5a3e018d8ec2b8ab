"""Memory, display, timers and keypad of the CHIP-8 machine."""

from __future__ import annotations

import os
from pathlib import Path

MEMORY_SIZE = 4096
MEMORY_MASK = MEMORY_SIZE - 1
PROGRAM_START = 0x200
SCREEN_WIDTH = 64
SCREEN_HEIGHT = 32
PIXEL_SET = 0xFFFFFFFF
KEY_COUNT = 16

# Key statuses are registers 0x00-0x0F; the timers follow them.
REG_DT = 0x10
REG_ST = 0x11

FONT = bytes(
    [
        0xF0, 0x90, 0x90, 0x90, 0xF0,
        0x20, 0x60, 0x20, 0x20, 0x70,
        0xF0, 0x10, 0xF0, 0x80, 0xF0,
        0xF0, 0x10, 0xF0, 0x10, 0xF0,
        0x90, 0x90, 0xF0, 0x10, 0x10,
        0xF0, 0x80, 0xF0, 0x10, 0xF0,
        0xF0, 0x80, 0xF0, 0x90, 0xF0,
        0xF0, 0x10, 0x20, 0x40, 0x40,
        0xF0, 0x90, 0xF0, 0x90, 0xF0,
        0xF0, 0x90, 0xF0, 0x10, 0xF0,
        0xF0, 0x90, 0xF0, 0x90, 0x90,
        0xE0, 0x90, 0xE0, 0x90, 0xE0,
        0xF0, 0x80, 0x80, 0x80, 0xF0,
        0xE0, 0x90, 0x90, 0x90, 0xE0,
        0xF0, 0x80, 0xF0, 0x80, 0xF0,
        0xF0, 0x80, 0xF0, 0x80, 0x80,
    ]
)


class RomError(Exception):
    """A ROM image could not be loaded."""


class Machine:
    """The hardware around the CPU: memory, frame buffer, keypad and timers."""

    def __init__(self) -> None:
        self.memory = bytearray(MEMORY_SIZE)
        self.framebuffer = [0] * (SCREEN_WIDTH * SCREEN_HEIGHT)
        self.buttons = bytearray(KEY_COUNT)
        self.dt = 0
        self.st = 0
        self.rom_path: str | os.PathLike | None = None

    def mem_read(self, addr: int) -> int:
        """Read one byte; the address wraps around the 4 KiB space."""
        return self.memory[addr & MEMORY_MASK]

    def mem_write(self, addr: int, val: int) -> None:
        """Write one byte; the address wraps around the 4 KiB space."""
        self.memory[addr & MEMORY_MASK] = val & 0xFF

    def register_read(self, reg: int) -> int:
        """Read a key status (0x0-0xF), the delay timer or the sound timer."""
        reg &= 0xFF
        if reg < REG_DT:
            return self.buttons[reg]
        if reg == REG_DT:
            return self.dt
        if reg == REG_ST:
            return self.st
        return 0

    def register_write(self, reg: int, val: int) -> None:
        """Write the delay or sound timer; other registers are read-only."""
        reg &= 0xFF
        if reg == REG_DT:
            self.dt = val & 0xFF
        elif reg == REG_ST:
            self.st = val & 0xFF

    def clear_frame(self) -> None:
        self.framebuffer = [0] * (SCREEN_WIDTH * SCREEN_HEIGHT)

    def mem_clear(self) -> None:
        self.memory = bytearray(MEMORY_SIZE)

    def draw_sprite(self, addr: int, x: int, y: int, height: int) -> int:
        """XOR a sprite onto the screen, clipping at the edges.

        Returns 1 if any lit pixel was switched off, otherwise 0.
        """
        x &= 0x3F
        y &= 0x1F
        height &= 0xFF
        if height + y > SCREEN_HEIGHT:
            height = SCREEN_HEIGHT - y

        collision = 0
        columns = min(8, SCREEN_WIDTH - x)
        for row in range(height):
            bits = self.mem_read(addr + row)
            base = (y + row) * SCREEN_WIDTH + x
            for col in range(columns):
                if bits & (0x80 >> col):
                    index = base + col
                    self.framebuffer[index] ^= PIXEL_SET
                    if not self.framebuffer[index]:
                        collision = 1
        return collision

    def load_rom(self, path: str | os.PathLike) -> None:
        """Load a ROM at 0x200, put the font at 0 and clear keys and screen."""
        self.mem_clear()
        try:
            data = Path(path).read_bytes()
        except OSError as exc:
            raise RomError(f"Could not open ROM: {path}") from exc

        if len(data) > MEMORY_SIZE - PROGRAM_START:
            raise RomError("ROM size too large")

        self.memory[PROGRAM_START:PROGRAM_START + len(data)] = data
        self.memory[: len(FONT)] = FONT
        self.buttons[:] = bytes(KEY_COUNT)
        self.clear_frame()

        if self.rom_path is None:
            self.rom_path = path

    def mem_reset(self) -> None:
        """Clear memory, reload the first ROM loaded and stop both timers."""
        self.mem_clear()
        if self.rom_path is not None:
            self.load_rom(self.rom_path)
        self.dt = 0
        self.st = 0

    def set_button(self, key: int, pressed: bool) -> None:
        """Record the state of one keypad key (0x0-0xF)."""
        self.buttons[key] = 1 if pressed else 0

    def tick_timers(self) -> None:
        """Count both timers down by one, stopping at zero."""
        if self.dt:
            self.dt -= 1
        if self.st:
            self.st -= 1