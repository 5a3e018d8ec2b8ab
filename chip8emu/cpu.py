"""The CHIP-8 interpreter: registers, stack and instruction decoding."""

from __future__ import annotations

import logging
import random

from chip8emu.machine import FONT, PROGRAM_START, REG_DT, REG_ST, Machine

logger = logging.getLogger(__name__)

FONT_START = 0x050
STACK_DEPTH = 16
KEY_COUNT = 16


class Cpu:
    """Fetches, decodes and executes instructions against a :class:`Machine`."""

    def __init__(self, machine: Machine, rng: random.Random | None = None) -> None:
        self.machine = machine
        self.rng = rng if rng is not None else random.Random()
        self.pc = PROGRAM_START
        self.sp = 0
        self.opcode = 0
        self.index = 0
        # Slot 0 is never used: a call increments sp before storing.
        self.stack = [0] * (STACK_DEPTH + 1)
        self.registers = bytearray(16)

    def init(self) -> None:
        """Reset memory, clear the screen and copy the font to 0x050."""
        self.machine.mem_reset()
        self.pc = PROGRAM_START
        self.index = 0
        self.sp = 0
        self.machine.clear_frame()
        self.registers = bytearray(16)
        self.machine.register_write(REG_DT, 0)
        self.machine.register_write(REG_ST, 0)
        for offset in range(len(FONT)):
            self.machine.mem_write(FONT_START + offset, self.machine.mem_read(offset))

    def reset(self) -> None:
        """Return pc to 0x200 and clear I, the stack pointer, Vx and the timers."""
        self.pc = PROGRAM_START
        self.index = 0
        self.sp = 0
        self.registers = bytearray(16)
        self.machine.register_write(REG_DT, 0)
        self.machine.register_write(REG_ST, 0)

    def shutdown(self) -> None:
        """Nothing needs releasing."""

    def _skip(self) -> None:
        self.pc = (self.pc + 2) & 0xFFFF

    def execute_instruction(self) -> None:
        """Run the instruction at pc."""
        machine = self.machine
        opcode = (machine.mem_read(self.pc) << 8) | machine.mem_read(self.pc + 1)
        self.opcode = opcode
        self.pc = (self.pc + 2) & 0xFFFF

        x = (opcode >> 8) & 0xF
        y = (opcode >> 4) & 0xF
        n = opcode & 0xF
        kk = opcode & 0xFF
        nnn = opcode & 0xFFF
        v = self.registers

        match opcode & 0xF000:
            case 0x0000:
                self._system(opcode)
            case 0x1000:
                self.pc = nnn
            case 0x2000:
                if self.sp >= STACK_DEPTH:
                    logger.error("Stack overflow at %04X", opcode)
                else:
                    self.sp += 1
                    self.stack[self.sp] = self.pc
                    self.pc = nnn
            case 0x3000:
                if v[x] == kk:
                    self._skip()
            case 0x4000:
                if v[x] != kk:
                    self._skip()
            case 0x5000:
                if v[x] == v[y]:
                    self._skip()
            case 0x6000:
                v[x] = kk
            case 0x7000:
                v[x] = (v[x] + kk) & 0xFF
            case 0x8000:
                self._arithmetic(x, y, n)
            case 0x9000:
                if v[x] != v[y]:
                    self._skip()
            case 0xA000:
                self.index = nnn
            case 0xB000:
                self.pc = (v[0] + nnn) & 0xFFFF
            case 0xC000:
                v[x] = self.rng.randrange(256) & kk
            case 0xD000:
                self._draw(x, y, n)
            case 0xE000:
                self._keys(x, kk)
            case 0xF000:
                self._misc(x, kk)

    def _system(self, opcode: int) -> None:
        if opcode == 0x00E0:
            self.machine.clear_frame()
        elif opcode == 0x00EE:
            if self.sp == 0:
                logger.error("Stack underflow")
            else:
                self.pc = self.stack[self.sp]
                self.sp -= 1
        else:
            logger.info("SYS call ignored: %04X", opcode)

    def _arithmetic(self, x: int, y: int, n: int) -> None:
        v = self.registers
        match n:
            case 0x0:
                v[x] = v[y]
            case 0x1:
                v[x] |= v[y]
            case 0x2:
                v[x] &= v[y]
            case 0x3:
                v[x] ^= v[y]
            case 0x4:
                total = v[x] + v[y]
                v[0xF] = 1 if total > 0xFF else 0
                v[x] = total & 0xFF
            case 0x5:
                v[0xF] = 1 if v[x] >= v[y] else 0
                v[x] = (v[x] - v[y]) & 0xFF
            case 0x7:
                v[0xF] = 1 if v[y] >= v[x] else 0
                v[x] = (v[y] - v[x]) & 0xFF
            case 0x6:
                v[0xF] = v[x] & 0x1
                v[x] = v[x] >> 1
            case 0xE:
                v[0xF] = (v[x] >> 7) & 0x1
                v[x] = (v[x] << 1) & 0xFF

    def _draw(self, x: int, y: int, height: int) -> None:
        v = self.registers
        addr = self.index
        logger.debug("draw at (%d, %d), height %d, from %X", v[x], v[y], height, addr)
        if addr >= 0x1000:
            logger.error("Invalid memory access in draw sprite, I = %X", addr)
            return
        v[0xF] = self.machine.draw_sprite(addr, v[x], v[y], height)

    def _keys(self, x: int, kk: int) -> None:
        pressed = self.machine.register_read(self.registers[x])
        if kk == 0x9E and pressed:
            self._skip()
        elif kk == 0xA1 and not pressed:
            self._skip()

    def _misc(self, x: int, kk: int) -> None:
        machine = self.machine
        v = self.registers
        match kk:
            case 0x07:
                v[x] = machine.register_read(REG_DT)
            case 0x0A:
                key = next(
                    (k for k in range(KEY_COUNT) if machine.register_read(k)), None
                )
                if key is None:
                    self.pc = (self.pc - 2) & 0xFFFF
                else:
                    v[x] = key
            case 0x15:
                machine.register_write(REG_DT, v[x])
            case 0x18:
                machine.register_write(REG_ST, v[x])
            case 0x1E:
                self.index = (self.index + v[x]) & 0xFFFF
            case 0x29:
                self.index = FONT_START + v[x] * 5
            case 0x33:
                value = v[x]
                machine.mem_write(self.index, value // 100)
                machine.mem_write(self.index + 1, (value // 10) % 10)
                machine.mem_write(self.index + 2, value % 10)
            case 0x55:
                for offset in range(x + 1):
                    machine.mem_write(self.index + offset, v[offset])
            case 0x65:
                for offset in range(x + 1):
                    v[offset] = machine.mem_read(self.index + offset)