"""Command-line front end: options, keyboard handling and the display loop."""

from __future__ import annotations

import sys
from array import array
from dataclasses import dataclass, field

from chip8emu.audio import BeepGenerator
from chip8emu.cpu import Cpu
from chip8emu.machine import SCREEN_HEIGHT, SCREEN_WIDTH, Machine, RomError

INSTRUCTIONS_PER_FRAME = 12
FRAME_DELAY_MS = 15
SCALE = 10
OPAQUE = 0xFF000000
WINDOW_TITLE = "CHIP-8"

USAGE = (
    "Usage: chip8emu [options] romfilename\n"
    "Options:\n"
    "  -k    - Use alternate keymap\n"
    "  -m    - Mute sounds"
)

# Traditional COSMAC VIP keymap.
KEYMAP_COSMAC = (
    0x01, 0x02, 0x03, 0x0C,
    0x04, 0x05, 0x06, 0x0D,
    0x07, 0x08, 0x09, 0x0E,
    0x0A, 0x00, 0x0B, 0x0F,
)

# DREAM 6800/ETI-660 keymap.
KEYMAP_DREAM = tuple(range(16))

# Keyboard keys in keypad order, as named by the keyboard layer.
KEY_LAYOUT = (
    "1", "2", "3", "4",
    "q", "w", "e", "r",
    "a", "s", "d", "f",
    "z", "x", "c", "v",
)
RESET_KEY = "escape"

# Four whole periods of the beep, so the looped buffer joins without a click.
_BEEP_LOOP_SAMPLES = 441


@dataclass(frozen=True)
class Options:
    """Settings chosen on the command line."""

    rom: str
    keymap: tuple[int, ...] = field(default=KEYMAP_COSMAC)
    mute: bool = False


def parse_args(argv: list[str] | None) -> Options:
    """Read ``[options] romfilename``; raise ValueError when no ROM is named."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        raise ValueError(USAGE)

    keymap = KEYMAP_COSMAC
    mute = False
    for option in args[:-1]:
        if option == "-k":
            print("Using alternate keymap")
            keymap = KEYMAP_DREAM
        elif option == "-m":
            print("Muting sound")
            mute = True
        else:
            print(f"Unknown option {option}, ignoring", file=sys.stderr)
    return Options(rom=args[-1], keymap=keymap, mute=mute)


class KeyHandler:
    """Turns keyboard presses into keypad states and the reset command."""

    def __init__(self, machine: Machine, cpu: Cpu, keymap=KEYMAP_COSMAC) -> None:
        self.machine = machine
        self.cpu = cpu
        self.keymap = tuple(keymap)
        self.in_reset = False
        self._keys = {name: index for index, name in enumerate(KEY_LAYOUT)}

    def handle(self, key: str, pressed: bool) -> bool:
        """Apply one key event; return whether the key means anything here."""
        if key == RESET_KEY:
            if pressed and not self.in_reset:
                self.cpu.reset()
                self.in_reset = True
            elif not pressed:
                self.in_reset = False
            return True

        index = self._keys.get(key)
        if index is None:
            return False
        self.machine.set_button(self.keymap[index], pressed)
        return True


def run_frame(machine: Machine, cpu: Cpu) -> None:
    """Execute one frame's worth of instructions, then tick the timers."""
    for _ in range(INSTRUCTIONS_PER_FRAME):
        cpu.execute_instruction()
    machine.tick_timers()


def scale_framebuffer(framebuffer, scale: int) -> list[int]:
    """Enlarge the 64x32 frame buffer by ``scale`` into opaque ARGB pixels."""
    if scale < 1:
        raise ValueError("scale must be at least 1")
    pixels: list[int] = []
    for row_start in range(0, SCREEN_WIDTH * SCREEN_HEIGHT, SCREEN_WIDTH):
        row = framebuffer[row_start:row_start + SCREEN_WIDTH]
        scaled_row = [pixel | OPAQUE for pixel in row for _ in range(scale)]
        for _ in range(scale):
            pixels.extend(scaled_row)
    return pixels


def _argb_bytes(pixels: list[int]) -> bytes:
    data = array("I", pixels)
    if sys.byteorder == "little":
        data.byteswap()
    return data.tobytes()


def main(argv: list[str] | None = None) -> int:
    """Run the emulator window until it is closed."""
    try:
        options = parse_args(argv)
    except ValueError as exc:
        print(exc)
        return 1

    machine = Machine()
    try:
        machine.load_rom(options.rom)
    except RomError as exc:
        print(exc, file=sys.stderr)
        return 1

    cpu = Cpu(machine)
    cpu.init()
    cpu.reset()

    import pygame

    pygame.init()
    size = (SCREEN_WIDTH * SCALE, SCREEN_HEIGHT * SCALE)
    try:
        screen = pygame.display.set_mode(size)
    except pygame.error:
        print("Failed to set up video mode, exiting", file=sys.stderr)
        pygame.quit()
        return 1
    pygame.display.set_caption(WINDOW_TITLE)

    beep = None
    if not options.mute:
        try:
            pygame.mixer.init(frequency=44100, size=-16, channels=1, buffer=2048)
            samples = BeepGenerator().fill_bytes(_BEEP_LOOP_SAMPLES * 2 * 10, True)
            beep = pygame.mixer.Sound(buffer=samples)
        except pygame.error as exc:
            print(f"Failed to set up audio: {exc}", file=sys.stderr)
            pygame.quit()
            return -1

    handler = KeyHandler(machine, cpu, options.keymap)
    beeping = False
    running = True
    try:
        while running:
            run_frame(machine, cpu)

            if beep is not None:
                if machine.st and not beeping:
                    beep.play(loops=-1)
                    beeping = True
                elif not machine.st and beeping:
                    beep.stop()
                    beeping = False

            image = pygame.image.frombuffer(
                _argb_bytes(scale_framebuffer(machine.framebuffer, SCALE)), size, "ARGB"
            )
            screen.blit(image, (0, 0))
            pygame.display.flip()
            pygame.time.delay(FRAME_DELAY_MS)

            for event in pygame.event.get():
                if event.type == pygame.KEYDOWN:
                    handler.handle(pygame.key.name(event.key), True)
                elif event.type == pygame.KEYUP:
                    handler.handle(pygame.key.name(event.key), False)
                elif event.type == pygame.QUIT:
                    print("Got quit signal, exiting.")
                    running = False
                    break
    finally:
        cpu.shutdown()
        if beep is not None:
            pygame.mixer.quit()
        pygame.quit()
    return 0


if __name__ == "__main__":
    sys.exit(main())