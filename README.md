# chip8emu

A CHIP-8 interpreter. It loads a ROM image into the 4 KiB machine memory at
address `0x200` and the built-in hex font at address `0`. It runs twelve
instructions per frame on a 64×32 monochrome display drawn ten times larger in
a window titled "CHIP-8". It counts the delay and sound timers down once per
frame and plays a 400 Hz sine-wave beep while the sound timer is non-zero.

## Installation

```
pip install .
```

This installs `pygame`, which draws the window and plays the sound.

## Running a ROM

```
chip8emu [options] romfile
```

The last argument is the ROM file; every argument before it is an option:

- `-k` — use the DREAM 6800 / ETI-660 keymap instead of the COSMAC VIP one
- `-m` — mute sound

Unknown options are reported on standard error and ignored.

Exit status:

- `1` when no ROM file is given (the usage text is printed), when the ROM
  cannot be opened, when it is larger than the 3584 bytes above `0x200`, or
  when the video mode cannot be set up;
- `-1` when sound is not muted and the audio device cannot be set up;
- `0` when the window is closed.

## Keys

The sixteen keypad keys map onto the left side of the keyboard:

```
1 2 3 4
Q W E R
A S D F
Z X C V
```

With the default COSMAC VIP keymap these are the keypad's

```
1 2 3 C
4 5 6 D
7 8 9 E
A 0 B F
```

and with `-k` they are `0`–`F` in reading order.

Escape resets the CPU: the program counter goes back to `0x200`, and `I`, the
stack pointer, `V0`–`VF` and both timers are cleared. Memory and the screen
are left as they are. Holding Escape down resets only once. Closing the window
quits.

## Using the library

The pieces can be used without the window:

```python
import random

from chip8emu.machine import Machine
from chip8emu.cpu import Cpu
from chip8emu.app import run_frame

machine = Machine()
machine.load_rom("game.ch8")       # raises RomError if it cannot be loaded
cpu = Cpu(machine, random.Random(1))
cpu.init()
cpu.reset()

run_frame(machine, cpu)            # 12 instructions, then one timer tick
```

- `chip8emu.machine.Machine` holds the memory, the framebuffer, the keypad
  state (`set_button`) and the two timers (`tick_timers`).
  `Machine.draw_sprite` XORs a sprite onto the framebuffer, clipping at the
  screen edges, and returns 1 if any lit pixel was turned off. `mem_reset`
  clears memory, reloads the first ROM loaded and stops both timers.
- `chip8emu.cpu.Cpu` decodes and executes the instruction set. The random
  generator is optional; without one a fresh `random.Random` is used for the
  `CXNN` opcode. `init` also copies the font to `0x050`, where `FX29` points.
  Stack overflow, stack underflow and sprite reads past `0xFFF` are logged
  through the `chip8emu.cpu` logger and the instruction is skipped.
- `chip8emu.audio.BeepGenerator` produces signed 16-bit samples of the beep
  (`fill` for a list of ints, `fill_bytes` for a native-endian buffer).
- `chip8emu.app` has `parse_args`, the `KeyHandler` that maps keyboard key
  names to keypad keys and the reset command, `run_frame`, and
  `scale_framebuffer`, which enlarges the framebuffer into opaque ARGB pixels.

## What it does not do

There is no debugger, save state, speed control or configurable key layout;
the interpreter runs at a fixed twelve instructions per frame with a 15 ms
pause between frames.

## Tests

```
pip install .[test]
pytest
```