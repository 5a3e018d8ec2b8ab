import pytest

from chip8emu.machine import (
    FONT,
    MEMORY_SIZE,
    PIXEL_SET,
    PROGRAM_START,
    REG_DT,
    REG_ST,
    SCREEN_WIDTH,
    Machine,
    RomError,
)


@pytest.fixture
def rom(tmp_path):
    path = tmp_path / "game.ch8"
    path.write_bytes(b"\x12\x34\xab\xcd")
    return path


def test_memory_round_trip_and_wrap():
    machine = Machine()
    machine.mem_write(0x300, 0x42)
    assert machine.mem_read(0x300) == 0x42
    machine.mem_write(MEMORY_SIZE + 5, 7)
    assert machine.mem_read(5) == 7


def test_timer_registers_round_trip():
    machine = Machine()
    machine.register_write(REG_DT, 60)
    machine.register_write(REG_ST, 30)
    assert machine.register_read(REG_DT) == 60
    assert machine.register_read(REG_ST) == 30


def test_key_registers_are_read_only():
    machine = Machine()
    machine.register_write(3, 9)
    assert machine.register_read(3) == 0
    machine.set_button(3, True)
    assert machine.register_read(3) == 1


def test_unknown_register_reads_zero():
    machine = Machine()
    machine.register_write(REG_DT, 5)
    assert machine.register_read(REG_ST + 1) == 0


def test_draw_sprite_and_collision():
    machine = Machine()
    machine.mem_write(0x300, 0xFF)
    assert machine.draw_sprite(0x300, 0, 0, 1) == 0
    assert machine.framebuffer[:8] == [PIXEL_SET] * 8
    assert machine.framebuffer[8] == 0
    assert machine.draw_sprite(0x300, 0, 0, 1) == 1
    assert not any(machine.framebuffer)


def test_draw_sprite_coordinates_wrap():
    machine = Machine()
    machine.mem_write(0x300, 0x80)
    machine.draw_sprite(0x300, SCREEN_WIDTH + 6, 32 + 1, 1)
    assert machine.framebuffer[SCREEN_WIDTH + 6] == PIXEL_SET
    assert sum(1 for px in machine.framebuffer if px) == 1


def test_draw_sprite_clips_right_edge():
    machine = Machine()
    machine.mem_write(0x300, 0xFF)
    machine.draw_sprite(0x300, 60, 0, 1)
    assert sum(1 for px in machine.framebuffer if px) == 4


def test_draw_sprite_clips_bottom_edge():
    machine = Machine()
    for offset in range(5):
        machine.mem_write(0x300 + offset, 0x80)
    machine.draw_sprite(0x300, 0, 30, 5)
    lit = [i for i, px in enumerate(machine.framebuffer) if px]
    assert lit == [30 * SCREEN_WIDTH, 31 * SCREEN_WIDTH]


def test_clear_frame():
    machine = Machine()
    machine.mem_write(0, 0xF0)
    machine.draw_sprite(0, 10, 10, 1)
    assert sum(1 for px in machine.framebuffer if px) == 4
    machine.clear_frame()
    assert machine.framebuffer == [0] * (SCREEN_WIDTH * 32)


def test_load_rom_places_program_and_font(rom):
    machine = Machine()
    machine.set_button(2, True)
    machine.load_rom(rom)
    assert bytes(machine.memory[PROGRAM_START:PROGRAM_START + 4]) == rom.read_bytes()
    assert bytes(machine.memory[:len(FONT)]) == FONT
    assert not any(machine.buttons)
    assert machine.rom_path == rom


def test_load_rom_missing_file(tmp_path):
    machine = Machine()
    with pytest.raises(RomError):
        machine.load_rom(tmp_path / "missing.ch8")


def test_load_rom_too_large(tmp_path):
    path = tmp_path / "big.ch8"
    path.write_bytes(bytes(MEMORY_SIZE - PROGRAM_START + 1))
    with pytest.raises(RomError):
        Machine().load_rom(path)


def test_load_rom_largest_allowed(tmp_path):
    path = tmp_path / "full.ch8"
    path.write_bytes(b"\x01" * (MEMORY_SIZE - PROGRAM_START))
    machine = Machine()
    machine.load_rom(path)
    assert len(machine.memory) == MEMORY_SIZE
    assert machine.mem_read(MEMORY_SIZE - 1) == 1


def test_mem_reset_reloads_first_rom(rom, tmp_path):
    other = tmp_path / "other.ch8"
    other.write_bytes(b"\x00\x00")
    machine = Machine()
    machine.load_rom(rom)
    machine.load_rom(other)
    machine.mem_write(0x500, 0x99)
    machine.register_write(REG_DT, 10)
    machine.register_write(REG_ST, 10)
    machine.mem_reset()
    assert bytes(machine.memory[PROGRAM_START:PROGRAM_START + 4]) == rom.read_bytes()
    assert machine.mem_read(0x500) == 0
    assert machine.dt == 0
    assert machine.st == 0


def test_mem_reset_without_rom_clears_memory():
    machine = Machine()
    machine.mem_write(0x10, 0x77)
    assert machine.mem_read(0x10) == 0x77
    machine.mem_reset()
    assert bytes(machine.memory) == bytes(MEMORY_SIZE)


def test_tick_timers_stops_at_zero():
    machine = Machine()
    machine.register_write(REG_DT, 2)
    machine.register_write(REG_ST, 1)
    machine.tick_timers()
    assert (machine.dt, machine.st) == (1, 0)
    machine.tick_timers()
    machine.tick_timers()
    assert (machine.dt, machine.st) == (0, 0)