[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "chip8emu"
version = "0.1.0"
description = "A CHIP-8 emulator with a pygame front end"
requires-python = ">=3.10"
keywords = ["chip8", "chip-8", "emulator", "interpreter", "pygame"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
    "Topic :: System :: Emulators",
]
dependencies = [
    "pygame",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
chip8emu = "chip8emu.app:main"

[tool.hatch.build.targets.wheel]
packages = ["chip8emu"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
