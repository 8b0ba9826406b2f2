[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nesaux"
version = "0.1.0"
description = "NES emulator support pieces: VRC6 expansion audio, NTSC video filter, Game Genie codes, byte-order helpers and an in-memory writer"
requires-python = ">=3.10"
dependencies = []
keywords = ["nes", "emulator", "vrc6", "ntsc", "game-genie", "cheats", "endian"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: System :: Emulators",
    "Topic :: Multimedia :: Sound/Audio :: Sound Synthesis",
    "Topic :: Multimedia :: Graphics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["nesaux"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
