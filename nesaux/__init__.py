"""NES emulation helpers: VRC6 expansion audio, NTSC video filtering, Game Genie cheats and byte utilities."""

__version__ = "0.1.0"