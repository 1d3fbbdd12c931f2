"""raidctl — composition assignment engine for community raid plans."""

__version__ = "0.4.0"
