"""Operating-system emulator library: configuration, processes, CPU scheduling and flat memory allocation."""

__version__ = "0.1.0"