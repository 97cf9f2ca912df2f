"""Track 3D printers, filament spools and print jobs through a command-driven state machine."""

__version__ = "0.1.0"

__all__ = ["__version__"]