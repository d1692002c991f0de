"""BeautyBook booking core: slot availability, race-safe booking and booking lifecycle."""

__version__ = "0.1.0"
