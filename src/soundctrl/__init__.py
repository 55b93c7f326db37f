"""SoundCTRL - keeps a control surface in sync with a SoundByte sound server."""

__version__ = "0.1.0"
