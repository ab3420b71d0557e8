"""Re-encode the largest eligible videos in a library to a target codec."""

__version__ = "0.1.0"
