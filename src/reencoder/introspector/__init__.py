"""Codec and framerate probing."""

from reencoder.introspector.ffprobe import FFprobeProber
from reencoder.introspector.interface import VideoProber

__all__ = ["FFprobeProber", "VideoProber"]
