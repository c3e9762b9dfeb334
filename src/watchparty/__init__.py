"""Watch party relay: shared rooms with synchronized video playback."""

__version__ = "0.1.0"
