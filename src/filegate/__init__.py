"""FileGate - HTTP file storage proxy."""

__version__ = "0.1.0"
