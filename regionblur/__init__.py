"""Region-selective progressive blur editor."""

__version__ = "0.1.0"
