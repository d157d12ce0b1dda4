"""The `aurorder` APIs."""

__version__ = "0.1.0"
