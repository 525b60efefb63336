"""notevault - an encrypted single-file note vault."""

__version__ = "0.1.0"
