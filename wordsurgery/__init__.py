"""Word Surgery: letter placement puzzle core."""

__version__ = "0.1.0"
