"""Anonymous encrypted incident reporting backend."""

__version__ = "0.3.0"
