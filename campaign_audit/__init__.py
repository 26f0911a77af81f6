"""Cost-efficiency audit of digital advertising campaigns."""

__version__ = "0.1.0"
