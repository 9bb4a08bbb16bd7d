"""clssaver: output and input layer for a class file decompiler."""

__version__ = "0.1.0"
