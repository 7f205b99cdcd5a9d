"""A block-based file system kept in a single disk image, with a command shell."""

__version__ = "0.1.0"