"""codelab_py - CLI workspace for the learning platform."""

__version__ = "1.0.0"
