"""testbridge: map Swift package source files to their unit tests and back."""

__version__ = "0.1.0"
