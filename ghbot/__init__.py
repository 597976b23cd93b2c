"""GitHub bot that opens pull requests fixing the golint import path."""

__version__ = "0.1.0"
