"""Feedback sync engine: mirrors feedback items onto external trackers."""

__version__ = "0.1.0"
