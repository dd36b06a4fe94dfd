"""Command line interface for the feedback sync engine."""
