"""Command-line interface for stash."""
