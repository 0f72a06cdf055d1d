"""Command-line entry points for match collection."""
