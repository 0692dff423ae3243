"""Command-line entry points for the wedding budget service."""
