"""Command-line interface for contentquery."""
