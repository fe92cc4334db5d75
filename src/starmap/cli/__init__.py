"""Command-line interface for starmap."""
