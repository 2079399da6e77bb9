"""Command line interface for utcode."""
