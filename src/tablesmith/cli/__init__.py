"""Command-line interface for Tablesmith."""
