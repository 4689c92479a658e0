"""Command-line helpers shared by the console entry points."""
