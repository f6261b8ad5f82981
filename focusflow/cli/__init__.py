"""Command-line front end for FocusFlow."""
