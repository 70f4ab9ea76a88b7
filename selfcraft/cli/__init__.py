"""Command-line interface for selfcraft."""
