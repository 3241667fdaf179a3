"""Command-line interface for monotopo."""
