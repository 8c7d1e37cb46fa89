"""Command line interface for Chrono Git."""
