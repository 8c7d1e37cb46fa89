"""Chrono Git - an in-memory simulator of core Git semantics."""

__version__ = "0.1.0"
