"""Acure Scan command-line client and edge proxy."""

__version__ = "0.1.0"
