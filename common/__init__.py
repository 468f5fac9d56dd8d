"""Shared helpers: JSON logging, data types, time utilities."""
