"""Uber-style blog theme: search index builder and headless theme UI."""

__version__ = "0.1.0"
