"""Modview - module page resolution for a versioned package registry."""

__version__ = "0.1.0"
