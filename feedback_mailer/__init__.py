"""Feedback form → email relay service."""

__version__ = "0.1.0"
