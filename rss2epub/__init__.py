"""Compile RSS feeds into an EPUB book and deliver it by email."""

__version__ = "1.0.0"
