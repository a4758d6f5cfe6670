"""Lumina Stage: blogging and social API."""

__version__ = "0.1.0"
