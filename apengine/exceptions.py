"""
Exception types raised by the clustering engine.
"""

from __future__ import annotations


__all__ = ["ConfigurationError"]


class ConfigurationError(ValueError):
    """
    Invalid parameters or malformed input detected before any iteration runs.

    Subclasses ``ValueError`` so callers that already guard numeric code with
    ``except ValueError`` keep working.
    """
