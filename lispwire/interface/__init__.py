"""
High-level session interface.

This module contains the interface layer:
- LispSession (serialized evaluation over a Wire that is rebuilt after failures)
"""

from .session import LispSession

__all__ = [
    "LispSession",
]
