"""
Vector service.

Keeps a vector index synchronized with an authoritative document store and
serves similarity queries over it.
"""

__version__ = "1.0.0"
