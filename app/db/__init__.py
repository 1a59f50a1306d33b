"""
Database init - Exports for models
"""

from .base import Base, utcnow

__all__ = ["Base", "utcnow"]
