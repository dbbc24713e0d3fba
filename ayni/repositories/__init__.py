"""
Persistence adapters.

Two interchangeable strategies implement the same Repository protocol: a
SQLAlchemy-backed one and a flat-file JSON one. Services depend on the
protocol only; the concrete class is picked once in `build_repository`.
"""

from .base import COLLECTIONS, Repository, build_repository

__all__ = ["COLLECTIONS", "Repository", "build_repository"]
