"""SQLAlchemy-backed repositories."""

from __future__ import annotations

from .repository import BaseRepository, terminal

__all__ = ["BaseRepository", "terminal"]
