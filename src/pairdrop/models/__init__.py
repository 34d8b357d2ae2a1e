# src/pairdrop/models/__init__.py
"""Persisted record models for the PairDrop relay."""

from .connection import ConnectionRecord

__all__ = ["ConnectionRecord"]
