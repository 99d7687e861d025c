# src/hottakes/db/__init__.py
"""Database configuration and the relational data service."""

from .session import Base, create_engine_for, create_tables, drop_tables

__all__ = ["Base", "create_engine_for", "create_tables", "drop_tables"]
