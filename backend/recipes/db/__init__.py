"""Database Primitives — declarative Base and session factory."""
