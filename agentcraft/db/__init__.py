"""Database layer: declarative base, engine, ORM models and repositories."""
