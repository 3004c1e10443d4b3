"""
Database Package for the Pitchside backend.

This package handles database-related definitions including:
- The `predictions` table model (SQLAlchemy ORM), used to bootstrap the schema
- The Supabase client factory used for runtime reads and writes
"""
