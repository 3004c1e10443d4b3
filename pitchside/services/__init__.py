"""
Services Package for the Pitchside backend.

This package holds the business logic and external service integrations, including:
- Team name normalization and validation
- The Supabase-backed prediction store
- Job dispatch, AI generation and status sync
- TheSportsDB client and the live scores feed
"""
