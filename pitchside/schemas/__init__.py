"""
Schemas Package for the Pitchside backend.

This package contains Pydantic models used for:
- Request validation
- Response serialization
- The structured prediction payload produced by the LLM
"""
