"""
LLM Package for the Pitchside backend.

This package handles the Large Language Model integration used to generate
football match predictions.

The package provides:
- Base prediction model interface for standardization
- OpenAI implementation with the analyst prompt and JSON schema
- Factory function for model creation
"""

# Export base model classes
from .base_model import BasePredictionModel, MatchInput

# Export OpenAI model implementation
from .prediction_model import (
    OpenAIPredictionModel,
    create_prediction_model,
)

# Define package exports
__all__ = [
    # Base interface
    "BasePredictionModel",
    "MatchInput",

    # Implementation
    "OpenAIPredictionModel",
    "create_prediction_model",
]
