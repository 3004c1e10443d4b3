"""
@file: base_model.py
@description:
Defines the abstract base class interface for match prediction models.
The generation worker only depends on this contract, so the LLM provider
can be swapped (or faked in tests) without touching the job lifecycle.

@dependencies:
- abc: For abstract base class functionality
- pydantic: For data validation

@notes:
- predict() returns a validated PredictionResultData or raises GenerationError
- Models handle their own prompt construction and output parsing
"""

from abc import ABC, abstractmethod

from pydantic import BaseModel, Field

from pitchside.schemas.predictions import MatchCategory, PredictionResultData


class MatchInput(BaseModel):
    """Schema for the fixture a prediction is requested for."""
    team_a: str = Field(..., description="Canonical name of the first team")
    team_b: str = Field(..., description="Canonical name of the second team")
    category: MatchCategory = Field(MatchCategory.MEN, description="'men' or 'women'")


class BasePredictionModel(ABC):
    """
    Abstract base class that defines the interface for all prediction models.
    """

    @property
    @abstractmethod
    def model_id(self) -> str:
        """
        Returns an identifier for the underlying model, used in logs.
        """
        pass

    @abstractmethod
    async def predict(self, match: MatchInput) -> PredictionResultData:
        """
        Generate a structured prediction for a fixture.

        Args:
            match: The two teams and the match category.

        Returns:
            PredictionResultData with probabilities, analysis and best bets.

        Raises:
            GenerationError: If the model output is empty, blocked or malformed
            ServiceError: If the provider cannot be reached
        """
        pass

    async def aclose(self) -> None:
        """
        Release provider resources. Called once the model is no longer needed.
        """
        pass
