"""
@file: prediction_model.py
@description:
This module implements the match prediction model using direct OpenAI API calls.
It asks the model for a full analyst breakdown of a fixture (probabilities,
form, head-to-head, best bets, player and goal predictions) as a single JSON
object and validates it against PredictionResultData.

Key features:
- Analyst prompt with availability and probability-consistency rules
- Fixed JSON schema embedded in the prompt, JSON response format
- Tolerates markdown code fences around the JSON
- Citation annotations returned by the model are kept as `sources`

@dependencies:
- openai: For the chat completions API.
- pitchside.llm.base_model: For the model interface.
- pitchside.core.logger: For logging.

@notes:
- Requires OPENAI_API_KEY; a missing key raises ConfigurationError.
- No retries: a failed call fails the job.
"""

import json
import re
from datetime import datetime
from typing import Any, Dict, List, Optional

import openai
from pydantic import ValidationError

from pitchside.core.config import Settings, settings as default_settings
from pitchside.core.exceptions import ConfigurationError, GenerationError, ServiceError
from pitchside.core.logger import setup_logger
from pitchside.llm.base_model import BasePredictionModel, MatchInput
from pitchside.schemas.predictions import PredictionResultData

logger = setup_logger("pitchside.llm.prediction_model")

CONTENT_FILTERED_MESSAGE = (
    "[Content Filtered] The analysis was blocked due to safety filters. "
    "Please try a different match."
)
EMPTY_RESPONSE_MESSAGE = "[Invalid Response] The AI returned an empty or malformed response."
UNPARSEABLE_RESPONSE_MESSAGE = "[Invalid Response] The AI returned a response that could not be parsed as JSON."
INVALID_SCHEMA_MESSAGE = "[Invalid Response] The AI response did not match the expected prediction format."

CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")

_PERCENT = {"type": "string", "description": "Percentage string, e.g. \"45%\"."}

PREDICTION_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "prediction": {
            "type": "string",
            "description": "The final match outcome prediction (e.g. \"Manchester City to Win\", \"Draw\", \"Over 2.5 Goals\").",
        },
        "outcome": {
            "type": "string",
            "enum": ["teamA_win", "teamB_win", "draw", "over", "under"],
            "description": "Machine-readable form of `prediction`. teamA is the first team named in the request.",
        },
        "outcomeLine": {
            "type": "number",
            "description": "Goal line for an over/under outcome (e.g. 2.5). Omit for other outcomes.",
        },
        "confidence": {"type": "string", "enum": ["High", "Medium", "Low"]},
        "teamA_winProbability": _PERCENT,
        "teamB_winProbability": _PERCENT,
        "drawProbability": _PERCENT,
        "analysis": {
            "type": "string",
            "description": "A detailed, data-driven analysis of at least 3-4 sentences explaining the prediction.",
        },
        "keyStats": {
            "type": "object",
            "properties": {
                "teamA_form": {"type": "string", "description": "Last five results, e.g. \"WWDLD\"."},
                "teamB_form": {"type": "string", "description": "Last five results, e.g. \"LWWWL\"."},
                "head_to_head": {
                    "type": "object",
                    "properties": {
                        "totalMatches": {"type": "integer"},
                        "teamA_wins": {"type": "integer"},
                        "draws": {"type": "integer"},
                        "teamB_wins": {"type": "integer"},
                        "summary": {"type": "string"},
                    },
                    "required": ["totalMatches", "teamA_wins", "draws", "teamB_wins", "summary"],
                },
            },
            "required": ["teamA_form", "teamB_form", "head_to_head"],
        },
        "bestBets": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "category": {
                        "type": "string",
                        "description": "Market, e.g. \"Match Winner\", \"Total Goals\", \"Both Teams to Score\".",
                    },
                    "value": {"type": "string", "description": "e.g. \"Manchester City\", \"Over 2.5\", \"Yes\"."},
                    "reasoning": {"type": "string"},
                    "confidence": _PERCENT,
                    "overValue": {"type": "string"},
                    "overConfidence": {"type": "string"},
                    "underValue": {"type": "string"},
                    "underConfidence": {"type": "string"},
                },
                "required": ["category", "value", "reasoning", "confidence"],
            },
        },
        "availabilityFactors": {
            "type": "string",
            "description": "Key injuries, suspensions or returns. If none, \"No significant availability issues for either team.\"",
        },
        "venue": {"type": "string", "description": "Stadium and city."},
        "kickoffTime": {"type": "string", "description": "Local kickoff date and time."},
        "referee": {"type": "string", "description": "Appointed referee, or \"To be announced\"."},
        "leagueContext": {
            "type": "object",
            "properties": {
                "leagueName": {"type": "string"},
                "teamA_position": {"type": "string", "description": "Table position or \"N/A\"."},
                "teamB_position": {"type": "string", "description": "Table position or \"N/A\"."},
                "isRivalry": {"type": "boolean"},
                "isDerby": {"type": "boolean"},
                "contextualAnalysis": {"type": "string"},
            },
            "required": ["leagueName", "teamA_position", "teamB_position", "isRivalry", "isDerby", "contextualAnalysis"],
        },
        "playerStats": {
            "type": "array",
            "description": "2-3 key available players from each team.",
            "items": {
                "type": "object",
                "properties": {
                    "playerName": {"type": "string"},
                    "teamName": {"type": "string"},
                    "position": {"type": "string"},
                    "goals": {"type": "integer"},
                    "assists": {"type": "integer"},
                    "yellowCards": {"type": "integer"},
                    "redCards": {"type": "integer"},
                },
                "required": ["playerName", "teamName", "position", "goals", "assists", "yellowCards", "redCards"],
            },
        },
        "goalScorerPredictions": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "playerName": {"type": "string"},
                    "teamName": {"type": "string"},
                    "probability": {"type": "string", "enum": ["High", "Medium", "Low"]},
                    "reasoning": {"type": "string"},
                },
                "required": ["playerName", "teamName", "probability", "reasoning"],
            },
        },
        "goalProbabilities": {
            "type": "object",
            "properties": {"0-1": _PERCENT, "2-3": _PERCENT, "4+": _PERCENT},
            "required": ["0-1", "2-3", "4+"],
        },
        "bttsPrediction": {
            "type": "object",
            "properties": {"yesProbability": _PERCENT, "noProbability": _PERCENT},
            "required": ["yesProbability", "noProbability"],
        },
        "overUnderPrediction": {
            "type": "object",
            "properties": {"over25Probability": _PERCENT, "under25Probability": _PERCENT},
            "required": ["over25Probability", "under25Probability"],
        },
    },
    "required": [
        "prediction", "outcome", "confidence", "teamA_winProbability", "teamB_winProbability",
        "drawProbability", "analysis", "keyStats", "bestBets", "availabilityFactors", "venue",
        "kickoffTime", "referee", "leagueContext", "playerStats", "goalScorerPredictions",
        "goalProbabilities", "bttsPrediction", "overUnderPrediction",
    ],
}

SYSTEM_PROMPT = "You are a world-class football analyst. You answer with a single JSON object."


def build_prompt(match: MatchInput, now: Optional[datetime] = None) -> str:
    """
    Prepare the analyst prompt for a fixture.

    Args:
        match: The two teams and the category.
        now: Reference time for the "current year" rule (defaults to now).

    Returns:
        str: Formatted prompt string.
    """
    year = (now or datetime.now()).year
    category = getattr(match.category, "value", match.category)
    return f"""
Provide a detailed, data-driven analysis for the upcoming {category}'s soccer match between {match.team_a} (teamA) and {match.team_b} (teamB).

CRITICAL INSTRUCTIONS:
1. Current Context: The current year is {year}. All analysis, including match dates and league seasons, must be for the present or near future.
2. Verify Player Transfers & Availability: Use the most recent transfer data and check for confirmed injuries and suspensions. Double-check sensitive player status information.
3. Exclude Unavailable Players: Players confirmed to be unavailable MUST NOT appear in 'playerStats' or 'goalScorerPredictions'.
4. Analyze Absences: Discuss the impact of absences in 'analysis' and 'availabilityFactors'.
5. Ensure Data Consistency: Win/draw probabilities must sum to 100%. BTTS probabilities must sum to 100%. Over/Under 2.5 probabilities must sum to 100%.
6. Outcome Selector: 'outcome' must describe the same result as 'prediction'. Use 'outcomeLine' for over/under outcomes.

Your response MUST be a single, valid JSON object that strictly adheres to this JSON schema, with no other text or markdown:
{json.dumps(PREDICTION_SCHEMA, indent=2)}
"""


def strip_code_fences(text: str) -> str:
    """Remove a surrounding ```json ... ``` fence, if any."""
    return CODE_FENCE.sub("", text.strip()).strip()


def extract_sources(message: Any) -> List[Dict[str, str]]:
    """
    Collect citation URLs from the message annotations.

    Returns an empty list when the model attached no citations.
    """
    sources: List[Dict[str, str]] = []
    for annotation in getattr(message, "annotations", None) or []:
        citation = getattr(annotation, "url_citation", None)
        if citation is None or not getattr(citation, "url", None):
            continue
        sources.append({"uri": citation.url, "title": getattr(citation, "title", "") or ""})
    return sources


class OpenAIPredictionModel(BasePredictionModel):
    """
    Match prediction model backed by the OpenAI chat completions API.

    Attributes:
        model_name (str): The OpenAI model to use.
        temperature (float): Sampling temperature for LLM.
        max_tokens (int): Maximum tokens for response.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model_name: str = "gpt-4o",
        temperature: float = 0.4,
        max_tokens: int = 4000,
        client: Optional[Any] = None,
    ):
        # Only a client created here is closed by aclose()
        self.owns_client = client is None
        if client is None:
            if not api_key:
                raise ConfigurationError("Cannot connect to AI service. OPENAI_API_KEY is not configured.")
            client = openai.AsyncOpenAI(api_key=api_key)
        self.client = client
        self.model_name = model_name
        self.temperature = temperature
        self.max_tokens = max_tokens
        logger.info(f"Initialized OpenAIPredictionModel with model {model_name}")

    @property
    def model_id(self) -> str:
        return self.model_name

    async def aclose(self) -> None:
        if self.owns_client:
            await self.client.close()

    async def predict(self, match: MatchInput) -> PredictionResultData:
        """
        Generate a prediction using the OpenAI API.

        Raises:
            ServiceError: If the API call fails.
            GenerationError: If the response is blocked, empty or malformed.
        """
        logger.info(f"Generating prediction for {match.team_a} vs {match.team_b}")

        try:
            response = await self.client.chat.completions.create(
                model=self.model_name,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_prompt(match)},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                response_format={"type": "json_object"},
            )
        except openai.OpenAIError as e:
            logger.error(f"OpenAI request failed for {match.team_a} vs {match.team_b}: {str(e)}")
            raise ServiceError(f"AI service request failed: {str(e)}") from e

        if not response.choices:
            raise GenerationError(EMPTY_RESPONSE_MESSAGE)
        choice = response.choices[0]
        message = choice.message

        if getattr(message, "refusal", None) or choice.finish_reason == "content_filter":
            logger.warning(f"Prediction for {match.team_a} vs {match.team_b} was blocked")
            raise GenerationError(CONTENT_FILTERED_MESSAGE)

        raw_response = message.content
        if not raw_response or not raw_response.strip():
            raise GenerationError(EMPTY_RESPONSE_MESSAGE)

        data = parse_prediction(raw_response)
        data["sources"] = extract_sources(message)
        data["fromCache"] = False

        try:
            return PredictionResultData.model_validate(data)
        except ValidationError as e:
            logger.error(f"Prediction failed validation: {str(e)}")
            raise GenerationError(INVALID_SCHEMA_MESSAGE) from e


def parse_prediction(raw_response: str) -> Dict[str, Any]:
    """
    Parse the model's text into a JSON object.

    Raises:
        GenerationError: If the text is not a JSON object.
    """
    try:
        data = json.loads(strip_code_fences(raw_response))
    except json.JSONDecodeError as e:
        logger.error(f"Could not parse model output as JSON: {raw_response[:500]}")
        raise GenerationError(UNPARSEABLE_RESPONSE_MESSAGE) from e
    if not isinstance(data, dict):
        raise GenerationError(UNPARSEABLE_RESPONSE_MESSAGE)
    return data


def create_prediction_model(settings: Optional[Settings] = None) -> OpenAIPredictionModel:
    """
    Factory function to create a prediction model from settings.

    Raises:
        ConfigurationError: If OPENAI_API_KEY is missing.
    """
    settings = settings or default_settings
    return OpenAIPredictionModel(
        api_key=settings.OPENAI_API_KEY,
        model_name=settings.OPENAI_MODEL,
        temperature=settings.OPENAI_TEMPERATURE,
        max_tokens=settings.OPENAI_MAX_TOKENS,
    )
