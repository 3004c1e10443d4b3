"""
@file: predictions.py
@description:
Pydantic schemas for request validation and response serialization
of football match predictions.

Schemas:
- PredictionRequest: Body of a prediction request (team names, category, refresh flag)
- PredictionJob: A stored prediction job as exposed by the API
- DispatchResponse: Result of a prediction request, cached or not
- PredictionResultData: The structured payload produced by the LLM
- LiveMatch / LiveScoresResponse: Live score feed entries
- SyncSummary: Result of a status sync run
- TeamPerformanceStats: Resolved prediction record for one team

@notes:
- API field names are camelCase (teamA, resultPayload, createdAt); database
  columns are snake_case and are mapped by the prediction store.
- Payload models allow extra fields so older rows with additional keys still load.

@dependencies:
- pydantic: for data validation and serialization
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from pitchside.services.team_names import validate_team_names


class MatchCategory(str, Enum):
    """Competition category a fixture belongs to."""
    MEN = "men"
    WOMEN = "women"


class JobStatus(str, Enum):
    """Lifecycle state of a prediction job."""
    PROCESSING = "processing"
    PENDING = "pending"
    WON = "won"
    LOST = "lost"
    FAILED = "failed"


CACHEABLE_STATUSES = (JobStatus.PENDING, JobStatus.WON, JobStatus.LOST)
RESOLVED_STATUSES = (JobStatus.WON, JobStatus.LOST)


class PredictionRequest(BaseModel):
    """
    Fields required to request a prediction.
    """
    model_config = ConfigDict(populate_by_name=True)

    team_a: str = Field(..., alias="teamA", description="First team, free text.")
    team_b: str = Field(..., alias="teamB", description="Second team, free text.")
    category: MatchCategory = Field(MatchCategory.MEN, description="'men' or 'women'.")
    force_refresh: bool = Field(
        False, alias="forceRefresh",
        description="Ignore a cached finished prediction and generate a new one."
    )

    @model_validator(mode="after")
    def check_team_names(self) -> "PredictionRequest":
        validate_team_names(self.team_a, self.team_b)
        self.team_a = self.team_a.strip()
        self.team_b = self.team_b.strip()
        return self


class PredictionJob(BaseModel):
    """
    A prediction job row as returned by the API.
    """
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    id: str
    team_a: Optional[str] = Field(None, alias="teamA")
    team_b: Optional[str] = Field(None, alias="teamB")
    category: Optional[MatchCategory] = None
    status: JobStatus
    result_payload: Dict[str, Any] = Field(default_factory=dict, alias="resultPayload")
    tally: int = 1
    created_at: Optional[datetime] = Field(None, alias="createdAt")

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "PredictionJob":
        """Build a job from a `predictions` table row."""
        return cls(
            id=str(row["id"]),
            team_a=row.get("team_a"),
            team_b=row.get("team_b"),
            category=row.get("match_category"),
            status=row["status"],
            result_payload=row.get("prediction_data") or {},
            tally=row.get("tally") or 1,
            created_at=row.get("created_at"),
        )


class DispatchResponse(BaseModel):
    """
    Response of POST /predictions.

    `data` is the full job when `isCached` is true, otherwise only `{jobId}`.
    """
    model_config = ConfigDict(populate_by_name=True)

    is_cached: bool = Field(..., alias="isCached")
    data: Dict[str, Any]


class HeadToHead(BaseModel):
    model_config = ConfigDict(extra="allow")

    totalMatches: int = 0
    teamA_wins: int = 0
    draws: int = 0
    teamB_wins: int = 0
    summary: str = ""


class KeyStats(BaseModel):
    model_config = ConfigDict(extra="allow")

    teamA_form: str = ""
    teamB_form: str = ""
    head_to_head: HeadToHead = Field(default_factory=HeadToHead)


class BestBet(BaseModel):
    model_config = ConfigDict(extra="allow")

    category: str
    value: str
    reasoning: str = ""
    confidence: Optional[str] = None
    overValue: Optional[str] = None
    overConfidence: Optional[str] = None
    underValue: Optional[str] = None
    underConfidence: Optional[str] = None
    betStatus: Optional[Literal["won", "lost"]] = None


class LeagueContext(BaseModel):
    model_config = ConfigDict(extra="allow")

    leagueName: str = ""
    teamA_position: str = ""
    teamB_position: str = ""
    isRivalry: bool = False
    isDerby: bool = False
    contextualAnalysis: str = ""


class PlayerStat(BaseModel):
    model_config = ConfigDict(extra="allow")

    playerName: str
    teamName: str
    position: str = ""
    goals: int = 0
    assists: int = 0
    yellowCards: int = 0
    redCards: int = 0


class GoalScorerPrediction(BaseModel):
    model_config = ConfigDict(extra="allow")

    playerName: str
    teamName: str
    probability: str
    reasoning: str = ""


class GoalProbabilities(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    zero_to_one: str = Field(..., alias="0-1")
    two_to_three: str = Field(..., alias="2-3")
    four_plus: str = Field(..., alias="4+")


class BttsPrediction(BaseModel):
    model_config = ConfigDict(extra="allow")

    yesProbability: str
    noProbability: str


class OverUnderPrediction(BaseModel):
    model_config = ConfigDict(extra="allow")

    over25Probability: str
    under25Probability: str


class Source(BaseModel):
    uri: str
    title: str = ""


class PredictionResultData(BaseModel):
    """
    Structured prediction produced by the LLM.

    Probabilities are percentage strings such as "45%". `outcome` and
    `outcomeLine` identify the predicted result in machine-readable form;
    `prediction` is the human-readable headline.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    prediction: str
    confidence: Literal["High", "Medium", "Low"]
    teamA_winProbability: str
    teamB_winProbability: str
    drawProbability: str
    analysis: str
    keyStats: KeyStats
    bestBets: List[BestBet] = Field(default_factory=list)
    availabilityFactors: str = ""
    venue: str = ""
    kickoffTime: str = ""
    referee: str = ""
    leagueContext: LeagueContext = Field(default_factory=LeagueContext)
    playerStats: List[PlayerStat] = Field(default_factory=list)
    goalScorerPredictions: List[GoalScorerPrediction] = Field(default_factory=list)
    goalProbabilities: GoalProbabilities
    bttsPrediction: BttsPrediction
    overUnderPrediction: OverUnderPrediction
    outcome: Optional[Literal["teamA_win", "teamB_win", "draw", "over", "under"]] = None
    outcomeLine: Optional[float] = None
    sources: List[Source] = Field(default_factory=list)
    fromCache: Optional[bool] = None
    teamA_logo: Optional[str] = None
    teamB_logo: Optional[str] = None

    @field_validator("confidence", mode="before")
    @classmethod
    def normalize_confidence(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().capitalize()
        return v

    def to_payload(self) -> Dict[str, Any]:
        """Serialize for storage, keeping the "0-1"/"2-3"/"4+" keys."""
        return self.model_dump(by_alias=True, exclude_none=True)


class LiveMatch(BaseModel):
    """A single entry of the live scores feed."""
    id: str
    league: str
    teamA: str
    teamB: str
    scoreA: Optional[int] = None
    scoreB: Optional[int] = None
    time: str
    status: Literal["LIVE", "HT", "FT", "Not Started"]


class LiveScoresResponse(BaseModel):
    matches: List[LiveMatch]


class SyncSummary(BaseModel):
    """Outcome of one status sync run."""
    checked: int = 0
    updated: int = 0
    message: str


class SyncResponse(BaseModel):
    message: str


class TeamPerformanceStats(BaseModel):
    """Resolved prediction record for a team."""
    model_config = ConfigDict(populate_by_name=True)

    total: int
    wins: int
    recent_outcomes: List[Literal["won", "lost"]] = Field(
        default_factory=list, alias="recentOutcomes"
    )
