from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Literal, Optional


SentimentLabel = Literal[
    "very_positive", "positive", "neutral", "negative", "very_negative", "mixed"
]
AnalysisMethod = Literal["local", "hybrid", "llm"]


class CamelModel(BaseModel):
    """Serializes as camelCase on the wire, accepts either spelling on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CulturalContext(CamelModel):
    ethnicity: Optional[str] = None
    is_first_gen: bool = False
    collectivist_orientation: bool = False
    profession: Optional[str] = None


class EmotionBreakdown(CamelModel):
    model_config = ConfigDict(frozen=True)

    joy: float = 0.0
    pride: float = 0.0
    hope: float = 0.0
    gratitude: float = 0.0
    frustration: float = 0.0
    anxiety: float = 0.0
    sadness: float = 0.0
    determination: float = 0.0


class ResilienceIndicators(CamelModel):
    model_config = ConfigDict(frozen=True)

    detected: bool
    score: float
    indicators: List[str]


class SentimentResult(CamelModel):
    model_config = ConfigDict(frozen=True)

    score: float  # -1 to 1
    comparative: float
    label: SentimentLabel
    confidence: float

    emotions: EmotionBreakdown
    resilience: ResilienceIndicators

    positive_words: List[str]
    negative_words: List[str]

    cultural_notes: Optional[str] = None
    analysis_method: AnalysisMethod = "local"


class SentimentRequest(CamelModel):
    text: Optional[str] = None
    cultural_context: Optional[CulturalContext] = None
    use_deep_analysis: bool = False


class SentimentResponse(CamelModel):
    success: bool
    result: Optional[SentimentResult] = None
    error: Optional[str] = None


class PolarityScore(BaseModel):
    """Raw output of the lexicon scorer, before labelling."""

    score: float
    comparative: float
    tokens: List[str] = Field(default_factory=list)
    positive: List[str] = Field(default_factory=list)
    negative: List[str] = Field(default_factory=list)
