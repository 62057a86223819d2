"""
Local, multi-layer sentiment analysis for journal reflections.

Polarity comes from the VADER lexicon scored AFINN-style (sum of word
valences, normalized by token count). Emotions, resilience language and a
confidence estimate are layered on top, and an optional cultural-context pass
annotates the result.
"""
import json
import logging
import re
from typing import Any, Dict, List, Optional

from vaderSentiment.vaderSentiment import NEGATE, SentimentIntensityAnalyzer

from kintsugi.schemas.sentiment import (
    CulturalContext,
    EmotionBreakdown,
    PolarityScore,
    ResilienceIndicators,
    SentimentLabel,
    SentimentResult,
)
from kintsugi.services.lexicon import (
    EMOTION_WORDS,
    GROWTH_INDICATORS,
    I_RE,
    RESILIENCE_PATTERNS,
    TOKEN_STRIP_RE,
    WE_RE,
)

logger = logging.getLogger(__name__)

# Sentiment analyzer; only its lexicon is used
_vader = SentimentIntensityAnalyzer()
_NEGATORS = frozenset(NEGATE)

COLLECTIVIST_NOTE = (
    "Team-oriented language reflects collectivist values - this is a strength, "
    "not deflection."
)
FIRST_GEN_NOTE = (
    "As a first-generation professional, your achievements are even more remarkable. "
    '"Luck" often minimizes real effort.'
)

LABEL_DISPLAY: Dict[str, str] = {
    "very_positive": "Very Positive",
    "positive": "Positive",
    "neutral": "Neutral",
    "negative": "Challenging",
    "very_negative": "Difficult",
    "mixed": "Mixed Emotions",
}


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def tokenize(text: str) -> List[str]:
    return TOKEN_STRIP_RE.sub(" ", text.lower()).split()


def score_polarity(text: str) -> PolarityScore:
    """Sum lexicon valences over the tokens of `text`, flipping negated words."""
    tokens = tokenize(text)
    total = 0.0
    positive: List[str] = []
    negative: List[str] = []
    for i, token in enumerate(tokens):
        valence = _vader.lexicon.get(token)
        if valence is None:
            continue
        if i > 0 and tokens[i - 1] in _NEGATORS:
            valence = -valence
        total += valence
        if valence > 0:
            positive.append(token)
        elif valence < 0:
            negative.append(token)

    comparative = total / len(tokens) if tokens else 0.0
    return PolarityScore(
        score=total,
        comparative=comparative,
        tokens=tokens,
        positive=positive,
        negative=negative,
    )


def classify_label(score: float, positive: List[str], negative: List[str]) -> SentimentLabel:
    label: SentimentLabel
    if score >= 0.5:
        label = "very_positive"
    elif score >= 0.1:
        label = "positive"
    elif score <= -0.5:
        label = "very_negative"
    elif score <= -0.1:
        label = "negative"
    else:
        label = "neutral"

    # Roughly balanced positive/negative vocabulary wins over the numeric score
    if positive and negative:
        ratio = min(len(positive), len(negative)) / max(len(positive), len(negative))
        if ratio > 0.5:
            label = "mixed"
    return label


def analyze_emotions(text: str) -> EmotionBreakdown:
    lower = text.lower()
    values = {}
    for emotion, words in EMOTION_WORDS.items():
        matches = sum(1 for w in words if w in lower)
        values[emotion] = min(1.0, matches / 3)
    return EmotionBreakdown(**values)


def detect_resilience(text: str) -> ResilienceIndicators:
    indicators: List[str] = []

    for pattern in RESILIENCE_PATTERNS:
        m = pattern.search(text)
        if m:
            indicators.append(m.group(0))

    lower = text.lower()
    for word in GROWTH_INDICATORS:
        if word in lower and word not in indicators:
            indicators.append(word)

    return ResilienceIndicators(
        detected=len(indicators) > 0,
        score=min(1.0, len(indicators) / 5),
        indicators=indicators,
    )


def calculate_confidence(text: str, polarity: PolarityScore) -> float:
    word_count = len(text.split())
    sentiment_word_count = len(polarity.positive) + len(polarity.negative)

    sentiment_ratio = min(1.0, sentiment_word_count / max(5.0, word_count * 0.1))
    # Longer text earns more confidence, saturating at 50 words
    length_factor = min(1.0, word_count / 50)

    return sentiment_ratio * 0.6 + length_factor * 0.4


def analyze_local_sentiment(text: str) -> SentimentResult:
    """
    Analyze text without any network call.

    Never raises; empty or whitespace-only text yields a neutral result with
    zeroed sub-scores.
    """
    polarity = score_polarity(text)
    score = _clamp(polarity.comparative, -1.0, 1.0)

    return SentimentResult(
        score=score,
        comparative=polarity.comparative,
        label=classify_label(score, polarity.positive, polarity.negative),
        confidence=calculate_confidence(text, polarity),
        emotions=analyze_emotions(text),
        resilience=detect_resilience(text),
        positive_words=polarity.positive,
        negative_words=polarity.negative,
        analysis_method="local",
    )


def analyze_with_cultural_context(text: str, context: CulturalContext) -> SentimentResult:
    """
    Local analysis plus annotations for the user's declared context.

    Only `score`, `cultural_notes` and `analysis_method` may differ from
    `analyze_local_sentiment(text)`.
    """
    base = analyze_local_sentiment(text)
    notes: List[str] = []
    score = base.score

    if context.collectivist_orientation:
        we_count = len(WE_RE.findall(text))
        i_count = len(I_RE.findall(text))
        if we_count > i_count:
            notes.append(COLLECTIVIST_NOTE)
            if score > 0:
                score = min(1.0, score * 1.1)

    if context.is_first_gen:
        lower = text.lower()
        if "lucky" in lower or "just" in lower:
            notes.append(FIRST_GEN_NOTE)

    if not notes:
        return base

    return base.model_copy(update={
        "score": score,
        "cultural_notes": " ".join(notes),
        "analysis_method": "hybrid",
    })


def get_sentiment_summary(result: SentimentResult) -> str:
    summary = LABEL_DISPLAY[result.label]

    if result.resilience.detected:
        summary += " with resilience"

    dominant: Optional[str] = None
    best = 0.5
    for emotion, value in result.emotions.model_dump().items():
        if value > best:
            dominant, best = emotion, value
    if dominant:
        summary += f" ({dominant})"

    return summary


def get_kintsugi_insight(result: SentimentResult) -> str:
    if result.resilience.detected:
        return ("Your reflection shows the golden repair of Kintsugi - you're transforming "
                "challenges into growth.")

    if result.label in ("very_positive", "positive"):
        return ("This is a golden moment in your journey. Document it well - these wins are "
                "your proof of impact.")

    if result.label in ("negative", "very_negative"):
        return ("In Kintsugi, cracks are not failures - they're where the gold goes. This "
                "challenge is preparing you for a beautiful repair.")

    if result.label == "mixed":
        return ("Mixed emotions are natural. Like a Kintsugi vessel, your journey includes "
                "both cracks and gold - both are valuable.")

    return "Every reflection adds to your story. Keep documenting your journey."


_JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)


def parse_json_object(content: str) -> Optional[Dict[str, Any]]:
    """Parse a JSON object from an LLM reply, tolerating prose or code fences around it."""
    try:
        parsed = json.loads(content)
    except ValueError:
        m = _JSON_OBJECT_RE.search(content)
        if not m:
            return None
        try:
            parsed = json.loads(m.group(0))
        except ValueError:
            return None
    return parsed if isinstance(parsed, dict) else None


def _append_note(existing: Optional[str], note: str) -> str:
    return f"{existing}\n\n{note}" if existing else note


def merge_llm_analysis(result: SentimentResult, content: str) -> SentimentResult:
    """Fold a deep-analysis reply into a local result."""
    update: Dict[str, Any] = {"analysis_method": "hybrid"}
    parsed = parse_json_object(content)

    if parsed is None:
        logger.warning("Deep analysis reply was not JSON; keeping it as a note")
        update["cultural_notes"] = _append_note(result.cultural_notes, content)
        return result.model_copy(update=update)

    insight = parsed.get("insight")
    if insight:
        update["cultural_notes"] = _append_note(result.cultural_notes, str(insight))

    llm_confidence = parsed.get("confidence")
    if isinstance(llm_confidence, bool):
        llm_confidence = None
    if isinstance(llm_confidence, (int, float)) and llm_confidence:
        update["confidence"] = (result.confidence + _clamp(float(llm_confidence), 0.0, 1.0)) / 2

    return result.model_copy(update=update)
