import pytest

from kintsugi.schemas.sentiment import (
    CulturalContext,
    EmotionBreakdown,
    ResilienceIndicators,
    SentimentResult,
)
from kintsugi.services.sentiment_service import (
    COLLECTIVIST_NOTE,
    FIRST_GEN_NOTE,
    analyze_emotions,
    analyze_local_sentiment,
    analyze_with_cultural_context,
    classify_label,
    detect_resilience,
    get_kintsugi_insight,
    get_sentiment_summary,
    merge_llm_analysis,
    score_polarity,
)

SAMPLES = [
    "",
    "   ",
    "ok",
    "I completely failed the project, total disaster",
    "I struggled but learned so much from this challenge, growing stronger",
    "We shipped it together",
    "I love this team, the launch was great and I am so happy and proud!!!",
    "Terrible terrible terrible awful day, I hate everything about it",
    "love hate",
]


def _result(label="neutral", detected=False, **emotions) -> SentimentResult:
    return SentimentResult(
        score=0.0,
        comparative=0.0,
        label=label,
        confidence=0.5,
        emotions=EmotionBreakdown(**emotions),
        resilience=ResilienceIndicators(
            detected=detected, score=0.2 if detected else 0.0,
            indicators=["progress"] if detected else []),
        positive_words=[],
        negative_words=[],
    )


@pytest.mark.parametrize("text", SAMPLES)
def test_ranges_hold_for_any_text(text):
    r = analyze_local_sentiment(text)
    assert -1.0 <= r.score <= 1.0
    assert 0.0 <= r.confidence <= 1.0
    for value in r.emotions.model_dump().values():
        assert 0.0 <= value <= 1.0
    assert r.resilience.detected == (len(r.resilience.indicators) > 0)
    assert r.resilience.score == min(1.0, len(r.resilience.indicators) / 5)
    assert r.analysis_method == "local"


@pytest.mark.parametrize("text", SAMPLES)
def test_analysis_is_idempotent(text):
    assert analyze_local_sentiment(text) == analyze_local_sentiment(text)


def test_empty_text_degrades_to_zero_values():
    r = analyze_local_sentiment("   ")
    assert r.label == "neutral"
    assert r.score == 0.0
    assert r.comparative == 0.0
    assert r.confidence == 0.0
    assert r.positive_words == [] and r.negative_words == []
    assert not r.resilience.detected


def test_failure_text_is_negative_without_resilience():
    r = analyze_local_sentiment("I completely failed the project, total disaster")
    assert r.label in ("negative", "very_negative")
    assert r.score < 0
    assert "disaster" in r.negative_words
    assert r.resilience.detected is False


def test_positive_text():
    r = analyze_local_sentiment("I love it, the launch was great and I am happy")
    assert r.label in ("positive", "very_positive")
    assert r.negative_words == []
    assert {"love", "great", "happy"} <= set(r.positive_words)


def test_negation_flips_polarity():
    p = score_polarity("not good")
    assert p.positive == []
    assert p.negative == ["good"]
    assert p.score < 0


def test_comparative_is_score_per_token():
    p = score_polarity("great day at work")
    assert p.tokens == ["great", "day", "at", "work"]
    assert p.comparative == pytest.approx(p.score / 4)


def test_balanced_vocabulary_is_mixed():
    r = analyze_local_sentiment("love hate")
    assert r.label == "mixed"


@pytest.mark.parametrize("score,positive,negative,expected", [
    (0.5, [], [], "very_positive"),
    (0.1, [], [], "positive"),
    (0.09, [], [], "neutral"),
    (-0.1, [], [], "negative"),
    (-0.5, [], [], "very_negative"),
    # 2:1 is a ratio of exactly 0.5, which does not count as mixed
    (0.8, ["a", "b"], ["c"], "very_positive"),
    (0.8, ["a", "b", "c"], ["d", "e"], "mixed"),
    (-0.9, ["a"], ["b"], "mixed"),
])
def test_classify_label(score, positive, negative, expected):
    assert classify_label(score, positive, negative) == expected


def test_emotions_saturate_at_three_matches():
    e = analyze_emotions("So HAPPY, excited and thrilled - I feel proud")
    assert e.joy == 1.0
    assert e.pride == pytest.approx(1 / 3)
    assert e.sadness == 0.0


def test_resilience_detects_growth_language():
    r = detect_resilience("I struggled but learned so much from this challenge, growing stronger")
    assert r.detected
    assert r.indicators[0] == "learned so much from"
    assert "growing" in r.indicators
    assert "challenge" in r.indicators
    assert r.score == pytest.approx(len(r.indicators) / 5)


def test_resilience_patterns_report_in_order_and_cap_score():
    r = detect_resilience(
        "Despite the setback I overcame it. Silver lining: lesson learned, "
        "next time I will do better. Still learning, making progress with practice."
    )
    assert r.indicators == [
        "overcame", "Despite the", "Silver lining", "lesson learned", "next time",
        "I will do better", "learning", "progress", "practice",
    ]
    assert r.score == 1.0


def test_resilience_pattern_order_follows_pattern_list():
    r = detect_resilience("Even though it was hard, I overcame it")
    assert r.indicators == ["overcame", "Even though"]


@pytest.mark.parametrize("text", [
    "I will overcome this",
    "We turn this around into a win",
])
def test_resilience_ignores_future_and_present_tense(text):
    r = detect_resilience(text)
    assert not r.detected
    assert r.indicators == []


def test_grow_through_only_counts_past_tense():
    assert detect_resilience("I grow through practice").indicators == ["practice"]
    assert detect_resilience("I grew through practice").indicators == ["grew through", "practice"]


def test_short_text_has_low_confidence():
    assert analyze_local_sentiment("ok").confidence < 0.2


def test_confidence_grows_with_length():
    short = analyze_local_sentiment("meeting notes for today")
    long = analyze_local_sentiment(" ".join(["meeting notes for today"] * 15))
    assert long.confidence >= short.confidence
    assert long.confidence == pytest.approx(0.4)


def test_collectivist_context_marks_result_hybrid():
    r = analyze_with_cultural_context("We shipped it together", CulturalContext(collectivist_orientation=True))
    assert r.analysis_method == "hybrid"
    assert r.cultural_notes == COLLECTIVIST_NOTE


def test_collectivist_boost_is_clamped_and_keeps_label():
    text = "We love it, we are happy"
    base = analyze_local_sentiment(text)
    adjusted = analyze_with_cultural_context(text, CulturalContext(collectivist_orientation=True))
    assert base.score > 0
    assert adjusted.score == pytest.approx(min(1.0, base.score * 1.1))
    assert adjusted.score <= 1.0
    assert adjusted.label == base.label
    assert adjusted.emotions == base.emotions
    assert adjusted.resilience == base.resilience


def test_collectivist_requires_more_we_than_i():
    r = analyze_with_cultural_context("I did it and we did it", CulturalContext(collectivist_orientation=True))
    assert r.analysis_method == "local"
    assert r.cultural_notes is None


def test_first_gen_minimizing_language_gets_note():
    r = analyze_with_cultural_context("I just got lucky with the promotion",
                                      CulturalContext(is_first_gen=True))
    assert r.cultural_notes == FIRST_GEN_NOTE
    assert r.analysis_method == "hybrid"


def test_both_notes_are_joined():
    r = analyze_with_cultural_context(
        "We were just lucky",
        CulturalContext(collectivist_orientation=True, is_first_gen=True),
    )
    assert r.cultural_notes == f"{COLLECTIVIST_NOTE} {FIRST_GEN_NOTE}"


def test_cultural_adjustment_leaves_base_untouched():
    text = "We shipped it together"
    before = analyze_local_sentiment(text)
    analyze_with_cultural_context(text, CulturalContext(collectivist_orientation=True))
    assert analyze_local_sentiment(text) == before


def test_sentiment_summary():
    assert get_sentiment_summary(_result("negative")) == "Challenging"
    assert get_sentiment_summary(_result("mixed", detected=True)) == "Mixed Emotions with resilience"
    assert get_sentiment_summary(_result("positive", joy=0.67, pride=1.0)) == "Positive (pride)"
    assert get_sentiment_summary(_result("positive", joy=1.0, pride=1.0)) == "Positive (joy)"
    assert get_sentiment_summary(_result("positive", joy=0.5)) == "Positive"


def test_kintsugi_insight_prefers_resilience():
    assert "golden repair" in get_kintsugi_insight(_result("very_negative", detected=True))
    assert "golden moment" in get_kintsugi_insight(_result("positive"))
    assert "cracks are not failures" in get_kintsugi_insight(_result("negative"))
    assert "Mixed emotions" in get_kintsugi_insight(_result("mixed"))
    assert "Every reflection" in get_kintsugi_insight(_result("neutral"))


def test_merge_llm_json_reply():
    base = _result("positive")
    merged = merge_llm_analysis(base, '```json\n{"insight": "Gold in the seams.", "confidence": 0.9}\n```')
    assert merged.analysis_method == "hybrid"
    assert merged.cultural_notes == "Gold in the seams."
    assert merged.confidence == pytest.approx(0.7)
    assert base.analysis_method == "local"


def test_merge_llm_appends_to_existing_notes():
    base = _result().model_copy(update={"cultural_notes": "Note."})
    merged = merge_llm_analysis(base, '{"insight": "More."}')
    assert merged.cultural_notes == "Note.\n\nMore."
    assert merged.confidence == base.confidence


def test_merge_llm_plain_text_reply():
    merged = merge_llm_analysis(_result(), "You are doing well.")
    assert merged.cultural_notes == "You are doing well."
    assert merged.analysis_method == "hybrid"
