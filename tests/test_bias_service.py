from kintsugi.schemas.sentiment import CulturalContext
from kintsugi.services.bias_service import (
    FIRST_GEN_IMPOSTER_REFRAME,
    build_bias_prompt,
    detect_local_biases,
    enhance_biases_with_llm,
)


def test_no_bias_in_neutral_text():
    assert detect_local_biases("Shipped the release and wrote the docs.") == []


def test_one_detection_per_family():
    biases = detect_local_biases("I just got lucky, I don't deserve this, honestly it was nothing")
    assert [b.bias_type for b in biases] == [
        "Imposter Syndrome", "Discounting Positives", "All-or-Nothing Thinking",
    ]
    assert biases[0].original_thought == "just got luck"
    assert biases[0].confidence == 0.8


def test_catastrophizing_and_all_or_nothing():
    biases = detect_local_biases("I completely failed, total disaster")
    names = [b.bias_type for b in biases]
    assert "Catastrophizing" in names
    assert "All-or-Nothing Thinking" in names
    all_or_nothing = next(b for b in biases if b.bias_type == "All-or-Nothing Thinking")
    assert all_or_nothing.original_thought == "completely fail"


def test_first_gen_imposter_reframe():
    biases = detect_local_biases("I just got lucky", CulturalContext(is_first_gen=True))
    assert len(biases) == 1
    assert biases[0].reframe == FIRST_GEN_IMPOSTER_REFRAME
    assert biases[0].confidence == 0.7


def test_prompt_mentions_detected_biases_and_context():
    biases = detect_local_biases("I should have known better")
    prompt = build_bias_prompt("I should have known better", biases,
                               CulturalContext(collectivist_orientation=True))
    assert "Local analysis detected: Should Statements" in prompt
    assert '"collectivistOrientation": true' in prompt
    assert "collectivist orientation" in prompt


def test_enhance_uses_lines_after_bias_name():
    biases = detect_local_biases("They probably think I'm slow")
    content = "\n".join([
        "Mind Reading:",
        "You can't know what others think.",
        "Consider asking a colleague directly for feedback.",
        "Every crack can hold gold.",
        "Unrelated trailing line",
    ])
    enhanced = enhance_biases_with_llm(biases, content)
    assert enhanced[0].confidence == 0.9
    assert enhanced[0].reframe.startswith("You can't know what others think.")
    assert "Unrelated" not in enhanced[0].reframe


def test_enhance_keeps_bias_when_not_mentioned():
    biases = detect_local_biases("They probably think I'm slow")
    assert enhance_biases_with_llm(biases, "Nothing relevant here") == biases


def test_enhance_measures_reframe_length_before_trimming():
    biases = detect_local_biases("They probably think I'm slow")
    content = "Mind Reading:\n" + " " * 12 + "Ask them.\n" + " " * 6
    enhanced = enhance_biases_with_llm(biases, content)
    assert enhanced[0].confidence == 0.9
    assert enhanced[0].reframe == "Ask them."
