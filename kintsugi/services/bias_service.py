"""
Pattern-based detection of self-limiting cognitive biases, with gentle reframes.
"""
import json
import re
from dataclasses import dataclass
from typing import List, Optional, Pattern

from kintsugi.schemas.bias import DetectedBias
from kintsugi.schemas.sentiment import CulturalContext


@dataclass(frozen=True)
class BiasFamily:
    key: str
    name: str
    patterns: List[Pattern[str]]
    reframe: str
    kintsugi_connection: str


def _compile(*patterns: str) -> List[Pattern[str]]:
    return [re.compile(p, re.IGNORECASE) for p in patterns]


BIAS_FAMILIES: List[BiasFamily] = [
    BiasFamily(
        key="imposter_syndrome",
        name="Imposter Syndrome",
        patterns=_compile(
            r"\bjust\s+(got\s+)?luck",
            r"\bdon'?t\s+deserve",
            r"\banyone\s+(could|would)",
            r"\bfake\s+it",
            r"\bnot\s+(qualified|smart|good)\s+enough",
            r"\bwill\s+find\s+out",
        ),
        reframe=("Your success isn't luck - it's the result of your skills, effort, and "
                 "preparation. What specific actions did you take that contributed?"),
        kintsugi_connection=("The Kintsugi master doesn't hide their experience - they celebrate "
                             "it with gold. Your journey, including doubts, is part of your "
                             "valuable story."),
    ),
    BiasFamily(
        key="discounting_positives",
        name="Discounting Positives",
        patterns=_compile(
            r"\bit'?s?\s+(not\s+)?(a\s+)?big\s+deal",
            r"\banyone\s+could\s+have",
            r"\bit\s+was\s+nothing",
            r"\bjust\s+(doing|did)\s+my\s+job",
            r"\bno\s+big\s+deal",
        ),
        reframe=("What feels routine to you might be remarkable to others. Consider: if a "
                 "colleague accomplished this, would you dismiss it?"),
        kintsugi_connection=("In Kintsugi, no repair is 'just' anything - each golden seam is "
                             "celebrated. Your wins deserve the same recognition."),
    ),
    BiasFamily(
        key="catastrophizing",
        name="Catastrophizing",
        patterns=_compile(
            r"\bruined?\s+everything",
            r"\bnever\s+(recover|bounce\s+back)",
            r"\bworst\s+thing",
            r"\bdisaster",
            r"\bcareer\s+(is\s+)?over",
            r"\bno\s+way\s+(out|forward)",
        ),
        reframe=("Let's zoom out: What's the most realistic outcome? Often our fears paint a "
                 "picture darker than reality. What evidence supports a better outcome?"),
        kintsugi_connection=("A cracked vessel isn't ruined - it's an opportunity for beautiful "
                             "repair. This challenge is where your gold will go."),
    ),
    BiasFamily(
        key="all_or_nothing",
        name="All-or-Nothing Thinking",
        patterns=_compile(
            r"\bcomplete(ly)?\s+fail",
            r"\btotal\s+(disaster|failure)",
            r"\balways\s+(mess|screw)",
            r"\bnever\s+(get\s+it\s+right|succeed)",
            r"\b(perfect|nothing)",
        ),
        reframe=("Success and failure exist on a spectrum. What parts went well, even if the "
                 "whole wasn't perfect? Growth lives in the gray areas."),
        kintsugi_connection=("Kintsugi teaches us that beauty exists in imperfection. A vessel "
                             "with one crack can still be stunning."),
    ),
    BiasFamily(
        key="mind_reading",
        name="Mind Reading",
        patterns=_compile(
            r"\bthey\s+(probably\s+)?(think|thought)",
            r"\beveryone\s+(thinks|knows)",
            r"\bpeople\s+(must|probably)\s+think",
            r"\bI\s+know\s+(they|she|he)\s+thinks",
        ),
        reframe=("We often assume we know what others think, but we can't actually read "
                 "minds. What evidence do you have? Have you asked directly?"),
        kintsugi_connection=("The Kintsugi philosophy focuses on your own journey, not what "
                             "others might think of your cracks."),
    ),
    BiasFamily(
        key="should_statements",
        name="Should Statements",
        patterns=_compile(
            r"\bshould\s+have",
            r"\bmust\s+be\s+(better|perfect|more)",
            r"\bought\s+to",
            r"\bhave\s+to\s+be\s+perfect",
        ),
        reframe=("Replace 'should' with 'could' or 'want to.' This shifts from self-criticism "
                 "to self-compassion and opens up possibilities."),
        kintsugi_connection=("There's no 'should' in Kintsugi - only what is, and how we "
                             "transform it with gold."),
    ),
]

FIRST_GEN_IMPOSTER_REFRAME = (
    "As a first-generation professional, your achievements are even more remarkable. "
    "'Luck' is often how we minimize the real effort and courage it took to get here."
)
FIRST_GEN_IMPOSTER_CONNECTION = (
    "In Kintsugi, every crack tells a story of survival. Your journey - including the "
    "obstacles you've overcome - makes your success more valuable, not less."
)


def detect_local_biases(text: str, context: Optional[CulturalContext] = None) -> List[DetectedBias]:
    """One detection per bias family, taken from its first matching pattern."""
    detected: List[DetectedBias] = []
    first_gen = bool(context and context.is_first_gen)

    for family in BIAS_FAMILIES:
        for pattern in family.patterns:
            m = pattern.search(text)
            if not m:
                continue
            if family.key == "imposter_syndrome" and first_gen:
                detected.append(DetectedBias(
                    bias_type=family.name,
                    original_thought=m.group(0),
                    reframe=FIRST_GEN_IMPOSTER_REFRAME,
                    kintsugi_connection=FIRST_GEN_IMPOSTER_CONNECTION,
                    confidence=0.7,
                ))
            else:
                detected.append(DetectedBias(
                    bias_type=family.name,
                    original_thought=m.group(0),
                    reframe=family.reframe,
                    kintsugi_connection=family.kintsugi_connection,
                    confidence=0.8,
                ))
            break

    return detected


def build_bias_prompt(text: str, biases: List[DetectedBias],
                      context: Optional[CulturalContext] = None) -> str:
    context_info = ""
    if context:
        context_info = "\nCultural context: " + json.dumps(
            context.model_dump(by_alias=True, exclude_none=True))

    notes = []
    if context and context.collectivist_orientation:
        notes.append("Note: User has collectivist orientation - 'we' language is a strength, "
                     "not deflection.")
    if context and context.is_first_gen:
        notes.append("Note: User is first-generation professional - acknowledge the extra "
                     "significance of their achievements.")

    return (
        f"Analyze this reflection for cognitive biases:{context_info}\n\n"
        f'"{text}"\n\n'
        f"Local analysis detected: {', '.join(b.bias_type for b in biases)}\n\n"
        "For each bias detected, provide a gentle, supportive reframe that:\n"
        "1. Validates the feeling\n"
        "2. Offers a new perspective\n"
        "3. Connects to Kintsugi philosophy (cracks becoming gold)\n"
        + ("\n" + "\n".join(notes) if notes else "")
    )


def enhance_biases_with_llm(biases: List[DetectedBias], content: str) -> List[DetectedBias]:
    """Replace reframes with the lines that follow each bias name in an LLM reply."""
    lines = content.split("\n")
    enhanced: List[DetectedBias] = []

    for bias in biases:
        name = bias.bias_type.lower()
        index = next((i for i, line in enumerate(lines) if name in line.lower()), None)
        if index is not None:
            # Length is measured before trimming
            joined = " ".join(lines[index + 1:index + 4])
            if len(joined) > 20:
                enhanced.append(bias.model_copy(update={"reframe": joined.strip(), "confidence": 0.9}))
                continue
        enhanced.append(bias)

    return enhanced
