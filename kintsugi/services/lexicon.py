"""
Word lists and patterns used by the local sentiment analysis.

Emotion triggers are matched as case-insensitive substrings, so multi-word
phrases ("crushed it", "keep going") work the same way as single words.
"""
import re
from typing import Dict, List, Pattern

EMOTION_WORDS: Dict[str, List[str]] = {
    "joy": ["happy", "excited", "thrilled", "delighted", "wonderful", "amazing",
            "fantastic", "great", "excellent", "awesome"],
    "pride": ["proud", "accomplished", "achieved", "succeeded", "nailed", "crushed it",
              "killed it", "owned", "mastered", "impressed"],
    "hope": ["hope", "optimistic", "looking forward", "excited about", "can't wait",
             "opportunity", "potential", "possible", "future"],
    "gratitude": ["grateful", "thankful", "appreciate", "blessed", "fortunate", "lucky",
                  "thanks to"],
    "frustration": ["frustrated", "annoyed", "irritated", "stuck", "blocked", "difficult",
                    "hard", "struggle", "challenging"],
    "anxiety": ["worried", "anxious", "nervous", "stressed", "overwhelmed", "uncertain",
                "scared", "afraid", "concerned"],
    "sadness": ["sad", "disappointed", "down", "upset", "hurt", "failed", "lost", "miss",
                "regret"],
    "determination": ["determined", "committed", "focused", "dedicated", "persevere",
                      "keep going", "won't give up", "push through"],
}

# Growth-framing language. Order matters: indicators are reported in this order.
RESILIENCE_PATTERNS: List[Pattern[str]] = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"\blearn(?:ed|t)?(?:\s+\w+){0,2}?\s+(?:from|that|how)\b",
        r"\bgrew\s+(?:from|through)\b",
        r"\bovercame\b",
        r"\bdespite (?:the|this|that)\b",
        r"\beven though\b",
        r"\bchallenge[ds]? (?:me|us) to\b",
        r"\bturned .+? into\b",
        r"\bsilver lining\b",
        r"\bblessing in disguise\b",
        r"\bmade me stronger\b",
        r"\bgrowth opportunity\b",
        r"\blesson learned\b",
        r"\bnext time\b",
        r"\bI(?:'ll| will) (?:try|do) (?:better|differently)\b",
        r"\bwon'?t make that mistake\b",
    )
]

GROWTH_INDICATORS: List[str] = [
    "yet", "learning", "improving", "developing", "growing", "progress",
    "practice", "effort", "feedback", "challenge", "opportunity",
]

WE_RE = re.compile(r"\bwe\b", re.IGNORECASE)
I_RE = re.compile(r"\bI\b", re.IGNORECASE)

# Punctuation stripped before lexicon lookup; apostrophes and hyphens survive
# so contractions like "don't" still hit the negation list.
TOKEN_STRIP_RE = re.compile(r"[^\w\s'\-]")
