import re
from typing import List, Optional, Tuple

from kintsugi.schemas.insight import InsightResponse, JournalEntry, UserProfile
from kintsugi.services.sentiment_service import analyze_local_sentiment, get_kintsugi_insight

POSITIVE_MOODS = ("great", "good")

_SECTION_BREAK_RE = re.compile(r"^(\d+\.|-\s)")
_PATTERN_LINE_RES = (re.compile(r"^[-•*]\s*(.+)$"), re.compile(r"^\d+\.\s*(.+)$"))


def _entry_text(entry: JournalEntry) -> str:
    return f"{entry.accomplishment} {entry.reflection or ''}"


def _local_insight_text(avg_score: float, has_resilience: bool) -> Optional[Tuple[str, str]]:
    if avg_score >= 0.3 and has_resilience:
        return (
            "Your recent reflections show a beautiful balance of celebrating wins and learning "
            "from challenges. You're actively practicing growth mindset.",
            "Like a Kintsugi master, you're turning every experience - positive or "
            "challenging - into gold.",
        )
    if avg_score >= 0.3:
        return (
            "You've been documenting some great wins! Don't forget to also capture the "
            "challenges - they're where the gold goes.",
            "In Kintsugi, the vessel isn't complete with just gold - it needs the cracks too. "
            "Your challenges make your story richer.",
        )
    if has_resilience:
        return (
            "You're showing remarkable resilience in your reflections. The way you're "
            "processing challenges shows real growth.",
            "The Kintsugi philosophy teaches that repair makes things more valuable. Your "
            "resilience is your gold.",
        )
    return None


def generate_local_insight(entries: List[JournalEntry]) -> InsightResponse:
    """Build an insight from local sentiment over the entries. `entries` must be non-empty."""
    sentiments = [analyze_local_sentiment(_entry_text(e)) for e in entries]

    avg_score = sum(s.score for s in sentiments) / len(sentiments)
    has_resilience = any(s.resilience.detected for s in sentiments)

    picked = _local_insight_text(avg_score, has_resilience)
    if picked:
        insight, connection = picked
    else:
        insight = ("Keep documenting your journey - every entry adds to your story. Consider "
                   "reflecting on what you're learning from current challenges.")
        connection = get_kintsugi_insight(sentiments[0])

    return InsightResponse(
        success=True,
        insight=insight,
        kintsugi_connection=connection,
        patterns=extract_local_patterns(entries),
        source="local",
    )


def extract_local_patterns(entries: List[JournalEntry]) -> List[str]:
    patterns: List[str] = []

    if len(entries) >= 3:
        patterns.append(f"You've documented {len(entries)} reflections recently - great consistency!")

    moods = [e.mood for e in entries if e.mood]
    if len(moods) >= 2:
        positive = sum(1 for m in moods if m in POSITIVE_MOODS)
        if positive > len(moods) / 2:
            patterns.append("Your mood trend is generally positive")

    detailed = [e for e in entries if e.reflection and len(e.reflection) > 50]
    if len(detailed) > len(entries) / 2:
        patterns.append("You write thoughtful, detailed reflections")

    return patterns


def extract_section(content: str, keyword: str) -> Optional[str]:
    """Return the block of lines starting at the first line mentioning `keyword`."""
    lines = content.split("\n")
    start = next((i for i, line in enumerate(lines) if keyword in line.lower()), None)
    if start is None:
        return None

    end = next((i for i in range(start + 1, len(lines)) if _SECTION_BREAK_RE.match(lines[i])),
               len(lines))
    return " ".join(lines[start:end]).strip()


def extract_patterns(content: str, limit: int = 5) -> List[str]:
    patterns: List[str] = []
    for line in content.split("\n"):
        for regex in _PATTERN_LINE_RES:
            m = regex.match(line)
            if m:
                if len(m.group(1)) > 10:
                    patterns.append(m.group(1).strip())
                break
    return patterns[:limit]


def build_insight_prompt(entries: List[JournalEntry], profile: Optional[UserProfile],
                         insight_type: str) -> str:
    """Entries are expected to be anonymized already."""
    profile_context = ""
    if profile:
        profile_context = (f"User is {profile.profession or 'a professional'}"
                           f"{', first-generation professional' if profile.is_first_gen else ''}.")

    summaries = []
    for i, e in enumerate(entries, start=1):
        header = f"Entry {i} ({e.date}):" if e.date else f"Entry {i}:"
        block = f"{header}\n- Accomplishment: {e.accomplishment}"
        if e.reflection:
            block += f"\n- Reflection: {e.reflection}"
        if e.mood:
            block += f"\n- Mood: {e.mood}"
        summaries.append(block)

    return (
        f"{profile_context}\n\n"
        f"Generate a {insight_type} insight based on these recent reflections:\n\n"
        + "\n\n".join(summaries)
        + "\n\nProvide:\n"
        "1. A personalized insight (2-3 sentences)\n"
        "2. How this connects to Kintsugi philosophy\n"
        "3. Any patterns you notice (as a list)"
    )
