from typing import List, Literal, Optional

from kintsugi.schemas.sentiment import CamelModel


class JournalEntry(CamelModel):
    accomplishment: str
    reflection: Optional[str] = None
    date: Optional[str] = None
    mood: Optional[str] = None


class UserProfile(CamelModel):
    name: Optional[str] = None
    profession: Optional[str] = None
    ethnicity: Optional[str] = None
    is_first_gen: bool = False


class InsightRequest(CamelModel):
    # Clients send either 'entries' or 'recentEntries'
    entries: Optional[List[JournalEntry]] = None
    recent_entries: Optional[List[JournalEntry]] = None
    user_profile: Optional[UserProfile] = None
    # weekly | pattern | strength | growth; passed through to the prompt as given
    insight_type: str = "pattern"

    def journal_entries(self) -> List[JournalEntry]:
        return self.entries or self.recent_entries or []


class InsightResponse(CamelModel):
    success: bool
    insight: Optional[str] = None
    kintsugi_connection: Optional[str] = None
    patterns: Optional[List[str]] = None
    error: Optional[str] = None
    source: Literal["local", "smart"] = "local"
