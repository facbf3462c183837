from pydantic import BaseModel, Field
from typing import List, Dict, Literal, Optional

CorrectionType = Literal["spelling", "particle", "spacing", "missing", "extra"]

class Correction(BaseModel):
    type: CorrectionType
    position: int # Offset into the target sentence
    expected: str # Empty for 'extra'
    actual: str # Empty for 'missing'
    explanation: str

class AnalysisResult(BaseModel):
    score: int # 0-100
    feedback: str
    corrections: List[Correction]
    mistakes: int = 0 # Always len(corrections)

class AnalysisRequest(BaseModel):
    input: str = ""
    target: str = ""
    speed: float = 0.0 # Words per minute, only changes the feedback tone

# --- Learner store document ---

class TypingHistory(BaseModel):
    id: str
    date: int # Epoch milliseconds
    wpm: float
    accuracy: float
    genre: str = "unknown"
    difficulty: str = "unknown"
    mistakes: int = 0

class MistakeRecord(BaseModel):
    id: str
    original: str # The full target sentence
    input: str # What the learner typed
    target: str # The expected fragment of the correction
    type: str
    timestamp: int

class UserProfile(BaseModel):
    username: str = "Guest Barista"
    avatar: str = "☕️"
    bio: str = "Loves Korean, loves life."

class UserSettings(BaseModel):
    soundEnabled: bool = True
    dailyGoal: int = 10
    theme: Literal["light", "dark", "system"] = "light"

class UserState(BaseModel):
    profile: UserProfile = Field(default_factory=UserProfile)
    settings: UserSettings = Field(default_factory=UserSettings)
    points: int = 0
    level: int = 1
    joinDate: int = 0
    history: List[TypingHistory] = Field(default_factory=list)
    mistakes: List[MistakeRecord] = Field(default_factory=list)

class ProfileUpdate(BaseModel):
    username: Optional[str] = None
    avatar: Optional[str] = None
    bio: Optional[str] = None

class SettingsUpdate(BaseModel):
    soundEnabled: Optional[bool] = None
    dailyGoal: Optional[int] = None
    theme: Optional[Literal["light", "dark", "system"]] = None

# --- Typing attempts ---

class AttemptRequest(BaseModel):
    input: str
    target: str
    elapsed_seconds: float = 0.0
    genre: str = "unknown"
    difficulty: str = "unknown"

class AttemptSummary(BaseModel):
    wpm: int
    accuracy: int # Positional accuracy of the live typing stats
    mistakes: int
    edit_distance: int
    points_earned: int
    total_points: int
    level: int

class AttemptResponse(BaseModel):
    analysis: AnalysisResult
    summary: AttemptSummary

# --- Sentences ---

class Sentence(BaseModel):
    kr: str
    cn: str = ""
    en: str = ""

class SentenceResponse(BaseModel):
    genre: str
    difficulty: str
    sentence: Sentence

class MenuItem(BaseModel):
    id: str
    name: str
    desc: str

class MenuResponse(BaseModel):
    genres: List[MenuItem]
    difficulties: List[MenuItem]

# --- Profile statistics ---

class ChartPoint(BaseModel):
    name: str
    wpm: float
    accuracy: float
    date: str # MM/dd

class ProfileStats(BaseModel):
    total_sentences: int
    total_hours: float
    average_wpm: float
    average_accuracy: float
    streak: int
    activity: Dict[str, int] # yyyy-MM-dd -> sentences typed
    chart: List[ChartPoint]
    mistake_types: Dict[str, int]

class ImportResponse(BaseModel):
    imported: bool
