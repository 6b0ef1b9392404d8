from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from landmarks import Landmark


class ExercisePhase(str, Enum):
    UP = "up"
    DOWN = "down"
    NEUTRAL = "neutral"


class ExerciseType(str, Enum):
    SQUATS = "squats"
    PUSHUPS = "pushups"
    LUNGES = "lunges"
    PLANKS = "planks"
    JUMPING_JACKS = "jumpingJacks"


class SessionStatus(str, Enum):
    IDLE = "idle"
    CONFIGURED = "configured"
    TRACKING = "tracking"
    PAUSED = "paused"
    COMPLETED = "completed"


@dataclass(frozen=True)
class DetectionResult:
    """Per-frame outcome of a rep-counted exercise detector."""
    phase: ExercisePhase
    is_rep: bool
    form_score: int
    feedback: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class PlankResult:
    """Per-frame outcome of the plank detector (no rep cycle)."""
    form_score: int
    feedback: List[str] = field(default_factory=list)
    is_holding: bool = False


@dataclass(frozen=True)
class ExerciseInfo:
    name: str
    default_target: int
    min_target: int
    max_target: int
    calories_per_rep: float  # per second for timed holds
    difficulty: str
    muscle_groups: List[str]


EXERCISE_INFO: Dict[ExerciseType, ExerciseInfo] = {
    ExerciseType.SQUATS: ExerciseInfo(
        "Squats", 20, 5, 100, 0.32, "Medium", ["Quadriceps", "Glutes", "Core"]),
    ExerciseType.PUSHUPS: ExerciseInfo(
        "Push-ups", 15, 5, 100, 0.36, "Medium", ["Chest", "Triceps", "Shoulders"]),
    ExerciseType.LUNGES: ExerciseInfo(
        "Lunges", 20, 5, 100, 0.28, "Medium", ["Quadriceps", "Glutes", "Hamstrings"]),
    ExerciseType.PLANKS: ExerciseInfo(
        "Plank Hold", 60, 10, 180, 0.05, "Hard", ["Core", "Shoulders", "Back"]),
    ExerciseType.JUMPING_JACKS: ExerciseInfo(
        "Jumping Jacks", 30, 5, 100, 0.2, "Easy", ["Full Body", "Cardio", "Legs"]),
}


def parse_exercise_type(value) -> ExerciseType:
    """Accept an ExerciseType, its value, or a loose name such as 'jumping jacks'."""
    if isinstance(value, ExerciseType):
        return value
    normalized = str(value).strip().lower().replace("-", "").replace("_", "").replace(" ", "")
    aliases = {
        "squat": ExerciseType.SQUATS, "squats": ExerciseType.SQUATS,
        "pushup": ExerciseType.PUSHUPS, "pushups": ExerciseType.PUSHUPS,
        "lunge": ExerciseType.LUNGES, "lunges": ExerciseType.LUNGES,
        "plank": ExerciseType.PLANKS, "planks": ExerciseType.PLANKS, "plankhold": ExerciseType.PLANKS,
        "jumpingjack": ExerciseType.JUMPING_JACKS, "jumpingjacks": ExerciseType.JUMPING_JACKS,
    }
    if normalized not in aliases:
        raise ValueError(f"Unknown exercise type: {value}")
    return aliases[normalized]


def estimate_plan(exercise, target: int) -> Dict[str, int]:
    """Pre-workout estimates shown when choosing an exercise and target."""
    exercise = parse_exercise_type(exercise)
    info = EXERCISE_INFO[exercise]
    is_plank = exercise == ExerciseType.PLANKS
    return {
        'estimated_calories': round(target * info.calories_per_rep),
        'estimated_seconds': target if is_plank else target * 3,
        'xp_preview': target * 2,
    }


@dataclass
class SessionState:
    """Mutable state owned by a single WorkoutSession."""
    exercise: Optional[ExerciseType] = None
    target: int = 0
    elapsed_seconds: int = 0
    rep_count: int = 0
    hold_seconds: int = 0
    form_score: int = 100
    feedback: List[str] = field(default_factory=list)
    calories_accumulated: float = 0.0
    total_xp: int = 0
    phase: ExercisePhase = ExercisePhase.NEUTRAL
    is_tracking: bool = False
    previous_landmarks: Optional[List[Landmark]] = None
    status: SessionStatus = SessionStatus.IDLE
    completion_announced: bool = False

    def reset_counters(self):
        self.elapsed_seconds = 0
        self.rep_count = 0
        self.hold_seconds = 0
        self.form_score = 100
        self.feedback = []
        self.calories_accumulated = 0.0
        self.total_xp = 0
        self.phase = ExercisePhase.NEUTRAL
        self.is_tracking = False
        self.previous_landmarks = None
        self.completion_announced = False
