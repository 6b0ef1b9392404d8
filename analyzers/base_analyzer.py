from abc import ABC, abstractmethod
import logging
from typing import Dict, List, Optional, Sequence, Union

from landmarks import Landmark, PoseLandmark, get_landmark, is_visible
from models import DetectionResult, ExercisePhase, ExerciseType, PlankResult
from pose_geometry import angle_degrees, distance

AnalyzerResult = Union[DetectionResult, PlankResult]


class BaseAnalyzer(ABC):
    """
    Abstract base class for exercise analyzers.
    An analyzer holds no per-session state: the caller passes in the landmarks
    of the current frame and the phase it stored after the previous frame.
    Work is split in two steps, `measure` (landmarks -> metrics) and
    `evaluate` (metrics -> result), so thresholds can be exercised directly.
    """

    exercise_type: ExerciseType = None
    counts_reps = True

    # Corrective message -> joints it refers to, for the skeleton overlay
    FEEDBACK_JOINTS: Dict[str, List[PoseLandmark]] = {}

    @abstractmethod
    def get_body_landmarks(self) -> List[PoseLandmark]:
        """Return the landmark indices that must be visible to score a frame."""
        pass

    @abstractmethod
    def calculate_metrics(self, points: Dict[PoseLandmark, Landmark]) -> Dict[str, float]:
        """Compute the angles, distances and positions this exercise is judged on."""
        pass

    @abstractmethod
    def evaluate(self, metrics: Dict[str, float], previous_phase: ExercisePhase) -> AnalyzerResult:
        """Apply form penalties and the phase state machine to measured metrics."""
        pass

    def measure(self, landmarks: Optional[Sequence[Landmark]]) -> Optional[Dict[str, float]]:
        """Extract metrics, or None when a required joint is missing or low-confidence."""
        if not landmarks:
            return None
        points = {}
        for index in self.get_body_landmarks():
            landmark = get_landmark(landmarks, index)
            if not is_visible(landmark):
                logging.debug(f"{self.exercise_type.value}: {index.name} not visible, skipping frame")
                return None
            points[index] = landmark
        return self.calculate_metrics(points)

    def detect(self, landmarks: Optional[Sequence[Landmark]],
               previous_phase: ExercisePhase = ExercisePhase.NEUTRAL) -> Optional[AnalyzerResult]:
        """Analyze one frame. Returns None when the frame cannot be scored."""
        metrics = self.measure(landmarks)
        if metrics is None:
            return None
        return self.evaluate(metrics, previous_phase)

    def next_phase(self, value: float, previous_phase: ExercisePhase,
                   down_below: float, up_above: float):
        """
        Edge-triggered up/down machine shared by the angle-driven exercises.
        Values inside the band [down_below, up_above] keep the previous phase.
        Returns (phase, is_rep); a rep is credited on the down -> up edge only.
        """
        if value < down_below:
            return ExercisePhase.DOWN, False
        if value > up_above:
            return ExercisePhase.UP, previous_phase == ExercisePhase.DOWN
        return previous_phase, False

    def joint_flags(self, feedback: Sequence[str]) -> List[Dict]:
        """Per-joint correctness flags derived from the current feedback."""
        flagged = []
        for message in feedback:
            for joint in self.FEEDBACK_JOINTS.get(message, []):
                if int(joint) not in flagged:
                    flagged.append(int(joint))
        return [{'joint_index': joint, 'is_correct': False} for joint in flagged]

    @staticmethod
    def clamp_score(score: float) -> int:
        return int(max(0, min(100, score)))

    # Thin wrappers so subclasses read like the geometry they describe
    def angle(self, a: Landmark, b: Landmark, c: Landmark) -> float:
        return angle_degrees(a, b, c)

    def distance(self, a: Landmark, b: Landmark) -> float:
        return distance(a, b)
