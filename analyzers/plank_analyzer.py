from typing import Dict, List

from analyzers.base_analyzer import BaseAnalyzer
from landmarks import Landmark, PoseLandmark
from models import ExercisePhase, ExerciseType, PlankResult


class PlankAnalyzer(BaseAnalyzer):
    """
    Plank analyzer. There is no rep cycle: each frame reports whether the
    hold is currently correct, and the session credits held seconds from its
    once-per-second tick.
    """

    exercise_type = ExerciseType.PLANKS
    counts_reps = False

    BODY_LINE_MIN = 160
    BODY_LINE_MAX = 190
    MAX_SHOULDER_HIP_DROP = 0.15  # normalized y, body must be near horizontal

    HIPS_HIGH_FEEDBACK = "Hips too high!"
    HIPS_SAG_FEEDBACK = "Don't let hips sag!"
    GOOD_FEEDBACK = "Great form! Keep it up!"

    FEEDBACK_JOINTS = {
        HIPS_HIGH_FEEDBACK: [PoseLandmark.LEFT_HIP],
        HIPS_SAG_FEEDBACK: [PoseLandmark.LEFT_HIP],
    }

    def get_body_landmarks(self) -> List[PoseLandmark]:
        return [PoseLandmark.LEFT_SHOULDER, PoseLandmark.LEFT_HIP, PoseLandmark.LEFT_ANKLE]

    def calculate_metrics(self, points: Dict[PoseLandmark, Landmark]) -> Dict[str, float]:
        shoulder = points[PoseLandmark.LEFT_SHOULDER]
        hip = points[PoseLandmark.LEFT_HIP]
        return {
            'body_angle': self.angle(shoulder, hip, points[PoseLandmark.LEFT_ANKLE]),
            'shoulder_hip_drop': abs(shoulder.y - hip.y),
        }

    def evaluate(self, metrics: Dict[str, float],
                 previous_phase: ExercisePhase = ExercisePhase.NEUTRAL) -> PlankResult:
        feedback = []
        form_score = 100
        is_holding = True
        body_angle = metrics['body_angle']

        if body_angle < self.BODY_LINE_MIN:
            feedback.append(self.HIPS_HIGH_FEEDBACK)
            form_score -= 20
            is_holding = False
        if body_angle > self.BODY_LINE_MAX:
            feedback.append(self.HIPS_SAG_FEEDBACK)
            form_score -= 25
            is_holding = False

        if metrics['shoulder_hip_drop'] > self.MAX_SHOULDER_HIP_DROP:
            is_holding = False

        if not feedback and is_holding:
            feedback.append(self.GOOD_FEEDBACK)

        return PlankResult(form_score=self.clamp_score(form_score), feedback=feedback,
                           is_holding=is_holding)


def detect_plank(landmarks):
    return PlankAnalyzer().detect(landmarks)
