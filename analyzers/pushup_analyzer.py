from typing import Dict, List

from analyzers.base_analyzer import BaseAnalyzer
from landmarks import Landmark, PoseLandmark
from models import DetectionResult, ExercisePhase, ExerciseType


class PushupAnalyzer(BaseAnalyzer):
    """Push-up analyzer driven by the left elbow angle, judged on the body line."""

    exercise_type = ExerciseType.PUSHUPS

    DOWN_ELBOW_ANGLE = 100
    UP_ELBOW_ANGLE = 150
    BODY_LINE_MIN = 150  # shoulder-hip-ankle, exclusive bounds
    BODY_LINE_MAX = 190

    HIPS_LOW_FEEDBACK = "Keep hips in line!"
    HIPS_SAG_FEEDBACK = "Don't let hips sag!"

    FEEDBACK_JOINTS = {
        HIPS_LOW_FEEDBACK: [PoseLandmark.LEFT_HIP, PoseLandmark.RIGHT_HIP],
        HIPS_SAG_FEEDBACK: [PoseLandmark.LEFT_HIP, PoseLandmark.RIGHT_HIP],
    }

    def get_body_landmarks(self) -> List[PoseLandmark]:
        return [
            PoseLandmark.LEFT_SHOULDER, PoseLandmark.LEFT_ELBOW, PoseLandmark.LEFT_WRIST,
            PoseLandmark.LEFT_HIP, PoseLandmark.LEFT_ANKLE,
        ]

    def calculate_metrics(self, points: Dict[PoseLandmark, Landmark]) -> Dict[str, float]:
        shoulder = points[PoseLandmark.LEFT_SHOULDER]
        return {
            'elbow_angle': self.angle(shoulder, points[PoseLandmark.LEFT_ELBOW], points[PoseLandmark.LEFT_WRIST]),
            'body_angle': self.angle(shoulder, points[PoseLandmark.LEFT_HIP], points[PoseLandmark.LEFT_ANKLE]),
        }

    def evaluate(self, metrics: Dict[str, float], previous_phase: ExercisePhase) -> DetectionResult:
        feedback = []
        form_score = 100
        body_angle = metrics['body_angle']

        if body_angle < self.BODY_LINE_MIN:
            feedback.append(self.HIPS_LOW_FEEDBACK)
            form_score -= 20
        if body_angle > self.BODY_LINE_MAX:
            feedback.append(self.HIPS_SAG_FEEDBACK)
            form_score -= 25

        phase, is_rep = self.next_phase(metrics['elbow_angle'], previous_phase,
                                        self.DOWN_ELBOW_ANGLE, self.UP_ELBOW_ANGLE)
        return DetectionResult(phase=phase, is_rep=is_rep,
                               form_score=self.clamp_score(form_score), feedback=feedback)


def detect_pushup(landmarks, previous_phase=ExercisePhase.NEUTRAL):
    return PushupAnalyzer().detect(landmarks, previous_phase)
