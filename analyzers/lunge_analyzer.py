from typing import Dict, List

from analyzers.base_analyzer import BaseAnalyzer
from landmarks import Landmark, PoseLandmark
from models import DetectionResult, ExercisePhase, ExerciseType


class LungeAnalyzer(BaseAnalyzer):
    """Lunge analyzer. The left leg is treated as the front leg."""

    exercise_type = ExerciseType.LUNGES

    DOWN_KNEE_ANGLE = 110
    UP_KNEE_ANGLE = 160
    KNEE_PAST_TOE_MARGIN = 0.05  # normalized x

    KNEE_FEEDBACK = "Front knee behind toes!"

    FEEDBACK_JOINTS = {
        KNEE_FEEDBACK: [PoseLandmark.LEFT_KNEE, PoseLandmark.LEFT_ANKLE],
    }

    def get_body_landmarks(self) -> List[PoseLandmark]:
        return [PoseLandmark.LEFT_HIP, PoseLandmark.LEFT_KNEE, PoseLandmark.LEFT_ANKLE]

    def calculate_metrics(self, points: Dict[PoseLandmark, Landmark]) -> Dict[str, float]:
        knee = points[PoseLandmark.LEFT_KNEE]
        ankle = points[PoseLandmark.LEFT_ANKLE]
        return {
            'front_knee_angle': self.angle(points[PoseLandmark.LEFT_HIP], knee, ankle),
            'knee_x': knee.x,
            'ankle_x': ankle.x,
        }

    def evaluate(self, metrics: Dict[str, float], previous_phase: ExercisePhase) -> DetectionResult:
        feedback = []
        form_score = 100

        if metrics['knee_x'] > metrics['ankle_x'] + self.KNEE_PAST_TOE_MARGIN:
            feedback.append(self.KNEE_FEEDBACK)
            form_score -= 20

        phase, is_rep = self.next_phase(metrics['front_knee_angle'], previous_phase,
                                        self.DOWN_KNEE_ANGLE, self.UP_KNEE_ANGLE)
        return DetectionResult(phase=phase, is_rep=is_rep,
                               form_score=self.clamp_score(form_score), feedback=feedback)


def detect_lunge(landmarks, previous_phase=ExercisePhase.NEUTRAL):
    return LungeAnalyzer().detect(landmarks, previous_phase)
