from typing import Dict, List

from analyzers.base_analyzer import BaseAnalyzer
from landmarks import Landmark, PoseLandmark
from models import DetectionResult, ExercisePhase, ExerciseType


class SquatAnalyzer(BaseAnalyzer):
    """
    Squat analyzer: the average knee angle (hip-knee-ankle) drives the phase,
    the hip angle and knee/ankle separation drive the form score.
    """

    exercise_type = ExerciseType.SQUATS

    DOWN_KNEE_ANGLE = 100   # below this the squat is at depth
    UP_KNEE_ANGLE = 160     # above this the lifter is standing
    MIN_HIP_ANGLE = 70      # shoulder-hip-knee; below means excessive forward lean
    KNEE_VALGUS_RATIO = 0.8  # knee separation relative to ankle separation

    BACK_FEEDBACK = "Keep your back straight!"
    KNEES_FEEDBACK = "Knees over toes!"

    FEEDBACK_JOINTS = {
        BACK_FEEDBACK: [PoseLandmark.LEFT_SHOULDER, PoseLandmark.LEFT_HIP],
        KNEES_FEEDBACK: [PoseLandmark.LEFT_KNEE, PoseLandmark.RIGHT_KNEE],
    }

    def get_body_landmarks(self) -> List[PoseLandmark]:
        return [
            PoseLandmark.LEFT_SHOULDER,
            PoseLandmark.LEFT_HIP, PoseLandmark.RIGHT_HIP,
            PoseLandmark.LEFT_KNEE, PoseLandmark.RIGHT_KNEE,
            PoseLandmark.LEFT_ANKLE, PoseLandmark.RIGHT_ANKLE,
        ]

    def calculate_metrics(self, points: Dict[PoseLandmark, Landmark]) -> Dict[str, float]:
        left_knee = self.angle(points[PoseLandmark.LEFT_HIP], points[PoseLandmark.LEFT_KNEE],
                               points[PoseLandmark.LEFT_ANKLE])
        right_knee = self.angle(points[PoseLandmark.RIGHT_HIP], points[PoseLandmark.RIGHT_KNEE],
                                points[PoseLandmark.RIGHT_ANKLE])
        return {
            'left_knee_angle': left_knee,
            'right_knee_angle': right_knee,
            'avg_knee_angle': (left_knee + right_knee) / 2,
            'hip_angle': self.angle(points[PoseLandmark.LEFT_SHOULDER], points[PoseLandmark.LEFT_HIP],
                                    points[PoseLandmark.LEFT_KNEE]),
            'knee_distance': self.distance(points[PoseLandmark.LEFT_KNEE], points[PoseLandmark.RIGHT_KNEE]),
            'ankle_distance': self.distance(points[PoseLandmark.LEFT_ANKLE], points[PoseLandmark.RIGHT_ANKLE]),
        }

    def evaluate(self, metrics: Dict[str, float], previous_phase: ExercisePhase) -> DetectionResult:
        feedback = []
        form_score = 100

        if metrics['hip_angle'] < self.MIN_HIP_ANGLE:
            feedback.append(self.BACK_FEEDBACK)
            form_score -= 20

        # Knee valgus: knees caving in relative to the stance
        if metrics['knee_distance'] < metrics['ankle_distance'] * self.KNEE_VALGUS_RATIO:
            feedback.append(self.KNEES_FEEDBACK)
            form_score -= 15

        phase, is_rep = self.next_phase(metrics['avg_knee_angle'], previous_phase,
                                        self.DOWN_KNEE_ANGLE, self.UP_KNEE_ANGLE)
        return DetectionResult(phase=phase, is_rep=is_rep,
                               form_score=self.clamp_score(form_score), feedback=feedback)


def detect_squat(landmarks, previous_phase=ExercisePhase.NEUTRAL):
    return SquatAnalyzer().detect(landmarks, previous_phase)
