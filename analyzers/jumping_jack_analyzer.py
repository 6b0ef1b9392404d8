from typing import Dict, List

from analyzers.base_analyzer import BaseAnalyzer
from landmarks import Landmark, PoseLandmark
from models import DetectionResult, ExercisePhase, ExerciseType


class JumpingJackAnalyzer(BaseAnalyzer):
    """
    Jumping jack analyzer based on limb positions rather than a single angle.

    "Up" needs arms raised and legs apart, "down" needs arms lowered and legs
    together. Any other combination keeps the previous phase. The rep is
    credited on the up -> down edge.
    """

    exercise_type = ExerciseType.JUMPING_JACKS

    LEGS_APART_HIP_RATIO = 1.2        # ankle spread vs hip width
    LEGS_TOGETHER_SHOULDER_RATIO = 1.1  # ankle spread vs shoulder width

    LEGS_FEEDBACK = "Spread your legs wider!"
    ARMS_FEEDBACK = "Raise your arms higher!"
    GOOD_FEEDBACK = "Great form! Keep going!"
    REP_FEEDBACK = "Rep counted! Keep it up!"

    FEEDBACK_JOINTS = {
        LEGS_FEEDBACK: [PoseLandmark.LEFT_ANKLE, PoseLandmark.RIGHT_ANKLE],
        ARMS_FEEDBACK: [PoseLandmark.LEFT_WRIST, PoseLandmark.RIGHT_WRIST,
                        PoseLandmark.LEFT_ELBOW, PoseLandmark.RIGHT_ELBOW],
    }

    def get_body_landmarks(self) -> List[PoseLandmark]:
        return [
            PoseLandmark.LEFT_SHOULDER, PoseLandmark.RIGHT_SHOULDER,
            PoseLandmark.LEFT_ELBOW, PoseLandmark.RIGHT_ELBOW,
            PoseLandmark.LEFT_WRIST, PoseLandmark.RIGHT_WRIST,
            PoseLandmark.LEFT_HIP, PoseLandmark.RIGHT_HIP,
            PoseLandmark.LEFT_ANKLE, PoseLandmark.RIGHT_ANKLE,
        ]

    def calculate_metrics(self, points: Dict[PoseLandmark, Landmark]) -> Dict[str, float]:
        left_shoulder = points[PoseLandmark.LEFT_SHOULDER]
        right_shoulder = points[PoseLandmark.RIGHT_SHOULDER]
        left_wrist = points[PoseLandmark.LEFT_WRIST]
        right_wrist = points[PoseLandmark.RIGHT_WRIST]

        # Image y grows downwards: smaller y is higher on screen
        left_arm_up = left_wrist.y < left_shoulder.y or points[PoseLandmark.LEFT_ELBOW].y < left_shoulder.y
        right_arm_up = right_wrist.y < right_shoulder.y or points[PoseLandmark.RIGHT_ELBOW].y < right_shoulder.y

        leg_spread = self.distance(points[PoseLandmark.LEFT_ANKLE], points[PoseLandmark.RIGHT_ANKLE])
        hip_width = self.distance(points[PoseLandmark.LEFT_HIP], points[PoseLandmark.RIGHT_HIP])
        shoulder_width = self.distance(left_shoulder, right_shoulder)

        return {
            'arms_up': left_arm_up and right_arm_up,
            'arms_down': left_wrist.y > left_shoulder.y and right_wrist.y > right_shoulder.y,
            'legs_apart': leg_spread > hip_width * self.LEGS_APART_HIP_RATIO,
            'legs_together': leg_spread < shoulder_width * self.LEGS_TOGETHER_SHOULDER_RATIO,
            'leg_spread': leg_spread,
        }

    def evaluate(self, metrics: Dict[str, float], previous_phase: ExercisePhase) -> DetectionResult:
        arms_up, legs_apart = metrics['arms_up'], metrics['legs_apart']
        feedback = []
        form_score = 100

        if arms_up and not legs_apart:
            feedback.append(self.LEGS_FEEDBACK)
            form_score -= 10
        elif legs_apart and not arms_up:
            feedback.append(self.ARMS_FEEDBACK)
            form_score -= 10
        elif arms_up and legs_apart:
            feedback.append(self.GOOD_FEEDBACK)

        phase = previous_phase
        is_rep = False
        if arms_up and legs_apart:
            phase = ExercisePhase.UP
        elif metrics['arms_down'] and metrics['legs_together']:
            phase = ExercisePhase.DOWN
            if previous_phase == ExercisePhase.UP:
                is_rep = True
                feedback = [self.REP_FEEDBACK]

        return DetectionResult(phase=phase, is_rep=is_rep,
                               form_score=self.clamp_score(form_score), feedback=feedback)


def detect_jumping_jack(landmarks, previous_phase=ExercisePhase.NEUTRAL):
    return JumpingJackAnalyzer().detect(landmarks, previous_phase)
