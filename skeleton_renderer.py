from typing import Dict, List, Optional, Sequence, Tuple

import cv2
import numpy as np

from landmarks import Landmark, PoseLandmark, get_landmark

# BGR colours
FACE_COLOR = (136, 255, 0)
TORSO_COLOR = (255, 255, 0)
ARM_COLOR = (255, 0, 255)
LEG_COLOR = (0, 255, 255)
GOOD_JOINT_COLOR = (136, 255, 0)
ISSUE_COLOR = (68, 68, 255)
WHITE = (255, 255, 255)

MIN_DRAW_VISIBILITY = 0.5

P = PoseLandmark
SKELETON_CONNECTIONS: List[Tuple[int, int, Tuple[int, int, int]]] = [
    # Face
    (P.LEFT_EAR, P.LEFT_EYE, FACE_COLOR),
    (P.LEFT_EYE, P.NOSE, FACE_COLOR),
    (P.NOSE, P.RIGHT_EYE, FACE_COLOR),
    (P.RIGHT_EYE, P.RIGHT_EAR, FACE_COLOR),
    # Torso
    (P.LEFT_SHOULDER, P.RIGHT_SHOULDER, TORSO_COLOR),
    (P.LEFT_SHOULDER, P.LEFT_HIP, TORSO_COLOR),
    (P.RIGHT_SHOULDER, P.RIGHT_HIP, TORSO_COLOR),
    (P.LEFT_HIP, P.RIGHT_HIP, TORSO_COLOR),
    # Arms
    (P.LEFT_SHOULDER, P.LEFT_ELBOW, ARM_COLOR),
    (P.LEFT_ELBOW, P.LEFT_WRIST, ARM_COLOR),
    (P.LEFT_WRIST, P.LEFT_PINKY, ARM_COLOR),
    (P.LEFT_WRIST, P.LEFT_INDEX, ARM_COLOR),
    (P.LEFT_WRIST, P.LEFT_THUMB, ARM_COLOR),
    (P.RIGHT_SHOULDER, P.RIGHT_ELBOW, ARM_COLOR),
    (P.RIGHT_ELBOW, P.RIGHT_WRIST, ARM_COLOR),
    (P.RIGHT_WRIST, P.RIGHT_PINKY, ARM_COLOR),
    (P.RIGHT_WRIST, P.RIGHT_INDEX, ARM_COLOR),
    (P.RIGHT_WRIST, P.RIGHT_THUMB, ARM_COLOR),
    # Legs
    (P.LEFT_HIP, P.LEFT_KNEE, LEG_COLOR),
    (P.LEFT_KNEE, P.LEFT_ANKLE, LEG_COLOR),
    (P.LEFT_ANKLE, P.LEFT_HEEL, LEG_COLOR),
    (P.LEFT_HEEL, P.LEFT_FOOT_INDEX, LEG_COLOR),
    (P.LEFT_ANKLE, P.LEFT_FOOT_INDEX, LEG_COLOR),
    (P.RIGHT_HIP, P.RIGHT_KNEE, LEG_COLOR),
    (P.RIGHT_KNEE, P.RIGHT_ANKLE, LEG_COLOR),
    (P.RIGHT_ANKLE, P.RIGHT_HEEL, LEG_COLOR),
    (P.RIGHT_HEEL, P.RIGHT_FOOT_INDEX, LEG_COLOR),
    (P.RIGHT_ANKLE, P.RIGHT_FOOT_INDEX, LEG_COLOR),
]

KEY_JOINTS = [
    P.NOSE,
    P.LEFT_SHOULDER, P.RIGHT_SHOULDER,
    P.LEFT_ELBOW, P.RIGHT_ELBOW,
    P.LEFT_WRIST, P.RIGHT_WRIST,
    P.LEFT_HIP, P.RIGHT_HIP,
    P.LEFT_KNEE, P.RIGHT_KNEE,
    P.LEFT_ANKLE, P.RIGHT_ANKLE,
]


class SkeletonRenderer:
    """Draws the renderer feed of a WorkoutSession onto BGR frames."""

    def __init__(self, mirrored: bool = False):
        self.mirrored = mirrored

    def _to_pixel(self, landmark: Landmark, w: int, h: int) -> Tuple[int, int]:
        x = landmark.x * w
        if self.mirrored:
            x = w - x
        return int(x), int(landmark.y * h)

    @staticmethod
    def _drawable(landmark: Optional[Landmark]) -> bool:
        return landmark is not None and landmark.effective_visibility > MIN_DRAW_VISIBILITY

    def draw(self, frame: np.ndarray, feed: Dict) -> np.ndarray:
        """Draw connections and key joints; joints flagged incorrect are drawn red."""
        landmarks: Sequence[Landmark] = feed.get('landmarks')
        if not landmarks:
            return frame
        flagged = {f['joint_index'] for f in feed.get('form_feedback', []) if not f['is_correct']}

        h, w = frame.shape[:2]
        segments = []
        for start_idx, end_idx, color in SKELETON_CONNECTIONS:
            start = get_landmark(landmarks, start_idx)
            end = get_landmark(landmarks, end_idx)
            if not (self._drawable(start) and self._drawable(end)):
                continue
            line_color = ISSUE_COLOR if (start_idx in flagged or end_idx in flagged) else color
            segments.append((self._to_pixel(start, w, h), self._to_pixel(end, w, h), line_color))

        # Soft glow under solid lines
        overlay = frame.copy()
        for start_pixel, end_pixel, line_color in segments:
            cv2.line(overlay, start_pixel, end_pixel, line_color, 8, cv2.LINE_AA)
        cv2.addWeighted(overlay, 0.3, frame, 0.7, 0, dst=frame)
        for start_pixel, end_pixel, line_color in segments:
            cv2.line(frame, start_pixel, end_pixel, line_color, 4, cv2.LINE_AA)

        for joint in KEY_JOINTS:
            landmark = get_landmark(landmarks, joint)
            if not self._drawable(landmark):
                continue
            color = ISSUE_COLOR if joint in flagged else GOOD_JOINT_COLOR
            center = self._to_pixel(landmark, w, h)
            cv2.circle(frame, center, 6, color, -1, cv2.LINE_AA)
            cv2.circle(frame, center, 3, WHITE, -1, cv2.LINE_AA)
        return frame

    def draw_hud(self, frame: np.ndarray, ui_feed: Dict) -> np.ndarray:
        """Write counters, form score and feedback in the top-left corner."""
        unit = "s" if ui_feed.get('exercise') == 'planks' else ""
        minutes, seconds = divmod(ui_feed.get('elapsed_seconds', 0), 60)
        lines = [
            f"{ui_feed.get('exercise_name') or 'No exercise'} [{ui_feed.get('session_state')}]",
            f"Count: {ui_feed.get('count', 0)}{unit} / {ui_feed.get('target', 0)}{unit}",
            f"Form: {ui_feed.get('form_score', 0)}  Calories: {ui_feed.get('calories', 0):.1f}  "
            f"XP: {ui_feed.get('total_xp', 0)}",
            f"Time: {minutes:02d}:{seconds:02d}",
        ]
        plan = ui_feed.get('plan')
        if plan and ui_feed.get('session_state') == 'configured':
            lines.append(f"Plan: ~{plan['estimated_calories']} kcal, ~{plan['estimated_seconds']}s, "
                         f"{plan['xp_preview']} XP")
        lines.extend(ui_feed.get('feedback', [])[:3])

        for i, text in enumerate(lines):
            y = 30 + i * 28
            cv2.putText(frame, text, (12, y), cv2.FONT_HERSHEY_SIMPLEX, 0.7, (0, 0, 0), 4, cv2.LINE_AA)
            cv2.putText(frame, text, (12, y), cv2.FONT_HERSHEY_SIMPLEX, 0.7, WHITE, 2, cv2.LINE_AA)
        return frame
