from dataclasses import dataclass
from enum import IntEnum
from typing import List, Optional, Sequence


class PoseLandmark(IntEnum):
    """The 33 body keypoints emitted per frame, in MediaPipe Pose order."""
    NOSE = 0
    LEFT_EYE_INNER = 1
    LEFT_EYE = 2
    LEFT_EYE_OUTER = 3
    RIGHT_EYE_INNER = 4
    RIGHT_EYE = 5
    RIGHT_EYE_OUTER = 6
    LEFT_EAR = 7
    RIGHT_EAR = 8
    MOUTH_LEFT = 9
    MOUTH_RIGHT = 10
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16
    LEFT_PINKY = 17
    RIGHT_PINKY = 18
    LEFT_INDEX = 19
    RIGHT_INDEX = 20
    LEFT_THUMB = 21
    RIGHT_THUMB = 22
    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26
    LEFT_ANKLE = 27
    RIGHT_ANKLE = 28
    LEFT_HEEL = 29
    RIGHT_HEEL = 30
    LEFT_FOOT_INDEX = 31
    RIGHT_FOOT_INDEX = 32


NUM_LANDMARKS = len(PoseLandmark)
MIN_VISIBILITY = 0.5


@dataclass(frozen=True)
class Landmark:
    """A normalized body keypoint. x/y are in [0, 1] relative to the frame."""
    x: float
    y: float
    z: float = 0.0
    visibility: Optional[float] = None

    @property
    def effective_visibility(self) -> float:
        """Visibility with an absent value treated as fully visible."""
        return 1.0 if self.visibility is None else self.visibility


def from_mediapipe(pose_landmarks) -> List[Landmark]:
    """Convert a MediaPipe NormalizedLandmarkList (or its .landmark) into Landmarks."""
    raw = getattr(pose_landmarks, "landmark", pose_landmarks)
    return [
        Landmark(x=lm.x, y=lm.y, z=lm.z, visibility=getattr(lm, "visibility", None))
        for lm in raw
    ]


def get_landmark(landmarks: Sequence[Landmark], index: int) -> Optional[Landmark]:
    if landmarks is None or index < 0 or index >= len(landmarks):
        return None
    return landmarks[index]


def is_visible(landmark: Optional[Landmark], threshold: float = MIN_VISIBILITY) -> bool:
    return landmark is not None and landmark.effective_visibility >= threshold
