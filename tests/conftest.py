import math

import pytest

from audio_coaching import AudioCoach, SpeechAnnouncer
from landmarks import NUM_LANDMARKS, Landmark, PoseLandmark

# A person standing upright facing the camera
STANDING = {
    PoseLandmark.NOSE: (0.50, 0.10),
    PoseLandmark.LEFT_EYE_INNER: (0.49, 0.08), PoseLandmark.LEFT_EYE: (0.48, 0.08),
    PoseLandmark.LEFT_EYE_OUTER: (0.47, 0.08), PoseLandmark.RIGHT_EYE_INNER: (0.51, 0.08),
    PoseLandmark.RIGHT_EYE: (0.52, 0.08), PoseLandmark.RIGHT_EYE_OUTER: (0.53, 0.08),
    PoseLandmark.LEFT_EAR: (0.46, 0.09), PoseLandmark.RIGHT_EAR: (0.54, 0.09),
    PoseLandmark.MOUTH_LEFT: (0.49, 0.13), PoseLandmark.MOUTH_RIGHT: (0.51, 0.13),
    PoseLandmark.LEFT_SHOULDER: (0.40, 0.30), PoseLandmark.RIGHT_SHOULDER: (0.60, 0.30),
    PoseLandmark.LEFT_ELBOW: (0.38, 0.42), PoseLandmark.RIGHT_ELBOW: (0.62, 0.42),
    PoseLandmark.LEFT_WRIST: (0.38, 0.52), PoseLandmark.RIGHT_WRIST: (0.62, 0.52),
    PoseLandmark.LEFT_PINKY: (0.38, 0.54), PoseLandmark.RIGHT_PINKY: (0.62, 0.54),
    PoseLandmark.LEFT_INDEX: (0.38, 0.54), PoseLandmark.RIGHT_INDEX: (0.62, 0.54),
    PoseLandmark.LEFT_THUMB: (0.39, 0.53), PoseLandmark.RIGHT_THUMB: (0.61, 0.53),
    PoseLandmark.LEFT_HIP: (0.45, 0.55), PoseLandmark.RIGHT_HIP: (0.55, 0.55),
    PoseLandmark.LEFT_KNEE: (0.45, 0.72), PoseLandmark.RIGHT_KNEE: (0.55, 0.72),
    PoseLandmark.LEFT_ANKLE: (0.45, 0.90), PoseLandmark.RIGHT_ANKLE: (0.55, 0.90),
    PoseLandmark.LEFT_HEEL: (0.44, 0.92), PoseLandmark.RIGHT_HEEL: (0.56, 0.92),
    PoseLandmark.LEFT_FOOT_INDEX: (0.45, 0.95), PoseLandmark.RIGHT_FOOT_INDEX: (0.55, 0.95),
}


def make_pose(points=None, visibility=1.0):
    """33 landmarks: the standing pose with `points` ({PoseLandmark: (x, y)}) overriding it."""
    coords = dict(STANDING)
    coords.update(points or {})
    assert len(coords) == NUM_LANDMARKS
    return [Landmark(x=coords[i][0], y=coords[i][1], z=0.0, visibility=visibility)
            for i in PoseLandmark]


def rotated(origin, length, angle_deg):
    """Point at `length` from origin such that the angle with the upward ray is `angle_deg`."""
    theta = math.radians(angle_deg)
    return (origin[0] + length * math.sin(theta), origin[1] - length * math.cos(theta))


def squat_pose(knee_angle, shoulder=(0.45, 0.25)):
    left_knee, right_knee = (0.45, 0.70), (0.55, 0.70)
    return make_pose({
        PoseLandmark.LEFT_SHOULDER: shoulder,
        PoseLandmark.LEFT_HIP: (0.45, 0.50), PoseLandmark.RIGHT_HIP: (0.55, 0.50),
        PoseLandmark.LEFT_KNEE: left_knee, PoseLandmark.RIGHT_KNEE: right_knee,
        PoseLandmark.LEFT_ANKLE: rotated(left_knee, 0.2, knee_angle),
        PoseLandmark.RIGHT_ANKLE: rotated(right_knee, 0.2, knee_angle),
    })


def pushup_pose(elbow_angle, body_angle=178.0):
    shoulder, hip = (0.30, 0.50), (0.50, 0.50)
    elbow = (0.30, 0.65)
    phi = math.radians(body_angle)
    return make_pose({
        PoseLandmark.LEFT_SHOULDER: shoulder,
        PoseLandmark.LEFT_ELBOW: elbow,
        PoseLandmark.LEFT_WRIST: rotated(elbow, 0.15, elbow_angle),
        PoseLandmark.LEFT_HIP: hip,
        PoseLandmark.LEFT_ANKLE: (hip[0] - 0.3 * math.cos(phi), hip[1] + 0.3 * math.sin(phi)),
    })


def lunge_pose(knee_angle, ankle=None):
    knee = (0.50, 0.60)
    return make_pose({
        PoseLandmark.LEFT_HIP: (0.50, 0.40),
        PoseLandmark.LEFT_KNEE: knee,
        PoseLandmark.LEFT_ANKLE: ankle or rotated(knee, 0.2, knee_angle),
    })


def plank_pose(hip_y=0.51, shoulder_y=0.50, ankle_y=0.52):
    return make_pose({
        PoseLandmark.LEFT_SHOULDER: (0.20, shoulder_y),
        PoseLandmark.LEFT_HIP: (0.50, hip_y),
        PoseLandmark.LEFT_ANKLE: (0.80, ankle_y),
    })


def jumping_jack_pose(arms_up, legs_apart):
    arm_y = (0.10, 0.20) if arms_up else (0.55, 0.42)  # (wrist, elbow)
    ankle_x = (0.30, 0.70) if legs_apart else (0.45, 0.55)
    return make_pose({
        PoseLandmark.LEFT_WRIST: (0.35, arm_y[0]), PoseLandmark.RIGHT_WRIST: (0.65, arm_y[0]),
        PoseLandmark.LEFT_ELBOW: (0.37, arm_y[1]), PoseLandmark.RIGHT_ELBOW: (0.63, arm_y[1]),
        PoseLandmark.LEFT_ANKLE: (ankle_x[0], 0.90), PoseLandmark.RIGHT_ANKLE: (ankle_x[1], 0.90),
    })


class FakeClock:
    def __init__(self, start=0.0, step=0.0):
        self.now = start
        self.step = step

    def __call__(self):
        value = self.now
        self.now += self.step
        return value

    def advance(self, seconds):
        self.now += seconds


class RecordingAnnouncer(SpeechAnnouncer):
    def __init__(self):
        self.spoken = []
        self.pending = []
        self.cancel_count = 0

    def speak(self, text, interrupt=False):
        if interrupt:
            self.cancel()
        self.spoken.append((text, interrupt))
        self.pending.append(text)

    def cancel(self):
        self.cancel_count += 1
        self.pending = []

    @property
    def texts(self):
        return [text for text, _ in self.spoken]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def announcer():
    return RecordingAnnouncer()


@pytest.fixture
def coach(announcer, clock):
    return AudioCoach(announcer, clock=clock)
