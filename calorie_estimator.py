from typing import Optional, Sequence

import numpy as np

from landmarks import Landmark

DEFAULT_BODY_WEIGHT_KG = 70.0

# (upper bound on mean landmark displacement per frame, MET)
MET_TIERS = [
    (0.01, 3.0),   # light
    (0.03, 6.0),   # moderate
]
VIGOROUS_MET = 9.0


def movement_to_met(avg_velocity: float) -> float:
    """Map the mean per-landmark displacement to a metabolic equivalent tier."""
    for upper_bound, met in MET_TIERS:
        if avg_velocity < upper_bound:
            return met
    return VIGOROUS_MET


def average_displacement(landmarks: Sequence[Landmark], prev_landmarks: Sequence[Landmark]) -> float:
    """Mean 2D displacement of the landmarks present in both frames."""
    count = min(len(landmarks), len(prev_landmarks))
    if count == 0:
        return 0.0
    current = np.array([[lm.x, lm.y] for lm in landmarks[:count]])
    previous = np.array([[lm.x, lm.y] for lm in prev_landmarks[:count]])
    total_movement = np.linalg.norm(current - previous, axis=1).sum()
    return float(total_movement / len(landmarks))


def estimate_calories(landmarks: Optional[Sequence[Landmark]],
                      prev_landmarks: Optional[Sequence[Landmark]],
                      elapsed_seconds: float,
                      weight_kg: float = DEFAULT_BODY_WEIGHT_KG) -> float:
    """
    Estimate calories burned over `elapsed_seconds` from movement velocity.

    calories per minute = MET * weight_kg * 3.5 / 200, scaled to the elapsed
    time. Returns 0 without a previous frame, for a non-positive duration, or
    when there is no movement at all.
    """
    if not landmarks or not prev_landmarks or elapsed_seconds <= 0:
        return 0.0

    avg_velocity = average_displacement(landmarks, prev_landmarks)
    if avg_velocity == 0:
        return 0.0

    met = movement_to_met(avg_velocity)
    calories_per_minute = (met * weight_kg * 3.5) / 200
    return calories_per_minute * elapsed_seconds / 60
