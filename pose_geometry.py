import numpy as np

from landmarks import Landmark


def angle_degrees(a: Landmark, b: Landmark, c: Landmark) -> float:
    """
    Angle at vertex b formed by the rays b->a and b->c, in [0, 180].

    Computed from the difference of the two atan2 bearings, with reflex
    angles folded back (360 - angle). Coincident points give 0.
    """
    radians = np.arctan2(c.y - b.y, c.x - b.x) - np.arctan2(a.y - b.y, a.x - b.x)
    angle = np.abs(np.degrees(radians))
    if angle > 180.0:
        angle = 360.0 - angle
    return float(angle)


def distance(a: Landmark, b: Landmark) -> float:
    """Euclidean distance in the image plane (z ignored)."""
    return float(np.hypot(b.x - a.x, b.y - a.y))
