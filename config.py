import os


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


CAMERA_INDEX = int(os.environ.get("CAMERA_INDEX", 0))
MODEL_COMPLEXITY = int(os.environ.get("MODEL_COMPLEXITY", 1))
MIRROR_VIEW = _env_bool("MIRROR_VIEW", True)

BODY_WEIGHT_KG = float(os.environ.get("BODY_WEIGHT_KG", 70))
DEFAULT_EXERCISE = os.environ.get("DEFAULT_EXERCISE", "squats")

AUDIO_ENABLED = _env_bool("AUDIO_ENABLED", True)
SPEECH_RATE = int(os.environ.get("SPEECH_RATE", 176))  # words per minute, ~1.1x the engine default

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
WINDOW_NAME = "Workout Monitor"
