from abc import ABC, abstractmethod
import logging
from typing import Dict, Optional

from models import ExerciseType

TOGGLE = "toggle"
PAUSE = "pause"
RESUME = "resume"
RESET = "reset"
STOP = "stop"
QUIT = "quit"
SELECT_PREFIX = "select:"

EXERCISE_KEYS = {
    ord('1'): ExerciseType.SQUATS,
    ord('2'): ExerciseType.PUSHUPS,
    ord('3'): ExerciseType.LUNGES,
    ord('4'): ExerciseType.PLANKS,
    ord('5'): ExerciseType.JUMPING_JACKS,
}


class CommandRecognizer(ABC):
    """Capability interface for sources of user control commands."""

    def start(self):
        pass

    @abstractmethod
    def poll(self) -> Optional[str]:
        """Return the next pending command, or None."""
        pass

    def stop(self):
        pass


class KeyboardCommandRecognizer(CommandRecognizer):
    """Turns OpenCV key codes (from cv2.waitKey) into commands."""

    KEYMAP: Dict[int, str] = {
        ord(' '): TOGGLE,
        ord('p'): TOGGLE,
        ord('r'): RESET,
        ord('q'): QUIT,
        27: QUIT,  # Esc
    }

    def __init__(self):
        self.pending = None

    def feed_key(self, key: int):
        key &= 0xFF
        if key in EXERCISE_KEYS:
            self.pending = SELECT_PREFIX + EXERCISE_KEYS[key].value
        else:
            self.pending = self.KEYMAP.get(key)

    def poll(self) -> Optional[str]:
        command, self.pending = self.pending, None
        return command


def apply_command(session, command: Optional[str]) -> bool:
    """
    Dispatch a control command to a WorkoutSession.
    Returns False for commands the session does not handle (e.g. quit).
    """
    if not command:
        return False
    if command == TOGGLE:
        session.toggle_tracking()
    elif command == PAUSE:
        session.pause()
    elif command == RESUME:
        session.resume()
    elif command == RESET:
        session.reset()
    elif command == STOP:
        session.stop()
    elif command.startswith(SELECT_PREFIX):
        session.select_exercise(command[len(SELECT_PREFIX):])
    else:
        logging.warning(f"Ignoring unknown command: {command}")
        return False
    return True
