"""
Audio coaching: a rate-limited, priority-aware announcer for workout events.

The dispatcher (AudioCoach) decides *what* to say and *when*; the speech engine
behind the SpeechAnnouncer interface decides *how*. Speech is fire-and-forget
and best-effort: an unavailable or failing engine never affects rep counting.
"""

from abc import ABC, abstractmethod
import logging
import queue
import threading
import time
from typing import Callable, Optional, Sequence

HIGH = "high"
LOW = "low"

FEEDBACK_COOLDOWN_SECONDS = 3.0

# Messages containing one of these are encouragement, not corrections.
# Matching on a bare "Keep" would also silence "Keep your back straight!", so it is not used.
POSITIVE_MARKERS = ("Great", "Keep it up", "Keep going", "Keep holding", "Rep counted")

REP_MILESTONES = {
    5: "5 reps! Great start!",
    10: "10! Halfway there!",
    15: "15! Almost done!",
    20: "20 reps! Excellent work!",
}

PLANK_CHECKPOINTS = {
    10: "10 seconds!",
    30: "30 seconds! Keep holding!",
    60: "One minute! Amazing!",
    90: "90 seconds! Incredible!",
    120: "Two minutes! You are a champion!",
}


class AudioUnavailableError(RuntimeError):
    """Raised when a speech engine cannot be initialized."""


class SpeechAnnouncer(ABC):
    """Capability interface for a text-to-speech engine."""

    def init(self):
        pass

    def start(self):
        pass

    @abstractmethod
    def speak(self, text: str, interrupt: bool = False):
        """Queue `text` for speech and return immediately. `interrupt` cancels current speech first."""
        pass

    @abstractmethod
    def cancel(self):
        """Drop the current utterance and anything still queued."""
        pass

    def stop(self):
        self.cancel()

    def dispose(self):
        self.stop()


class NullAnnouncer(SpeechAnnouncer):
    """Announcer used when no speech engine is available."""

    def speak(self, text: str, interrupt: bool = False):
        logging.debug(f"[speech disabled] {text}")

    def cancel(self):
        pass


class Pyttsx3Announcer(SpeechAnnouncer):
    """
    pyttsx3-backed announcer. The engine lives on a worker thread fed by a
    queue, so `speak` never blocks the frame loop.
    """

    def __init__(self, rate: int = 176, volume: float = 0.9):
        self.rate = rate
        self.volume = volume
        self._queue = queue.Queue()
        self._thread = None
        self._engine = None
        self._ready = threading.Event()
        self._cancel_requested = threading.Event()
        self._init_error = None

    def init(self):
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._worker, name="speech-worker", daemon=True)
        self._thread.start()
        self._ready.wait(timeout=5.0)
        if self._init_error is not None or self._engine is None:
            self._thread = None
            raise AudioUnavailableError(f"Could not initialize speech engine: {self._init_error}")
        logging.info("Speech engine initialized (pyttsx3)")

    def _worker(self):
        # pyttsx3 engines must be created and driven on the same thread
        try:
            import pyttsx3
            engine = pyttsx3.init()
            engine.setProperty("rate", self.rate)
            engine.setProperty("volume", self.volume)
            engine.connect("started-word", self._on_word)
            self._engine = engine
        except Exception as e:
            self._init_error = e
            self._ready.set()
            return
        self._ready.set()

        while True:
            text = self._queue.get()
            if text is None:
                break
            self._cancel_requested.clear()
            try:
                engine.say(text)
                engine.runAndWait()
            except Exception as e:
                logging.warning(f"Speech error: {e}")
            finally:
                self._queue.task_done()

    def _on_word(self, name, location, length):
        # Runs on the worker thread inside runAndWait, the only place stop() is safe
        if self._cancel_requested.is_set():
            self._engine.stop()

    def speak(self, text: str, interrupt: bool = False):
        if self._thread is None:
            return
        if interrupt:
            self.cancel()
        self._queue.put(text)

    def cancel(self):
        """Drop queued text; the worker stops the current utterance at its next word."""
        while True:
            try:
                self._queue.get_nowait()
                self._queue.task_done()
            except queue.Empty:
                break
        self._cancel_requested.set()

    def dispose(self):
        if self._thread is None:
            return
        self.cancel()
        self._queue.put(None)
        self._thread.join(timeout=2.0)
        self._thread = None
        self._engine = None


class AudioCoach:
    """
    Decides which workout events are spoken.

    Two priorities: HIGH (rep counts, milestones, start/pause/complete)
    interrupts current speech, LOW (form corrections) does not. Corrections
    are skipped when positive or when the same message was spoken within the
    cooldown window. Each rep count is announced at most once.
    """

    def __init__(self, announcer: Optional[SpeechAnnouncer] = None, enabled: bool = True,
                 feedback_cooldown: float = FEEDBACK_COOLDOWN_SECONDS,
                 clock: Callable[[], float] = time.monotonic):
        self.announcer = announcer
        self.enabled = enabled
        self.feedback_cooldown = feedback_cooldown
        self.clock = clock

        self.last_feedback = ""
        self.last_feedback_time = None
        self.last_rep_count = 0

    @property
    def available(self) -> bool:
        return self.enabled and self.announcer is not None

    def speak(self, text: str, priority: str = LOW) -> bool:
        """Hand `text` to the speech engine. Returns True if it was dispatched."""
        if not self.available or not text:
            return False
        try:
            self.announcer.speak(text, interrupt=(priority == HIGH))
        except Exception as e:
            logging.warning(f"Speech engine failed, continuing without audio: {e}")
            return False
        logging.debug(f"Announced ({priority}): {text}")
        return True

    def cancel(self):
        if self.announcer is None:
            return
        try:
            self.announcer.cancel()
        except Exception as e:
            logging.warning(f"Could not cancel speech: {e}")

    def announce_rep_count(self, count: int, exercise_name: str) -> bool:
        if not self.available or count == self.last_rep_count:
            return False
        self.last_rep_count = count

        if count == 1:
            text = f"First {exercise_name}! Keep going!"
        elif count in REP_MILESTONES:
            text = REP_MILESTONES[count]
        elif count % 10 == 0:
            text = f"{count}! Amazing!"
        else:
            # multiples of 5 and every other count: just the number
            text = f"{count}"
        return self.speak(text, HIGH)

    def announce_form_correction(self, feedback: Sequence[str]) -> bool:
        if not self.available or not feedback:
            return False

        main_feedback = feedback[0]
        if is_positive(main_feedback):
            return False

        now = self.clock()
        if (main_feedback == self.last_feedback and self.last_feedback_time is not None
                and now - self.last_feedback_time < self.feedback_cooldown):
            return False

        self.last_feedback = main_feedback
        self.last_feedback_time = now
        return self.speak(main_feedback, LOW)

    def announce_workout_start(self, exercise_name: str, target: int) -> bool:
        if not self.available:
            return False
        self.cancel()
        return self.speak(f"Starting {exercise_name}. Target: {target}. Let's go!", HIGH)

    def announce_workout_pause(self) -> bool:
        return self.speak("Workout paused", HIGH)

    def announce_workout_complete(self, count: int, exercise_name: str) -> bool:
        if not self.available:
            return False
        self.cancel()
        return self.speak(f"Congratulations! You completed {count} {exercise_name}! Great workout!", HIGH)

    def announce_plank_time(self, seconds: int) -> bool:
        if seconds not in PLANK_CHECKPOINTS:
            return False
        return self.speak(PLANK_CHECKPOINTS[seconds], HIGH)

    def reset(self):
        """Forget everything announced so far and cancel pending speech."""
        self.last_rep_count = 0
        self.last_feedback = ""
        self.last_feedback_time = None
        self.cancel()


def is_positive(message: str) -> bool:
    return any(marker in message for marker in POSITIVE_MARKERS)


def create_audio_coach(enabled: bool = True, rate: int = 176) -> AudioCoach:
    """Build a coach backed by pyttsx3, degrading to silence if the engine is missing."""
    if not enabled:
        return AudioCoach(NullAnnouncer(), enabled=False)
    announcer = Pyttsx3Announcer(rate=rate)
    try:
        announcer.init()
        announcer.start()
    except AudioUnavailableError as e:
        logging.warning(f"{e}. Audio coaching disabled.")
        return AudioCoach(NullAnnouncer(), enabled=False)
    return AudioCoach(announcer)
