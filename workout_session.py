import logging
import math
import time
from typing import Callable, Dict, Optional, Sequence

from analyzers.analyzer_factory import get_analyzer
from analyzers.base_analyzer import BaseAnalyzer
from audio_coaching import AudioCoach
from calorie_estimator import DEFAULT_BODY_WEIGHT_KG, estimate_calories
from landmarks import Landmark
from models import (EXERCISE_INFO, ExerciseType, SessionState, SessionStatus, estimate_plan,
                    parse_exercise_type)

XP_SCORE_DIVISOR = 20


class WorkoutSession:
    """
    Stateful orchestrator for one workout.

    Owns the session state and drives it from two entry points: `apply_frame`
    for every landmark frame from the pose source, and `apply_tick` once per
    second from the timer. Both run to completion before returning, so the
    state is only ever touched by one event at a time.

    Lifecycle: idle -> configured -> tracking <-> paused -> completed.
    `reset` returns to configured with zeroed counters from any state, and
    selecting an exercise always re-enters configured.
    """

    def __init__(self, audio_coach: Optional[AudioCoach] = None,
                 on_render: Optional[Callable[[Dict], None]] = None,
                 body_weight_kg: float = DEFAULT_BODY_WEIGHT_KG,
                 clock: Callable[[], float] = time.monotonic):
        self.audio_coach = audio_coach or AudioCoach(announcer=None)
        self.on_render = on_render
        self.body_weight_kg = body_weight_kg
        self.clock = clock

        self.state = SessionState()
        self.analyzer: Optional[BaseAnalyzer] = None
        self.last_frame_time = None
        self.last_frame_holding = False
        self.plan: Dict[str, int] = {}
        self.scored_frames = 0
        self.form_score_total = 0

    def select_exercise(self, exercise, target: Optional[int] = None) -> SessionStatus:
        """Choose an exercise and target; counters are zeroed and tracking stops."""
        exercise = parse_exercise_type(exercise)
        info = EXERCISE_INFO[exercise]
        target = info.default_target if target is None else target
        validate_target(exercise, target)

        self.state.exercise = exercise
        self.state.target = target
        self.analyzer = get_analyzer(exercise)
        self._clear_counters()
        self.plan = estimate_plan(exercise, target)
        self.state.status = SessionStatus.CONFIGURED
        logging.info(f"Selected {info.name} with target {target}: about {self.plan['estimated_calories']} kcal "
                     f"in {self.plan['estimated_seconds']}s, {self.plan['xp_preview']} XP preview")
        return self.state.status

    def start(self, exercise=None, target: Optional[int] = None) -> SessionStatus:
        """Start tracking. With an exercise, (re)configures first."""
        if exercise is not None:
            self.select_exercise(exercise, target)
        if self.state.status in (SessionStatus.IDLE, SessionStatus.COMPLETED):
            raise ValueError(f"Cannot start a workout from state '{self.state.status.value}'")
        if self.state.status == SessionStatus.TRACKING:
            return self.state.status

        if self.state.status == SessionStatus.CONFIGURED:
            self.audio_coach.announce_workout_start(self.exercise_name, self.state.target)
        self._set_tracking(True)
        logging.info(f"Tracking {self.exercise_name}")
        return self.state.status

    def pause(self) -> SessionStatus:
        if self.state.status != SessionStatus.TRACKING:
            return self.state.status
        self._set_tracking(False)
        self.state.status = SessionStatus.PAUSED
        self.audio_coach.announce_workout_pause()
        logging.info(f"Paused at {self.count}/{self.state.target}")
        return self.state.status

    def resume(self) -> SessionStatus:
        if self.state.status != SessionStatus.PAUSED:
            return self.state.status
        self._set_tracking(True)
        logging.info("Resumed tracking")
        return self.state.status

    def toggle_tracking(self) -> SessionStatus:
        if self.state.status == SessionStatus.TRACKING:
            return self.pause()
        if self.state.status == SessionStatus.PAUSED:
            return self.resume()
        if self.state.status == SessionStatus.CONFIGURED:
            return self.start()
        return self.state.status

    def reset(self) -> SessionStatus:
        """Zero all counters and return to configured (idle if nothing was selected)."""
        self._clear_counters()
        self.state.status = SessionStatus.CONFIGURED if self.state.exercise else SessionStatus.IDLE
        logging.info("Session reset")
        return self.state.status

    def stop(self) -> SessionStatus:
        """End the camera session: halt tracking and cancel any pending speech."""
        if self.state.status == SessionStatus.TRACKING:
            self._set_tracking(False)
            self.state.status = SessionStatus.PAUSED
        self.audio_coach.cancel()
        return self.state.status

    def apply_frame(self, landmarks: Optional[Sequence[Landmark]]) -> Dict:
        """Process one pose frame. Null frames and frames outside tracking are ignored."""
        if not self.state.is_tracking:
            return self.snapshot()
        if not landmarks:
            # Nobody in view: the next tick must not credit a hold
            self.last_frame_holding = False
            return self.snapshot()

        now = self.clock()
        elapsed = now - self.last_frame_time if self.last_frame_time is not None else 0
        self.state.calories_accumulated += estimate_calories(
            landmarks, self.state.previous_landmarks, elapsed, self.body_weight_kg)
        self.last_frame_time = now

        result = self.analyzer.detect(landmarks, self.state.phase)
        self.last_frame_holding = (result is not None and not self.analyzer.counts_reps
                                   and result.is_holding)
        if result is not None:
            self._apply_result(result)

        self.state.previous_landmarks = list(landmarks)
        if self.on_render is not None:
            self.on_render(self.renderer_feed())
        return self.snapshot()

    def apply_tick(self) -> Dict:
        """Once-per-second timer tick. Credits a plank second only while holding."""
        if not self.state.is_tracking:
            return self.snapshot()

        self.state.elapsed_seconds += 1

        if not self.analyzer.counts_reps and self.last_frame_holding:
            self.state.hold_seconds += 1
            self.audio_coach.announce_plank_time(self.state.hold_seconds)
            self._check_completion()
        return self.snapshot()

    @property
    def exercise_name(self) -> str:
        if self.state.exercise is None:
            return ""
        return EXERCISE_INFO[self.state.exercise].name

    @property
    def count(self) -> int:
        if self.analyzer is not None and not self.analyzer.counts_reps:
            return self.state.hold_seconds
        return self.state.rep_count

    def snapshot(self) -> Dict:
        """UI feed for on-screen display."""
        state = self.state
        return {
            'exercise': state.exercise.value if state.exercise else None,
            'exercise_name': self.exercise_name,
            'target': state.target,
            'rep_count': state.rep_count,
            'hold_seconds': state.hold_seconds,
            'count': self.count,
            'form_score': state.form_score,
            'feedback': list(state.feedback),
            'calories': state.calories_accumulated,
            'total_xp': state.total_xp,
            'elapsed_seconds': state.elapsed_seconds,
            'phase': state.phase.value,
            'session_state': state.status.value,
            'is_tracking': state.is_tracking,
            'plan': dict(self.plan),
        }

    def renderer_feed(self) -> Dict:
        """Landmarks plus per-joint correctness flags for the skeleton overlay."""
        flags = self.analyzer.joint_flags(self.state.feedback) if self.analyzer else []
        return {
            'landmarks': self.state.previous_landmarks,
            'form_feedback': flags,
        }

    def get_summary(self) -> Dict:
        """Compile the end-of-workout summary."""
        average_form = (self.form_score_total / self.scored_frames) if self.scored_frames else 0
        return {
            'exercise': self.state.exercise.value if self.state.exercise else None,
            'exercise_name': self.exercise_name,
            'target': self.state.target,
            'count': self.count,
            'completed': self.state.status == SessionStatus.COMPLETED,
            'duration_seconds': self.state.elapsed_seconds,
            'calories': round(self.state.calories_accumulated, 2),
            'total_xp': self.state.total_xp,
            'average_form_score': round(average_form, 1),
        }

    def _apply_result(self, result):
        state = self.state
        state.form_score = result.form_score
        state.feedback = list(result.feedback)
        self.scored_frames += 1
        self.form_score_total += result.form_score

        if self.analyzer.counts_reps:
            state.phase = result.phase
            if result.is_rep:
                state.rep_count += 1
                xp = xp_for_rep(result.form_score)
                state.total_xp += xp
                logging.info(f"{self.exercise_name} rep {state.rep_count} "
                             f"(form {result.form_score}, +{xp} XP)")
                self.audio_coach.announce_rep_count(state.rep_count, self.exercise_name)
                self._check_completion()

        if state.feedback and state.is_tracking:
            self.audio_coach.announce_form_correction(state.feedback)

    def _check_completion(self):
        state = self.state
        if state.completion_announced or self.count < state.target:
            return
        state.completion_announced = True
        self._set_tracking(False)
        state.status = SessionStatus.COMPLETED
        logging.info(f"Completed {self.count} {self.exercise_name} in {state.elapsed_seconds}s")
        self.audio_coach.announce_workout_complete(self.count, self.exercise_name)

    def _set_tracking(self, tracking: bool):
        self.state.is_tracking = tracking
        if tracking:
            self.state.status = SessionStatus.TRACKING
        else:
            # Stale frames must not be hold-credited or used for velocity after a pause
            self.state.previous_landmarks = None
            self.last_frame_time = None
            self.last_frame_holding = False

    def _clear_counters(self):
        self.state.reset_counters()
        self.last_frame_time = None
        self.last_frame_holding = False
        self.scored_frames = 0
        self.form_score_total = 0
        self.audio_coach.reset()


def xp_for_rep(form_score: int) -> int:
    """0-5 XP per rep, scaled by form quality (half-up rounding)."""
    return int(math.floor(form_score / XP_SCORE_DIVISOR + 0.5))


def validate_target(exercise: ExerciseType, target) -> None:
    info = EXERCISE_INFO[exercise]
    if not isinstance(target, int) or isinstance(target, bool):
        raise ValueError(f"Target must be an integer, got {target!r}")
    if not info.min_target <= target <= info.max_target:
        raise ValueError(f"Target for {info.name} must be between {info.min_target} "
                         f"and {info.max_target}, got {target}")
