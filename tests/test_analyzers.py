import pytest

from analyzers.analyzer_factory import get_analyzer
from analyzers.jumping_jack_analyzer import JumpingJackAnalyzer, detect_jumping_jack
from analyzers.lunge_analyzer import LungeAnalyzer, detect_lunge
from analyzers.plank_analyzer import PlankAnalyzer, detect_plank
from analyzers.pushup_analyzer import PushupAnalyzer, detect_pushup
from analyzers.squat_analyzer import SquatAnalyzer, detect_squat
from conftest import (jumping_jack_pose, lunge_pose, make_pose, plank_pose, pushup_pose,
                      squat_pose)
from landmarks import Landmark, PoseLandmark
from models import DetectionResult, ExercisePhase, ExerciseType, PlankResult

UP, DOWN, NEUTRAL = ExercisePhase.UP, ExercisePhase.DOWN, ExercisePhase.NEUTRAL


def run_sequence(detect, frames, phase=NEUTRAL):
    reps = 0
    for frame in frames:
        result = detect(frame, phase)
        phase = result.phase
        reps += result.is_rep
    return phase, reps


class TestSquat:
    def test_full_cycle_counts_one_rep(self):
        frames = [squat_pose(a) for a in (175, 130, 90, 130, 175)]
        phase, reps = run_sequence(detect_squat, frames)
        assert phase == UP
        assert reps == 1

    def test_mid_band_oscillation_counts_nothing(self):
        frames = [squat_pose(a) for a in (175, 130, 125, 135, 128, 132, 130)] * 5
        phase, reps = run_sequence(detect_squat, frames)
        assert reps == 0
        assert phase == UP

    def test_staying_up_does_not_double_count(self):
        frames = [squat_pose(a) for a in (90, 175, 176, 174, 175)]
        _, reps = run_sequence(detect_squat, frames)
        assert reps == 1

    def test_rep_requires_previous_down(self):
        result = detect_squat(squat_pose(175), NEUTRAL)
        assert result.phase == UP
        assert not result.is_rep

    def test_mid_band_keeps_previous_phase(self):
        assert detect_squat(squat_pose(130), DOWN).phase == DOWN
        assert detect_squat(squat_pose(130), NEUTRAL).phase == NEUTRAL

    def test_good_form(self):
        result = detect_squat(squat_pose(90), UP)
        assert result.form_score == 100
        assert result.feedback == []

    def test_forward_lean_penalized(self):
        result = detect_squat(squat_pose(90, shoulder=(0.70, 0.60)), UP)
        assert SquatAnalyzer.BACK_FEEDBACK in result.feedback
        assert result.form_score == 80

    def test_knee_valgus_penalized(self):
        metrics = {'avg_knee_angle': 95, 'hip_angle': 150, 'knee_distance': 0.07, 'ankle_distance': 0.1}
        result = SquatAnalyzer().evaluate(metrics, UP)
        assert result.feedback == [SquatAnalyzer.KNEES_FEEDBACK]
        assert result.form_score == 85

    def test_both_faults(self):
        metrics = {'avg_knee_angle': 95, 'hip_angle': 60, 'knee_distance': 0.05, 'ankle_distance': 0.1}
        result = SquatAnalyzer().evaluate(metrics, UP)
        assert result.form_score == 65
        assert len(result.feedback) == 2


class TestPushup:
    def test_cycle(self):
        frames = [pushup_pose(a) for a in (170, 120, 80, 120, 170)]
        phase, reps = run_sequence(detect_pushup, frames)
        assert (phase, reps) == (UP, 1)

    def test_body_line_boundaries_are_exclusive(self):
        analyzer = PushupAnalyzer()
        at_min = analyzer.evaluate({'elbow_angle': 170, 'body_angle': 150.0}, UP)
        below_min = analyzer.evaluate({'elbow_angle': 170, 'body_angle': 149.9}, UP)
        at_max = analyzer.evaluate({'elbow_angle': 170, 'body_angle': 190.0}, UP)
        above_max = analyzer.evaluate({'elbow_angle': 170, 'body_angle': 190.1}, UP)

        assert at_min.form_score == 100 and at_min.feedback == []
        assert below_min.form_score == 80
        assert below_min.feedback == [PushupAnalyzer.HIPS_LOW_FEEDBACK]
        assert at_max.form_score == 100
        assert above_max.form_score == 75
        assert above_max.feedback == [PushupAnalyzer.HIPS_SAG_FEEDBACK]

    def test_piked_hips_from_landmarks(self):
        result = detect_pushup(pushup_pose(170, body_angle=130), UP)
        assert result.feedback == [PushupAnalyzer.HIPS_LOW_FEEDBACK]


class TestLunge:
    def test_cycle(self):
        frames = [lunge_pose(a) for a in (175, 140, 100, 140, 170)]
        phase, reps = run_sequence(detect_lunge, frames)
        assert (phase, reps) == (UP, 1)

    def test_knee_past_toes(self):
        result = detect_lunge(lunge_pose(100, ankle=(0.35, 0.62)), UP)
        assert result.feedback == [LungeAnalyzer.KNEE_FEEDBACK]
        assert result.form_score == 80
        assert result.phase == DOWN

    def test_knee_within_margin_is_fine(self):
        result = LungeAnalyzer().evaluate({'front_knee_angle': 100, 'knee_x': 0.54, 'ankle_x': 0.5}, UP)
        assert result.feedback == []


class TestPlank:
    def test_straight_horizontal_body_is_holding(self):
        result = detect_plank(plank_pose())
        assert isinstance(result, PlankResult)
        assert result.is_holding
        assert result.form_score == 100
        assert result.feedback == [PlankAnalyzer.GOOD_FEEDBACK]

    def test_hips_too_high(self):
        result = detect_plank(plank_pose(hip_y=0.36))
        assert not result.is_holding
        assert result.feedback == [PlankAnalyzer.HIPS_HIGH_FEEDBACK]
        assert result.form_score == 80

    def test_sag_branch_clears_holding(self):
        result = PlankAnalyzer().evaluate({'body_angle': 195, 'shoulder_hip_drop': 0.02})
        assert not result.is_holding
        assert result.form_score == 75
        assert result.feedback == [PlankAnalyzer.HIPS_SAG_FEEDBACK]

    def test_tilted_body_is_not_holding(self):
        # Straight line, but far from horizontal
        result = detect_plank(plank_pose(shoulder_y=0.30, hip_y=0.50, ankle_y=0.70))
        assert not result.is_holding
        assert result.feedback == []
        assert result.form_score == 100


class TestJumpingJack:
    def test_rep_on_down_transition_only(self):
        up = detect_jumping_jack(jumping_jack_pose(True, True), NEUTRAL)
        assert up.phase == UP
        assert not up.is_rep
        assert up.feedback == [JumpingJackAnalyzer.GOOD_FEEDBACK]

        down = detect_jumping_jack(jumping_jack_pose(False, False), up.phase)
        assert down.phase == DOWN
        assert down.is_rep
        assert down.feedback == [JumpingJackAnalyzer.REP_FEEDBACK]

    def test_starting_down_is_not_a_rep(self):
        result = detect_jumping_jack(jumping_jack_pose(False, False), NEUTRAL)
        assert result.phase == DOWN
        assert not result.is_rep

    def test_partial_positions_give_feedback_without_phase_change(self):
        arms_only = detect_jumping_jack(jumping_jack_pose(True, False), DOWN)
        assert arms_only.phase == DOWN
        assert arms_only.feedback == [JumpingJackAnalyzer.LEGS_FEEDBACK]
        assert arms_only.form_score == 90

        legs_only = detect_jumping_jack(jumping_jack_pose(False, True), UP)
        assert legs_only.phase == UP
        assert legs_only.feedback == [JumpingJackAnalyzer.ARMS_FEEDBACK]
        assert not legs_only.is_rep

    def test_several_cycles(self):
        frames = [jumping_jack_pose(True, True), jumping_jack_pose(False, False)] * 3
        _, reps = run_sequence(detect_jumping_jack, frames)
        assert reps == 3


class TestLowConfidence:
    @pytest.mark.parametrize("exercise", list(ExerciseType))
    def test_invisible_joints_skip_frame(self, exercise):
        landmarks = make_pose(visibility=0.2)
        assert get_analyzer(exercise).detect(landmarks, UP) is None

    @pytest.mark.parametrize("exercise", list(ExerciseType))
    def test_empty_or_short_frame_does_not_raise(self, exercise):
        analyzer = get_analyzer(exercise)
        assert analyzer.detect(None, UP) is None
        assert analyzer.detect([], UP) is None
        assert analyzer.detect([Landmark(0.5, 0.5)] * 5, UP) is None

    @pytest.mark.parametrize("exercise", list(ExerciseType))
    def test_degenerate_pose_does_not_raise(self, exercise):
        landmarks = [Landmark(0.5, 0.5)] * 33
        result = get_analyzer(exercise).detect(landmarks, UP)
        assert result is not None
        assert 0 <= result.form_score <= 100

    def test_single_missing_joint(self):
        landmarks = squat_pose(90)
        landmarks[PoseLandmark.RIGHT_KNEE] = Landmark(0.55, 0.7, visibility=0.1)
        assert detect_squat(landmarks, UP) is None


class TestFactory:
    def test_names(self):
        assert isinstance(get_analyzer("squat"), SquatAnalyzer)
        assert isinstance(get_analyzer("Push-ups"), PushupAnalyzer)
        assert isinstance(get_analyzer("jumping jacks"), JumpingJackAnalyzer)
        assert isinstance(get_analyzer(ExerciseType.PLANKS), PlankAnalyzer)

    def test_unknown(self):
        with pytest.raises(ValueError):
            get_analyzer("deadlift")

    def test_only_plank_skips_rep_counting(self):
        assert [t for t in ExerciseType if not get_analyzer(t).counts_reps] == [ExerciseType.PLANKS]

    def test_joint_flags_from_feedback(self):
        flags = get_analyzer("squats").joint_flags([SquatAnalyzer.KNEES_FEEDBACK, "unrelated"])
        assert flags == [
            {'joint_index': int(PoseLandmark.LEFT_KNEE), 'is_correct': False},
            {'joint_index': int(PoseLandmark.RIGHT_KNEE), 'is_correct': False},
        ]

    def test_rep_result_type(self):
        assert isinstance(detect_squat(squat_pose(90)), DetectionResult)
