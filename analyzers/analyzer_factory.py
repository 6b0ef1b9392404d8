from analyzers.base_analyzer import BaseAnalyzer
from analyzers.jumping_jack_analyzer import JumpingJackAnalyzer
from analyzers.lunge_analyzer import LungeAnalyzer
from analyzers.plank_analyzer import PlankAnalyzer
from analyzers.pushup_analyzer import PushupAnalyzer
from analyzers.squat_analyzer import SquatAnalyzer
from models import ExerciseType, parse_exercise_type

# Analyzers are stateless, one shared instance per exercise is enough
ANALYZERS = {
    ExerciseType.SQUATS: SquatAnalyzer(),
    ExerciseType.PUSHUPS: PushupAnalyzer(),
    ExerciseType.LUNGES: LungeAnalyzer(),
    ExerciseType.PLANKS: PlankAnalyzer(),
    ExerciseType.JUMPING_JACKS: JumpingJackAnalyzer(),
}


def get_analyzer(exercise_type) -> BaseAnalyzer:
    """
    Factory function to get an analyzer based on exercise type.
    Accepts an ExerciseType or a name such as "squat" or "jumping jacks".
    """
    return ANALYZERS[parse_exercise_type(exercise_type)]
