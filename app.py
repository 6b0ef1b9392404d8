import json
import logging
import sys
import time

import cv2

import config
from audio_coaching import create_audio_coach
from commands import QUIT, KeyboardCommandRecognizer, apply_command
from pose_source import MediaPipePoseSource, PoseSourceError
from skeleton_renderer import SkeletonRenderer
from workout_session import WorkoutSession

logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s - %(levelname)s - %(message)s")


def run_workout(exercise=config.DEFAULT_EXERCISE, target=None) -> dict:
    """Run a live workout from the webcam until the user quits. Returns the summary."""
    audio_coach = create_audio_coach(config.AUDIO_ENABLED, config.SPEECH_RATE)
    renderer = SkeletonRenderer(mirrored=False)
    latest_feed = {}
    session = WorkoutSession(audio_coach=audio_coach, on_render=latest_feed.update,
                             body_weight_kg=config.BODY_WEIGHT_KG)

    source = MediaPipePoseSource(camera_index=config.CAMERA_INDEX,
                                 model_complexity=config.MODEL_COMPLEXITY,
                                 mirror=config.MIRROR_VIEW)
    recognizer = KeyboardCommandRecognizer()

    next_tick = None
    try:
        session.select_exercise(exercise, target)
        source.init()
        source.start()
        recognizer.start()
        logging.info("Controls: space = start/pause, r = reset, 1-5 = select exercise, q = quit")

        while True:
            frame, landmarks = source.read()
            if frame is None:
                logging.warning("Camera returned no frame, stopping.")
                break

            session.apply_frame(landmarks)

            # Once-per-second timer, independent of the frame rate
            now = time.monotonic()
            if session.state.is_tracking:
                if next_tick is None:
                    next_tick = now + 1.0
                while now >= next_tick and session.state.is_tracking:
                    session.apply_tick()
                    next_tick += 1.0
            else:
                next_tick = None

            if landmarks is not None and latest_feed:
                renderer.draw(frame, latest_feed)
            renderer.draw_hud(frame, session.snapshot())
            cv2.imshow(config.WINDOW_NAME, frame)

            recognizer.feed_key(cv2.waitKey(1))
            command = recognizer.poll()
            if command == QUIT:
                break
            if command:
                apply_command(session, command)
                latest_feed.clear()
    finally:
        session.stop()
        recognizer.stop()
        source.dispose()
        audio_coach.announcer.dispose()
        cv2.destroyAllWindows()

    return session.get_summary()


if __name__ == '__main__':
    exercise = sys.argv[1] if len(sys.argv) > 1 else config.DEFAULT_EXERCISE
    target = int(sys.argv[2]) if len(sys.argv) > 2 else None
    try:
        summary = run_workout(exercise, target)
    except PoseSourceError as e:
        logging.error(f"Could not start pose tracking: {e}", exc_info=True)
        sys.exit(1)
    except ValueError as e:
        logging.error(f"Invalid workout: {e}")
        sys.exit(2)
    print(json.dumps(summary, indent=2))
