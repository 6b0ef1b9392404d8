from abc import ABC, abstractmethod
import logging
from typing import List, Optional, Tuple

import cv2
import mediapipe as mp
import numpy as np

from landmarks import Landmark, from_mediapipe


class PoseSourceError(RuntimeError):
    """The camera or the pose model could not be started."""


class PoseSource(ABC):
    """Capability interface for anything that yields one landmark set per frame."""

    def init(self):
        pass

    @abstractmethod
    def start(self):
        pass

    @abstractmethod
    def read(self) -> Tuple[Optional[np.ndarray], Optional[List[Landmark]]]:
        """Return (frame, landmarks). Landmarks are None when no body was detected."""
        pass

    @abstractmethod
    def stop(self):
        pass

    def dispose(self):
        self.stop()


class MediaPipePoseSource(PoseSource):
    """Webcam frames through OpenCV, landmarks through MediaPipe Pose."""

    def __init__(self, camera_index: int = 0, model_complexity: int = 1,
                 min_detection_confidence: float = 0.5, min_tracking_confidence: float = 0.5,
                 mirror: bool = True):
        self.camera_index = camera_index
        self.model_complexity = model_complexity
        self.min_detection_confidence = min_detection_confidence
        self.min_tracking_confidence = min_tracking_confidence
        self.mirror = mirror
        self.pose = None
        self.cap = None
        self.fps = 0

    def init(self):
        if self.pose is not None:
            return
        try:
            self.pose = mp.solutions.pose.Pose(
                model_complexity=self.model_complexity,
                smooth_landmarks=True,
                enable_segmentation=False,
                min_detection_confidence=self.min_detection_confidence,
                min_tracking_confidence=self.min_tracking_confidence,
            )
        except Exception as e:
            raise PoseSourceError(f"Failed to load pose model: {e}") from e
        logging.info(f"MediaPipe Pose initialized (complexity {self.model_complexity})")

    def start(self):
        if self.pose is None:
            self.init()
        self.cap = cv2.VideoCapture(self.camera_index)
        if not self.cap.isOpened():
            self.cap.release()
            self.cap = None
            raise PoseSourceError(
                f"Failed to access camera {self.camera_index}. Check that it is connected "
                f"and that camera permissions are granted.")
        self.fps = int(self.cap.get(cv2.CAP_PROP_FPS)) or 30
        logging.info(f"Camera {self.camera_index} started at {self.fps} fps")

    def read(self):
        if self.cap is None:
            raise PoseSourceError("Pose source is not started")
        success, frame = self.cap.read()
        if not success:
            return None, None
        if self.mirror:
            frame = cv2.flip(frame, 1)

        results = self.pose.process(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB))
        if not results.pose_landmarks:
            return frame, None
        return frame, from_mediapipe(results.pose_landmarks)

    def stop(self):
        if self.cap is not None:
            self.cap.release()
            self.cap = None
            logging.info("Camera stopped")

    def dispose(self):
        self.stop()
        if self.pose is not None:
            self.pose.close()
            self.pose = None
