"""
MediaPipe hand landmark model behind the `estimate(frame)` interface.

Tries the Tasks API HandLandmarker first (GPU delegate, then CPU) and falls
back to the legacy `mp.solutions.hands` pipeline where that still ships.
Landmarks come back normalized (0..1); they are converted to pixel
coordinates so the stabilizer sees the same space as the source frame.
"""

import urllib.request
from pathlib import Path
from typing import List, Optional

import cv2
import mediapipe as mp
import numpy as np

from gesture_signal.utils.math_utils import normalized_to_pixels

# Model URL and local path
HAND_LANDMARKER_MODEL_URL = 'https://storage.googleapis.com/mediapipe-models/hand_landmarker/hand_landmarker/float16/1/hand_landmarker.task'
HAND_LANDMARKER_MODEL_PATH = Path(__file__).parent.parent / 'models' / 'hand_landmarker.task'


def ensure_model_downloaded(model_path: Path = HAND_LANDMARKER_MODEL_PATH) -> Optional[str]:
    """Download the hand landmarker model if not present."""
    model_path.parent.mkdir(parents=True, exist_ok=True)

    if not model_path.exists():
        print("📥 Downloading hand landmarker model...")
        try:
            urllib.request.urlretrieve(HAND_LANDMARKER_MODEL_URL, str(model_path))
            print(f"✓ Model downloaded to {model_path}")
        except OSError as e:
            print(f"⚠ Failed to download model: {e}")
            return None

    return str(model_path)


class MediaPipeHandEstimator:
    """
    Pose-estimation collaborator: `estimate(frame_bgr)` returns a list of
    hands, each an array of shape (21, 3) in pixel coordinates (z is kept
    in MediaPipe's relative depth units and ignored downstream).
    """

    def __init__(self, use_gpu: bool = True, max_hands: int = 1,
                 min_detection_confidence: float = 0.5,
                 min_tracking_confidence: float = 0.5):
        self.use_gpu = False
        self.use_tasks_api = False
        self.hand_landmarker = None
        self.hands = None

        from mediapipe.tasks.python import vision as mp_vision
        from mediapipe.tasks.python.core.base_options import BaseOptions

        model_path = ensure_model_downloaded()
        delegates = [BaseOptions.Delegate.GPU, BaseOptions.Delegate.CPU] if use_gpu else [BaseOptions.Delegate.CPU]

        if model_path:
            for delegate in delegates:
                try:
                    options = mp_vision.HandLandmarkerOptions(
                        base_options=BaseOptions(
                            model_asset_path=model_path,
                            delegate=delegate
                        ),
                        running_mode=mp_vision.RunningMode.IMAGE,
                        num_hands=max_hands,
                        min_hand_detection_confidence=min_detection_confidence,
                        min_tracking_confidence=min_tracking_confidence
                    )
                    self.hand_landmarker = mp_vision.HandLandmarker.create_from_options(options)
                except Exception as e:
                    print(f"⚠ HandLandmarker init failed on {delegate.name}: {e}")
                    continue
                self.use_tasks_api = True
                self.use_gpu = delegate == BaseOptions.Delegate.GPU
                print(f"✓ MediaPipe HandLandmarker initialized with {delegate.name} (max_hands={max_hands})")
                break

        if not self.use_tasks_api:
            if not hasattr(mp, 'solutions'):
                raise RuntimeError("❌ No usable MediaPipe hand model (Tasks API failed, legacy API unavailable)")
            self.hands = mp.solutions.hands.Hands(
                min_detection_confidence=min_detection_confidence,
                min_tracking_confidence=min_tracking_confidence,
                max_num_hands=max_hands
            )
            print(f"✓ MediaPipe Hands (legacy) initialized (max_hands={max_hands})")

    @classmethod
    def from_config(cls, cfg=None) -> "MediaPipeHandEstimator":
        if cfg is None:
            from gesture_signal.config.config_manager import config as cfg
        return cls(
            use_gpu=cfg.get('model', 'use_gpu', default=True),
            max_hands=cfg.get('model', 'max_hands', default=1),
            min_detection_confidence=cfg.get('model', 'min_detection_confidence', default=0.5),
            min_tracking_confidence=cfg.get('model', 'min_tracking_confidence', default=0.5),
        )

    def estimate(self, frame_bgr: np.ndarray) -> List[np.ndarray]:
        h, w = frame_bgr.shape[:2]
        frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)

        if self.use_tasks_api:
            mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=frame_rgb)
            results = self.hand_landmarker.detect(mp_image)
            hands = results.hand_landmarks or []
        else:
            results = self.hands.process(frame_rgb)
            hands = [h_lms.landmark for h_lms in (results.multi_hand_landmarks or [])]

        candidates = []
        for hand_landmarks in hands:
            norm = np.array([[lm.x, lm.y, getattr(lm, 'z', 0.0)] for lm in hand_landmarks], dtype=float)
            px = np.empty_like(norm)
            px[:, :2] = normalized_to_pixels(norm[:, :2], (w, h))
            px[:, 2] = norm[:, 2]
            candidates.append(px)
        return candidates

    def close(self):
        if self.hand_landmarker is not None:
            self.hand_landmarker.close()
        if self.hands is not None:
            self.hands.close()
