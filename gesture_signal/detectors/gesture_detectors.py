import numpy as np
from typing import Dict, Tuple, Optional, Any
from dataclasses import dataclass

from gesture_signal.utils.math_utils import landmarks_to_array, pixels_to_ndc, euclidean, MovingAverage


# Data Structures

@dataclass
class HandObservation:
    """
    One hand as reported by the pose-estimation model for a single tick.
    Landmarks are in the source frame's pixel space; z is dropped.
    """
    landmarks_px: np.ndarray        # shape (21, 2)
    frame_size: Tuple[int, int]     # (width, height) in pixels

    @classmethod
    def from_candidate(cls, candidate, frame_size: Tuple[int, int]) -> "HandObservation":
        """Build an observation from a model candidate.

        The candidate is either a sequence of 21 points or an object with a
        `landmarks` attribute holding them (points are `(x, y[, z])` or have
        `.x`/`.y`).
        """
        points = getattr(candidate, 'landmarks', candidate)
        landmarks = landmarks_to_array(points)
        if landmarks.shape != (NUM_LANDMARKS, 2):
            raise ValueError(
                f"hand candidate must have {NUM_LANDMARKS} landmarks, got {landmarks.shape[0]}"
            )
        return cls(landmarks_px=landmarks, frame_size=(int(frame_size[0]), int(frame_size[1])))

    @property
    def wrist(self) -> np.ndarray:
        return self.landmarks_px[LANDMARK_NAMES['WRIST']]


@dataclass(frozen=True)
class GestureSignal:
    """The stabilized output for one processed tick."""
    is_open: bool
    position: Tuple[float, float]   # NDC, each axis in [-1, 1]
    is_detected: bool

    @classmethod
    def lost(cls) -> "GestureSignal":
        return cls(is_open=False, position=(0.0, 0.0), is_detected=False)

    def to_dict(self) -> Dict[str, Any]:
        """Wire shape expected by the visualization front-end."""
        return {
            'isOpen': self.is_open,
            'position': {'x': self.position[0], 'y': self.position[1]},
            'isDetected': self.is_detected,
        }


NUM_LANDMARKS = 21

# MediaPipe / handpose landmark indices (for reference)
LANDMARK_NAMES = {
    'WRIST': 0,
    'THUMB_CMC': 1, 'THUMB_MCP': 2, 'THUMB_IP': 3, 'THUMB_TIP': 4,
    'INDEX_MCP': 5, 'INDEX_PIP': 6, 'INDEX_DIP': 7, 'INDEX_TIP': 8,
    'MIDDLE_MCP': 9, 'MIDDLE_PIP': 10, 'MIDDLE_DIP': 11, 'MIDDLE_TIP': 12,
    'RING_MCP': 13, 'RING_PIP': 14, 'RING_DIP': 15, 'RING_TIP': 16,
    'PINKY_MCP': 17, 'PINKY_PIP': 18, 'PINKY_DIP': 19, 'PINKY_TIP': 20,
}

# Thumb excluded: its tip barely moves away from the wrist when the hand opens
FINGER_BASES = [LANDMARK_NAMES[f'{f}_MCP'] for f in ('INDEX', 'MIDDLE', 'RING', 'PINKY')]
FINGER_TIPS = [LANDMARK_NAMES[f'{f}_TIP'] for f in ('INDEX', 'MIDDLE', 'RING', 'PINKY')]


def compute_openness_ratio(landmarks_px: np.ndarray, eps: float = 1e-6) -> float:
    """
    Average wrist->tip distance over average wrist->base-joint distance for
    index, middle, ring and pinky.

    Curled fingers keep their tips close to the knuckles (ratio near 1);
    extended fingers roughly double it.
    """
    wrist = landmarks_px[LANDMARK_NAMES['WRIST']]
    avg_base = float(np.mean(euclidean(landmarks_px[FINGER_BASES], wrist)))
    avg_tip = float(np.mean(euclidean(landmarks_px[FINGER_TIPS], wrist)))
    return avg_tip / max(avg_base, eps)


class PositionFilter:
    """
    Moving-average pointer position from the wrist landmark, in NDC.
    """

    def __init__(self, window: int = 8):
        self._avg = MovingAverage(n=window)

    def update(self, observation: HandObservation) -> Tuple[float, float]:
        raw = pixels_to_ndc(observation.wrist, observation.frame_size)
        smoothed = self._avg.update(raw)
        return float(smoothed[0]), float(smoothed[1])

    def clear(self):
        self._avg.clear()

    @property
    def window(self) -> int:
        return self._avg.n

    def __len__(self) -> int:
        return len(self._avg)


class RatioSmoother:
    """Moving average over openness ratios."""

    def __init__(self, window: int = 5):
        self._avg = MovingAverage(n=window)
        self.value: Optional[float] = None

    def update(self, ratio: float) -> float:
        self.value = float(self._avg.update(ratio))
        return self.value

    def clear(self):
        self._avg.clear()
        self.value = None

    @property
    def window(self) -> int:
        return self._avg.n

    def __len__(self) -> int:
        return len(self._avg)


class HysteresisGate:
    """
    Schmitt trigger over the smoothed openness ratio.

    A closed hand opens only above `open_threshold`; an open hand closes only
    below `close_threshold`. Anything in between keeps the previous state.
    """

    def __init__(self, open_threshold: float = 1.6, close_threshold: float = 1.2):
        self.open_threshold = float(open_threshold)
        self.close_threshold = float(close_threshold)
        if self.close_threshold >= self.open_threshold:
            raise ValueError(
                f"close_threshold ({close_threshold}) must be below open_threshold ({open_threshold})"
            )
        self.is_open = False

    def update(self, smoothed_ratio: float) -> bool:
        if not self.is_open and smoothed_ratio > self.open_threshold:
            self.is_open = True
        elif self.is_open and smoothed_ratio < self.close_threshold:
            self.is_open = False
        return self.is_open

    def reset(self):
        self.is_open = False
