"""
Visual Feedback Overlay for GESTURE SIGNAL

Draws the debug preview: the camera frame, the tracked hand skeleton, the
smoothed pointer and a footer with the stabilizer's status label.
"""

import cv2
import numpy as np
from dataclasses import dataclass
from typing import Tuple


@dataclass
class UIColors:
    """Preview palette (BGR)."""
    hand = (0, 200, 255)              # Amber
    pointer = (255, 255, 255)         # White
    accent = (55, 175, 212)           # Gold
    background = (0, 0, 0)
    open_state = (80, 80, 255)        # Red
    closed_state = (80, 220, 80)      # Green


# MediaPipe connections - simplified
HAND_CONNECTIONS = [
    # Thumb
    (0, 1), (1, 2), (2, 3), (3, 4),
    # Index
    (0, 5), (5, 6), (6, 7), (7, 8),
    # Middle
    (0, 9), (9, 10), (10, 11), (11, 12),
    # Ring
    (0, 13), (13, 14), (14, 15), (15, 16),
    # Pinky
    (0, 17), (17, 18), (18, 19), (19, 20),
    # Palm
    (5, 9), (9, 13), (13, 17)
]


def ndc_to_pixels(position: Tuple[float, float], frame_size: Tuple[int, int], mirrored: bool = False) -> Tuple[int, int]:
    """Inverse of the pointer mapping; `mirrored` targets a selfie-style preview."""
    w, h = frame_size
    x, y = position
    u = (1 + x) / 2 if mirrored else (1 - x) / 2
    v = (1 - y) / 2
    return int(u * w), int(v * h)


class VisualFeedback:
    """
    Renders the preview frame for the app window.
    """

    def __init__(self, mirror: bool = True):
        self.colors = UIColors()
        self.mirror = mirror

    def render(self, frame, observation=None, signal=None, label: str = "-") -> np.ndarray:
        """
        Args:
            frame: BGR camera frame (left untouched)
            observation: HandObservation of the last tick, if any
            signal: last emitted GestureSignal, if any
            label: stabilizer status label

        Returns:
            The annotated copy of the frame.
        """
        out = cv2.flip(frame, 1) if self.mirror else frame.copy()
        h, w = out.shape[:2]

        if observation is not None:
            pts = observation.landmarks_px.copy()
            if self.mirror:
                pts[:, 0] = w - pts[:, 0]
            self._draw_hand_skeleton(out, pts)

        if signal is not None and signal.is_detected:
            px, py = ndc_to_pixels(signal.position, (w, h), mirrored=self.mirror)
            cv2.circle(out, (px, py), 10, self.colors.pointer, 2, cv2.LINE_AA)

        self._draw_footer(out, label)
        return out

    def _draw_hand_skeleton(self, frame, pts):
        for start_idx, end_idx in HAND_CONNECTIONS:
            start = (int(pts[start_idx][0]), int(pts[start_idx][1]))
            end = (int(pts[end_idx][0]), int(pts[end_idx][1]))
            cv2.line(frame, start, end, self.colors.hand, 2)
        wrist = (int(pts[0][0]), int(pts[0][1]))
        cv2.circle(frame, wrist, 6, self.colors.accent, -1)

    def _draw_footer(self, frame, label: str):
        h, w = frame.shape[:2]
        bar_h = 24

        overlay = frame.copy()
        cv2.rectangle(overlay, (0, h - bar_h), (w, h), self.colors.background, -1)
        cv2.addWeighted(overlay, 0.6, frame, 0.4, 0, frame)

        cv2.putText(frame, "GESTURE", (8, h - 7),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.5, self.colors.accent, 1, cv2.LINE_AA)
        color = self.colors.open_state if "OPEN" in label else self.colors.closed_state
        (tw, _), _ = cv2.getTextSize(label, cv2.FONT_HERSHEY_SIMPLEX, 0.5, 1)
        cv2.putText(frame, label, (w - tw - 8, h - 7),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.5, color, 1, cv2.LINE_AA)
