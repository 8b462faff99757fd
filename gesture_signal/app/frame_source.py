"""
CameraFrameSource: OpenCV webcam wrapper for the detection loop.

Frames are grabbed on a daemon thread; the asyncio loop only ever picks up
the most recent frame and never calls cap.read() itself.
"""

import threading
import time
from typing import Optional, Tuple

import cv2
import numpy as np


class CameraFrameSource:
    """
    Parameters
    ----------
    device : int
        Camera index (0 = default webcam).
    width, height : int
        Requested capture resolution; the camera may pick another one.
    flip_horizontal : bool
        Mirror frames before handing them to the detector.
    """

    def __init__(self, device: int = 0, width: int = 640, height: int = 480,
                 flip_horizontal: bool = False) -> None:
        self._cap = cv2.VideoCapture(device)
        if not self._cap.isOpened():
            raise RuntimeError(f"❌ Could not open camera {device}")

        self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
        self.flip_horizontal = flip_horizontal

        self._lock = threading.Lock()
        self._frame: Optional[np.ndarray] = None
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._grab_loop, daemon=True)
        self.read_failures = 0

        actual_w = int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        actual_h = int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        print(f"✓ Camera initialized: {actual_w}x{actual_h}")

    @classmethod
    def from_config(cls, cfg=None, device: Optional[int] = None) -> "CameraFrameSource":
        if cfg is None:
            from gesture_signal.config.config_manager import config as cfg
        return cls(
            device=device if device is not None else cfg.get('camera', 'index', default=0),
            width=cfg.get('camera', 'width', default=640),
            height=cfg.get('camera', 'height', default=480),
            flip_horizontal=cfg.get('camera', 'flip_horizontal', default=False),
        )

    # ------------------------------------------------------------------
    def start(self) -> "CameraFrameSource":
        self._thread.start()
        return self

    def _grab_loop(self):
        while not self._stop.is_set():
            ok, frame = self._cap.read()
            if not ok:
                self.read_failures += 1
                if self.read_failures == 1:
                    print("⚠ Failed to read frame")
                time.sleep(0.01)
                continue
            self.read_failures = 0
            if self.flip_horizontal:
                frame = cv2.flip(frame, 1)
            with self._lock:
                self._frame = frame

    @property
    def ready(self) -> bool:
        with self._lock:
            return self._frame is not None

    @property
    def frame_size(self) -> Tuple[int, int]:
        with self._lock:
            if self._frame is not None:
                h, w = self._frame.shape[:2]
                return w, h
        return (int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
                int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT)))

    def read(self) -> Optional[np.ndarray]:
        """Latest frame, or None before the first one arrives."""
        with self._lock:
            return None if self._frame is None else self._frame.copy()

    def close(self) -> None:
        self._stop.set()
        if self._thread.is_alive():
            self._thread.join(timeout=1.0)
        self._cap.release()

    def __enter__(self) -> "CameraFrameSource":
        return self.start()

    def __exit__(self, *_) -> None:
        self.close()
