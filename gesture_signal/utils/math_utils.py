import numpy as np
from collections import deque
from typing import Iterable, Tuple, Union


def landmarks_to_array(landmarks: Iterable) -> np.ndarray:
    """Convert landmarks into an Nx2 NumPy array of (x, y).

    Accepts either objects exposing `.x` and `.y` or sequences `(x, y[, z])`.
    Any z component is dropped.

    Args:
        landmarks: iterable of landmark points

    Returns:
        np.ndarray of shape (N, 2) dtype float with columns (x, y).
    """
    rows = []
    for lm in landmarks:
        if hasattr(lm, 'x') and hasattr(lm, 'y'):
            rows.append([lm.x, lm.y])
        else:
            rows.append([lm[0], lm[1]])
    arr = np.array(rows, dtype=float)
    if arr.size == 0:
        return arr.reshape((0, 2))
    return arr


def normalized_to_pixels(
    norm_xy: Union[Tuple[float, float], np.ndarray], frame_size: Tuple[int, int]
) -> np.ndarray:
    """Map normalized coordinates (0..1) to pixel coordinates.

    Accepts a single point `(x,y)` or an array of points shape `(N,2)`.
    Unlike a drawing helper, values are kept as floats and are not clipped:
    landmark estimators legitimately report points slightly outside the frame.

    Args:
        norm_xy: (2,) or (N,2) array-like with values in 0..1
        frame_size: (width, height) in pixels

    Returns:
        np.ndarray of floats with same leading shape as `norm_xy`.
    """
    w, h = float(frame_size[0]), float(frame_size[1])
    arr = np.asarray(norm_xy, dtype=float)

    # Handle single point (2,) -> convert to (1,2) for unified processing
    single = False
    if arr.ndim == 1:
        if arr.size != 2:
            raise ValueError("norm_xy must be shape (2,) or (N,2)")
        arr = arr.reshape((1, 2))
        single = True

    arr_px = np.empty_like(arr)
    arr_px[..., 0] = arr[..., 0] * w
    arr_px[..., 1] = arr[..., 1] * h

    return arr_px[0] if single else arr_px


def pixels_to_ndc(point_px, frame_size: Tuple[int, int]) -> Tuple[float, float]:
    """Map a pixel coordinate to normalized device coordinates.

    Both axes end up in [-1, 1] with the origin at the frame center, and both
    are inverted relative to pixel space: the left edge of the frame maps to
    x = +1 and the top edge to y = +1.
    """
    w, h = float(frame_size[0]), float(frame_size[1])
    if w <= 0 or h <= 0:
        raise ValueError(f"frame size must be positive, got {frame_size}")
    x = -((float(point_px[0]) / w) * 2 - 1)
    y = -((float(point_px[1]) / h) * 2 - 1)
    return x, y


def euclidean(a, b):
    """Euclidean distance between points.

    - If `a` and `b` are 1-D points, returns a scalar.
    - If arrays of points, returns distances per-row.
    """
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    return np.linalg.norm(a - b, axis=-1)


class MovingAverage:
    """Simple moving average buffer (keeps last N samples).

    Works for scalars and for fixed-size vectors such as (x, y) points.
    The buffer is a bounded FIFO: once full, every update evicts the oldest
    sample.

    Example:
        s = MovingAverage(n=8)
        smoothed = s.update([x, y])
    """

    def __init__(self, n: int = 5) -> None:
        if int(n) < 1:
            raise ValueError(f"moving average window must be >= 1, got {n}")
        self.n = int(n)
        self.buf = deque(maxlen=self.n)

    def update(self, x) -> np.ndarray:
        self.buf.append(np.array(x, dtype=float))
        return self.mean()

    def mean(self) -> np.ndarray:
        if not self.buf:
            raise ValueError("moving average is empty")
        return np.mean(self.buf, axis=0)

    def clear(self) -> None:
        self.buf.clear()

    @property
    def full(self) -> bool:
        return len(self.buf) == self.n

    def __len__(self) -> int:
        return len(self.buf)


__all__ = [
    "landmarks_to_array",
    "normalized_to_pixels",
    "pixels_to_ndc",
    "euclidean",
    "MovingAverage",
]
