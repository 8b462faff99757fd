"""
Single-Hand Tracking State

Composes the per-tick filters into one explicit state object:

- PositionFilter  -> smoothed pointer position (NDC)
- ratio + RatioSmoother + HysteresisGate -> persistent open/closed state
- LossDebouncer   -> tolerates short detector blackouts

Design principles:
- All smoothing state lives in one HandStabilizer instance, nothing global
- A single missed tick never disturbs the smoothed output
- Confirmed loss clears everything at once and is reported exactly once
"""

from enum import Enum
from typing import Optional

from gesture_signal.detectors.gesture_detectors import (
    GestureSignal,
    HandObservation,
    HysteresisGate,
    PositionFilter,
    RatioSmoother,
    compute_openness_ratio,
)


class TrackingState(Enum):
    TRACKING = "tracking"
    LOST = "lost"


class LossDebouncer:
    """
    Counts consecutive ticks without a hand and confirms loss only once the
    run is longer than `threshold`.
    """

    def __init__(self, threshold: int = 5):
        if int(threshold) < 0:
            raise ValueError(f"loss threshold must be >= 0, got {threshold}")
        self.threshold = int(threshold)
        self.miss_count = 0
        self.state = TrackingState.LOST

    def hit(self):
        self.miss_count = 0
        self.state = TrackingState.TRACKING

    def miss(self) -> bool:
        """Register a missed tick. Returns True only on the tick that confirms loss."""
        self.miss_count += 1
        if self.miss_count <= self.threshold:
            return False
        self.state = TrackingState.LOST
        return self.miss_count == self.threshold + 1


class HandStabilizer:
    """
    Turns a stream of optional hand observations into gesture signals.

    Usage
    -----
    stabilizer = HandStabilizer()
    signal = stabilizer.update(observation)   # observation or None
    if signal is not None:
        emitter.emit(signal)
    """

    def __init__(
            self,
            position_window: int = 8,
            ratio_window: int = 5,
            open_threshold: float = 1.6,
            close_threshold: float = 1.2,
            loss_threshold: int = 5,
            ratio_epsilon: float = 1e-6,
            failures_count_as_misses: bool = True,
        ):
        self.position_filter = PositionFilter(window=position_window)
        self.ratio_smoother = RatioSmoother(window=ratio_window)
        self.gate = HysteresisGate(open_threshold=open_threshold, close_threshold=close_threshold)
        self.debouncer = LossDebouncer(threshold=loss_threshold)
        self.ratio_epsilon = float(ratio_epsilon)
        self.failures_count_as_misses = bool(failures_count_as_misses)

        self.raw_ratio: Optional[float] = None
        self.status_label = "-"

    @classmethod
    def from_config(cls, cfg=None) -> "HandStabilizer":
        """Build a stabilizer from config.json values (global config by default)."""
        if cfg is None:
            from gesture_signal.config.config_manager import config as cfg
        return cls(
            position_window=cfg.get('smoothing', 'position_window', default=8),
            ratio_window=cfg.get('smoothing', 'ratio_window', default=5),
            open_threshold=cfg.get('hysteresis', 'open_threshold', default=1.6),
            close_threshold=cfg.get('hysteresis', 'close_threshold', default=1.2),
            loss_threshold=cfg.get('tracking', 'loss_threshold', default=5),
            ratio_epsilon=cfg.get('smoothing', 'ratio_epsilon', default=1e-6),
            failures_count_as_misses=cfg.get('tracking', 'failures_count_as_misses', default=True),
        )

    # ------------------------------------------------------------------
    def update(self, observation: Optional[HandObservation], failed: bool = False) -> Optional[GestureSignal]:
        """
        Process one tick.

        Args:
            observation: the first hand of this tick, or None
            failed: True when the detector errored instead of reporting no hand

        Returns:
            The signal to emit for this tick, or None when nothing is emitted
            (a tolerated miss, or a miss after loss was already reported).
        """
        if observation is not None:
            return self._track(observation)

        if failed and not self.failures_count_as_misses:
            return None

        if self.debouncer.miss():
            self.reset()
            self.status_label = "NO HAND"
            return GestureSignal.lost()
        return None

    def _track(self, observation: HandObservation) -> GestureSignal:
        self.debouncer.hit()

        position = self.position_filter.update(observation)

        self.raw_ratio = compute_openness_ratio(observation.landmarks_px, eps=self.ratio_epsilon)
        smoothed = self.ratio_smoother.update(self.raw_ratio)
        is_open = self.gate.update(smoothed)

        self.status_label = f"{'OPEN' if is_open else 'CLOSED'} ({smoothed:.1f})"
        return GestureSignal(is_open=is_open, position=position, is_detected=True)

    def reset(self):
        """Clear both histories and close the gate."""
        self.position_filter.clear()
        self.ratio_smoother.clear()
        self.gate.reset()
        self.raw_ratio = None

    # ------------------------------------------------------------------
    @property
    def is_open(self) -> bool:
        return self.gate.is_open

    @property
    def smoothed_ratio(self) -> Optional[float]:
        return self.ratio_smoother.value

    @property
    def state(self) -> TrackingState:
        return self.debouncer.state

    @property
    def miss_count(self) -> int:
        return self.debouncer.miss_count
