"""
FrameScheduler: a cooperative detection loop gated by wall-clock time.

The host wakes the loop on every frame (default every 16 ms) but detection is
expensive, so a tick only runs once `detection_interval` has elapsed since the
previous one. The loop re-arms itself after every frame whatever the tick did,
and stops at the next iteration boundary after stop().
"""

import asyncio
import time
from typing import Awaitable, Callable, Optional


class FrameScheduler:
    """
    Parameters
    ----------
    detection_interval : float
        Minimum seconds between two ticks (0.060 ~= 16 detections/second).
    frame_interval : float
        Seconds between host frame notifications.
    clock : callable
        Monotonic time source, injectable for tests.
    wait_frame : async callable
        Awaited between notifications with `frame_interval`; asyncio.sleep by default.
    """

    def __init__(
            self,
            detection_interval: float = 0.060,
            frame_interval: float = 0.016,
            clock: Callable[[], float] = time.monotonic,
            wait_frame: Callable[[float], Awaitable[None]] = asyncio.sleep,
        ):
        if detection_interval < 0 or frame_interval < 0:
            raise ValueError("scheduler intervals must be >= 0")
        self.detection_interval = float(detection_interval)
        self.frame_interval = float(frame_interval)
        self._clock = clock
        self._wait_frame = wait_frame

        self.last_detection_time: Optional[float] = None
        self.frame_count = 0
        self.tick_count = 0
        self._stopped = False
        self._running = False

    @classmethod
    def from_config(cls, cfg=None, **kwargs) -> "FrameScheduler":
        if cfg is None:
            from gesture_signal.config.config_manager import config as cfg
        return cls(
            detection_interval=cfg.get('scheduler', 'detection_interval_ms', default=60) / 1000.0,
            frame_interval=cfg.get('scheduler', 'frame_interval_ms', default=16) / 1000.0,
            **kwargs,
        )

    # ------------------------------------------------------------------
    def due(self) -> bool:
        """
        Check the throttle for this frame. When due, the detection time is
        recorded immediately so a slow tick cannot cause a burst afterwards.
        """
        now = self._clock()
        if self.last_detection_time is not None and now - self.last_detection_time < self.detection_interval:
            return False
        self.last_detection_time = now
        return True

    async def run(
            self,
            tick: Callable[[], Awaitable[None]],
            ready: Optional[Callable[[], bool]] = None,
        ):
        """
        Loop until stop(): on every frame, run `tick` if `ready()` and the
        throttle allows it. Frames where `ready()` is False are skipped
        without touching the throttle.
        """
        self._running = True
        try:
            while not self._stopped:
                self.frame_count += 1
                if (ready is None or ready()) and self.due():
                    self.tick_count += 1
                    try:
                        await tick()
                    except Exception as e:
                        print(f"⚠ Detection tick failed: {e}")
                if self._stopped:
                    break
                await self._wait_frame(self.frame_interval)
        finally:
            self._running = False

    def stop(self):
        self._stopped = True

    def reset(self):
        """Re-arm a stopped scheduler; the next tick runs immediately."""
        self._stopped = False
        self.last_detection_time = None

    @property
    def stopped(self) -> bool:
        return self._stopped

    @property
    def running(self) -> bool:
        return self._running
