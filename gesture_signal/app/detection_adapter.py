"""
DetectionAdapter: the seam between the loop and the pose-estimation model.

The model is any object with `estimate(frame) -> list of hand candidates`
(plain function or coroutine). Blocking models run on the event loop's
default executor so the loop stays responsive while inference is in flight.
"""

import asyncio
import inspect
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from gesture_signal.detectors.gesture_detectors import HandObservation


@dataclass
class Detection:
    """Outcome of one detector call."""
    observation: Optional[HandObservation] = None
    failed: bool = False


class DetectionAdapter:
    def __init__(self, estimator=None, offload_blocking: bool = True):
        """
        Args:
            estimator: object exposing `estimate(frame)`; may be attached later with load()
            offload_blocking: run a synchronous estimate() in the default executor
        """
        self.estimator = estimator
        self.offload_blocking = offload_blocking

        # Statistics
        self.calls = 0
        self.failure_streak = 0
        self.last_error: Optional[BaseException] = None

    @property
    def ready(self) -> bool:
        return self.estimator is not None

    async def load(self, factory: Callable[[], object]) -> bool:
        """
        Build the estimator off the loop (model loading is slow).
        On failure the adapter stays not-ready and the loop keeps idling.
        """
        loop = asyncio.get_running_loop()
        try:
            self.estimator = await loop.run_in_executor(None, factory)
        except Exception as e:
            print(f"❌ Failed to load hand pose model: {e}")
            return False
        print("✓ Hand pose model loaded")
        return True

    async def detect(self, frame, frame_size: Tuple[int, int]) -> Detection:
        """
        Run the model once on `frame` and keep only the first hand.

        Returns:
            Detection with the observation, with nothing (no hand), or
            flagged as failed when the model raised or returned garbage.
        """
        self.calls += 1
        try:
            candidates = await self._estimate(frame)
            if candidates is None or len(candidates) == 0:
                observation = None
            else:
                observation = HandObservation.from_candidate(candidates[0], frame_size)
        except Exception as e:
            self.last_error = e
            self.failure_streak += 1
            if self.failure_streak == 1:
                print(f"⚠ Hand estimation failed: {e}")
            return Detection(failed=True)

        if self.failure_streak:
            print(f"✓ Hand estimation recovered after {self.failure_streak} failed ticks")
            self.failure_streak = 0
        return Detection(observation=observation)

    async def _estimate(self, frame):
        estimate = self.estimator.estimate
        if inspect.iscoroutinefunction(estimate):
            return await estimate(frame)
        if not self.offload_blocking:
            return estimate(frame)
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, estimate, frame)
