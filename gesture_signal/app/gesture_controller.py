"""
GestureController: the single entry point of the stabilization pipeline.

    FrameScheduler -> DetectionAdapter -> HandStabilizer -> GestureEmitter

Design decisions:
  - Every collaborator is injected (frame source, model, clock) so the
    pipeline runs without a camera in tests.
  - Smoothing state is touched only from the loop task, between awaits.
  - A model call still in flight when stop() is called finishes, but its
    result is dropped.
"""

import asyncio
from typing import Optional

from gesture_signal.app.detection_adapter import DetectionAdapter
from gesture_signal.app.frame_scheduler import FrameScheduler
from gesture_signal.app.gesture_emitter import GestureEmitter, GestureSink
from gesture_signal.detectors.gesture_detectors import HandObservation
from gesture_signal.detectors.hand_tracker import HandStabilizer


class GestureController:
    """
    Usage
    -----
    controller = GestureController(frame_source, DetectionAdapter(model))
    controller.on_gesture(lambda signal: print(signal.to_dict()))
    await controller.run()        # or controller.start() / controller.stop()

    Parameters
    ----------
    frame_source :
        Object with `ready`, `frame_size` and `read()`.
    adapter : DetectionAdapter
        Wraps the pose-estimation model.
    """

    def __init__(
            self,
            frame_source,
            adapter: DetectionAdapter,
            stabilizer: Optional[HandStabilizer] = None,
            emitter: Optional[GestureEmitter] = None,
            scheduler: Optional[FrameScheduler] = None,
        ):
        self.frame_source = frame_source
        self.adapter = adapter
        self.stabilizer = stabilizer if stabilizer is not None else HandStabilizer()
        self.emitter = emitter if emitter is not None else GestureEmitter()
        self.scheduler = scheduler if scheduler is not None else FrameScheduler()

        self.last_observation: Optional[HandObservation] = None
        self.last_frame = None
        self._task: Optional[asyncio.Task] = None

    @classmethod
    def from_config(cls, frame_source, estimator=None, cfg=None, **scheduler_kwargs) -> "GestureController":
        return cls(
            frame_source,
            DetectionAdapter(estimator),
            stabilizer=HandStabilizer.from_config(cfg),
            scheduler=FrameScheduler.from_config(cfg, **scheduler_kwargs),
        )

    def on_gesture(self, sink: GestureSink):
        self.emitter.register(sink)

    # ------------------------------------------------------------------
    def ready(self) -> bool:
        return self.adapter.ready and bool(self.frame_source.ready)

    async def tick(self):
        """One detection tick: read, estimate, stabilize, emit."""
        frame = self.frame_source.read()
        if frame is None:
            return
        self.last_frame = frame

        detection = await self.adapter.detect(frame, self.frame_source.frame_size)
        if self.scheduler.stopped:
            return

        self.last_observation = detection.observation
        signal = self.stabilizer.update(detection.observation, failed=detection.failed)
        if signal is not None:
            self.emitter.emit(signal)

    async def run(self):
        await self.scheduler.run(self.tick, ready=self.ready)

    def start(self) -> asyncio.Task:
        """Spawn the loop as a task on the running event loop."""
        if self._task is not None and not self._task.done():
            return self._task
        self.scheduler.reset()
        self._task = asyncio.create_task(self.run())
        return self._task

    def stop(self):
        self.scheduler.stop()

    async def close(self):
        """Stop and wait for the loop task to wind down."""
        self.stop()
        if self._task is not None:
            await self._task
            self._task = None

    @property
    def running(self) -> bool:
        return self.scheduler.running
