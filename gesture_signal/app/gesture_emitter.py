"""
Gesture Emitter for GESTURE SIGNAL

Decouples the stabilizer from whoever consumes its output. The controller
hands every tick's GestureSignal to the emitter, which delivers it to each
registered sink (plain callbacks, or queues for consumers running elsewhere).

A failing sink is reported and skipped; it never blocks the other sinks or
the detection loop.
"""

import asyncio
import queue
from typing import Callable, List, Optional

from gesture_signal.detectors.gesture_detectors import GestureSignal


GestureSink = Callable[[GestureSignal], None]


class GestureEmitter:
    def __init__(self):
        self._sinks: List[GestureSink] = []
        self.paused = False
        self.last_signal: Optional[GestureSignal] = None
        self.emit_count = 0

    def register(self, sink: GestureSink):
        """
        Register a consumer callback. It receives one GestureSignal per
        processed tick.
        """
        if sink not in self._sinks:
            self._sinks.append(sink)

    def unregister(self, sink: GestureSink):
        if sink in self._sinks:
            self._sinks.remove(sink)

    def register_queue(self, signal_queue) -> GestureSink:
        """
        Deliver signals into a queue (queue.Queue or asyncio.Queue).
        When the queue is full the oldest signal is dropped so the consumer
        always sees the most recent state.

        Returns the sink so it can be unregistered later.
        """
        def _put(signal: GestureSignal):
            if signal_queue.full():
                try:
                    signal_queue.get_nowait()
                except (queue.Empty, asyncio.QueueEmpty):
                    pass
            try:
                signal_queue.put_nowait(signal)
            except (queue.Full, asyncio.QueueFull):
                pass

        self.register(_put)
        return _put

    @property
    def sinks(self) -> List[GestureSink]:
        return list(self._sinks)

    def emit(self, signal: GestureSignal):
        """
        Publish one signal to every sink, unless paused.

        Args:
            signal: the stabilized signal for this tick
        """
        self.last_signal = signal
        if self.paused:
            return

        self.emit_count += 1
        for sink in list(self._sinks):
            try:
                sink(signal)
            except Exception as e:
                name = getattr(sink, '__name__', repr(sink))
                print(f"⚠ Error delivering gesture signal to {name}: {e}")
