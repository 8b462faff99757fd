import unittest
from unittest.mock import patch
import asyncio
import sys
import os

# Add path to source
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from gesture_signal.app.detection_adapter import DetectionAdapter
from gesture_signal.app.frame_scheduler import FrameScheduler
from gesture_signal.app.gesture_controller import GestureController
from gesture_signal.detectors.gesture_detectors import GestureSignal
from hand_fixtures import FakeClock, FakeFrameSource, ScriptedEstimator, make_hand


class TestGestureController(unittest.IsolatedAsyncioTestCase):
    def build(self, estimator, max_frames=48, frame_source=None):
        clock = FakeClock()

        async def wait_frame(interval):
            clock.advance(16)
            if scheduler.frame_count >= max_frames:
                scheduler.stop()
            await asyncio.sleep(0)

        scheduler = FrameScheduler(clock=clock, wait_frame=wait_frame)
        self.source = frame_source if frame_source is not None else FakeFrameSource()
        adapter = DetectionAdapter(estimator) if estimator is not None else DetectionAdapter()
        controller = GestureController(self.source, adapter, scheduler=scheduler)
        self.signals = []
        controller.on_gesture(self.signals.append)
        return controller

    async def test_open_hand_then_loss(self):
        estimator = ScriptedEstimator([[make_hand(2.0)]] * 3)
        controller = self.build(estimator, max_frames=48)

        await controller.run()

        self.assertEqual(controller.scheduler.tick_count, 12)
        self.assertEqual(len(self.signals), 4)
        self.assertTrue(all(s.is_detected and s.is_open for s in self.signals[:3]))
        self.assertEqual(self.signals[3], GestureSignal.lost())
        self.assertEqual(controller.stabilizer.status_label, "NO HAND")

    async def test_signal_wire_shape(self):
        controller = self.build(ScriptedEstimator([[make_hand(1.0, wrist=(160.0, 360.0))]]), max_frames=1)
        await controller.run()
        payload = self.signals[0].to_dict()
        self.assertEqual(payload['isDetected'], True)
        self.assertEqual(payload['isOpen'], False)
        self.assertAlmostEqual(payload['position']['x'], 0.5)
        self.assertAlmostEqual(payload['position']['y'], -0.5)

    async def test_persistent_failures_report_loss(self):
        script = [[make_hand(2.0)]] + [RuntimeError("inference failed")] * 6
        controller = self.build(ScriptedEstimator(script), max_frames=28)

        with patch('builtins.print'):
            await controller.run()

        self.assertEqual(len(self.signals), 2)
        self.assertFalse(self.signals[-1].is_detected)

    async def test_not_ready_never_reads_frames(self):
        controller = self.build(None, max_frames=10)
        await controller.run()
        self.assertEqual(self.source.reads, 0)
        self.assertEqual(self.signals, [])

        self.source.ready = False
        controller.adapter.estimator = ScriptedEstimator([])
        controller.scheduler.reset()
        await controller.run()
        self.assertEqual(self.source.reads, 0)

    async def test_result_after_stop_is_discarded(self):
        controller = None

        class StopMidInference:
            async def estimate(self, frame):
                controller.stop()
                return [make_hand(2.0)]

        controller = self.build(StopMidInference(), max_frames=100)
        await controller.run()

        self.assertEqual(self.signals, [])
        self.assertIsNone(controller.last_observation)
        self.assertEqual(controller.stabilizer.status_label, "-")

    async def test_start_and_close(self):
        controller = self.build(ScriptedEstimator([], default=[make_hand(2.0)]), max_frames=10_000)
        controller.adapter.offload_blocking = False
        task = controller.start()
        self.assertIs(controller.start(), task)
        for _ in range(20):
            await asyncio.sleep(0)
        self.assertTrue(controller.running)

        await controller.close()

        self.assertTrue(task.done())
        self.assertFalse(controller.running)
        self.assertGreater(len(self.signals), 0)


if __name__ == '__main__':
    unittest.main()
