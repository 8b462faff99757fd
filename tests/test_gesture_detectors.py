import unittest
import sys
import os

import numpy as np

# Add path to source
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from gesture_signal.detectors.gesture_detectors import (
    GestureSignal,
    HandObservation,
    HysteresisGate,
    PositionFilter,
    RatioSmoother,
    compute_openness_ratio,
)
from hand_fixtures import make_hand


class TestOpennessRatio(unittest.TestCase):
    def test_synthetic_ratios(self):
        for ratio in (1.0, 1.4, 2.0):
            self.assertAlmostEqual(compute_openness_ratio(make_hand(ratio)), ratio, places=6)

    def test_degenerate_hand_is_finite(self):
        # Every point on the wrist: base distance 0 must not divide by zero
        pts = np.zeros((21, 2))
        ratio = compute_openness_ratio(pts)
        self.assertTrue(np.isfinite(ratio))
        self.assertEqual(ratio, 0.0)


class TestHandObservation(unittest.TestCase):
    def test_from_candidate_drops_z(self):
        pts = np.hstack([make_hand(1.5), np.ones((21, 1))])
        obs = HandObservation.from_candidate(pts, (640, 480))
        self.assertEqual(obs.landmarks_px.shape, (21, 2))
        np.testing.assert_allclose(obs.wrist, [320.0, 240.0])

    def test_landmarks_attribute(self):
        class Candidate:
            landmarks = make_hand(1.0).tolist()
        obs = HandObservation.from_candidate(Candidate(), (640, 480))
        self.assertEqual(obs.frame_size, (640, 480))

    def test_wrong_landmark_count(self):
        with self.assertRaises(ValueError):
            HandObservation.from_candidate(np.zeros((5, 2)), (640, 480))


class TestPositionFilter(unittest.TestCase):
    def test_first_update_is_raw_ndc(self):
        f = PositionFilter()
        obs = HandObservation(make_hand(1.0, wrist=(160.0, 120.0)), (640, 480))
        x, y = f.update(obs)
        self.assertAlmostEqual(x, 0.5)
        self.assertAlmostEqual(y, 0.5)

    def test_converges_after_window(self):
        f = PositionFilter(window=8)
        far = HandObservation(make_hand(1.0, wrist=(0.0, 0.0)), (640, 480))
        center = HandObservation(make_hand(1.0, wrist=(320.0, 240.0)), (640, 480))
        f.update(far)
        x, _ = f.update(center)
        self.assertAlmostEqual(x, 0.5)
        for _ in range(7):
            x, y = f.update(center)
        self.assertAlmostEqual(x, 0.0)
        self.assertAlmostEqual(y, 0.0)
        self.assertEqual(len(f), 8)

    def test_clear(self):
        f = PositionFilter()
        f.update(HandObservation(make_hand(1.0), (640, 480)))
        f.clear()
        self.assertEqual(len(f), 0)


class TestHysteresis(unittest.TestCase):
    def run_ratios(self, ratios, start_open=False):
        smoother = RatioSmoother(window=5)
        gate = HysteresisGate()
        gate.is_open = start_open
        states = []
        for r in ratios:
            states.append(gate.update(smoother.update(r)))
        return smoother, states

    def test_steady_open_hand_opens(self):
        smoother, states = self.run_ratios([2.0] * 5)
        self.assertAlmostEqual(smoother.value, 2.0)
        self.assertTrue(states[-1])

    def test_steady_closed_hand_closes(self):
        smoother, states = self.run_ratios([1.0] * 5, start_open=True)
        self.assertAlmostEqual(smoother.value, 1.0)
        self.assertFalse(states[-1])

    def test_dead_zone_holds_state(self):
        _, states = self.run_ratios([1.5, 1.3, 1.5, 1.3])
        self.assertEqual(states, [False] * 4)
        _, states = self.run_ratios([1.5, 1.3, 1.5, 1.3], start_open=True)
        self.assertEqual(states, [True] * 4)

    def test_no_flicker_around_threshold(self):
        gate = HysteresisGate()
        seq = [1.61, 1.59, 1.61, 1.5, 1.3, 1.21, 1.19, 1.25, 1.5, 1.59]
        states = [gate.update(v) for v in seq]
        self.assertEqual(states, [True] * 6 + [False] * 4)

    def test_edges_are_strict(self):
        gate = HysteresisGate()
        self.assertFalse(gate.update(1.6))
        self.assertTrue(gate.update(1.600001))
        self.assertTrue(gate.update(1.2))
        self.assertFalse(gate.update(1.199999))

    def test_invalid_thresholds(self):
        with self.assertRaises(ValueError):
            HysteresisGate(open_threshold=1.2, close_threshold=1.6)


class TestGestureSignal(unittest.TestCase):
    def test_lost_and_wire_shape(self):
        self.assertEqual(
            GestureSignal.lost().to_dict(),
            {'isOpen': False, 'position': {'x': 0.0, 'y': 0.0}, 'isDetected': False},
        )


if __name__ == '__main__':
    unittest.main()
