import unittest
from types import SimpleNamespace
import sys
import os

import numpy as np

# Add path to source
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from gesture_signal.utils.math_utils import (
    MovingAverage,
    euclidean,
    landmarks_to_array,
    normalized_to_pixels,
    pixels_to_ndc,
)


class TestLandmarkConversion(unittest.TestCase):
    def test_objects_and_sequences(self):
        objs = [SimpleNamespace(x=0.1, y=0.2, z=0.3), SimpleNamespace(x=0.4, y=0.5, z=0.6)]
        np.testing.assert_allclose(landmarks_to_array(objs), [[0.1, 0.2], [0.4, 0.5]])

        seqs = [(1, 2, 3), (4, 5)]
        np.testing.assert_allclose(landmarks_to_array(seqs), [[1, 2], [4, 5]])

    def test_empty(self):
        self.assertEqual(landmarks_to_array([]).shape, (0, 2))

    def test_normalized_to_pixels_keeps_floats(self):
        np.testing.assert_allclose(normalized_to_pixels((0.5, 0.25), (640, 480)), [320.0, 120.0])
        # Slightly outside the frame is kept as-is
        np.testing.assert_allclose(
            normalized_to_pixels(np.array([[1.1, -0.1]]), (100, 100)), [[110.0, -10.0]]
        )


class TestNdc(unittest.TestCase):
    def test_center_and_edges(self):
        self.assertEqual(pixels_to_ndc((320, 240), (640, 480)), (0.0, 0.0))
        self.assertEqual(pixels_to_ndc((0, 0), (640, 480)), (1.0, 1.0))
        self.assertEqual(pixels_to_ndc((640, 480), (640, 480)), (-1.0, -1.0))

    def test_zero_size_rejected(self):
        with self.assertRaises(ValueError):
            pixels_to_ndc((1, 1), (0, 480))


class TestMovingAverage(unittest.TestCase):
    def test_window_evicts_oldest(self):
        avg = MovingAverage(n=3)
        for v in (1.0, 2.0, 3.0):
            avg.update(v)
        self.assertTrue(avg.full)
        self.assertAlmostEqual(float(avg.update(10.0)), 5.0)
        self.assertEqual(len(avg), 3)

    def test_vectors(self):
        avg = MovingAverage(n=2)
        avg.update([0.0, 2.0])
        np.testing.assert_allclose(avg.update([2.0, 4.0]), [1.0, 3.0])

    def test_clear_and_empty(self):
        avg = MovingAverage(n=2)
        avg.update(1.0)
        avg.clear()
        self.assertEqual(len(avg), 0)
        with self.assertRaises(ValueError):
            avg.mean()

    def test_invalid_window(self):
        with self.assertRaises(ValueError):
            MovingAverage(n=0)

    def test_euclidean_rows(self):
        d = euclidean([[3, 4], [0, 1]], [0, 0])
        np.testing.assert_allclose(d, [5.0, 1.0])


if __name__ == '__main__':
    unittest.main()
