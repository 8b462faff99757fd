import unittest
from unittest.mock import patch
import json
import sys
import os
import tempfile

# Add path to source
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from gesture_signal.scripts.app_control import main, read_flags, str_to_bool, update_config


class TestAppControl(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmpdir.name, 'config.json')
        with open(self.path, 'w') as f:
            json.dump({
                "tracking": {"loss_threshold": [5, "Misses tolerated"]},
                "app_control": {"pause": [False, "Pause description"]},
            }, f)

    def tearDown(self):
        self.tmpdir.cleanup()

    def read(self):
        with open(self.path) as f:
            return json.load(f)

    def test_str_to_bool(self):
        self.assertTrue(str_to_bool("Yes"))
        self.assertFalse(str_to_bool("off"))
        with self.assertRaises(ValueError):
            str_to_bool("maybe")

    def test_update_keeps_other_sections(self):
        with patch('builtins.print'):
            self.assertTrue(update_config(self.path, exit_val=True, pause_val=True))
        data = self.read()
        self.assertEqual(data['app_control']['pause'], [True, "Pause description"])
        self.assertEqual(data['app_control']['exit'][0], True)
        self.assertEqual(data['tracking']['loss_threshold'], [5, "Misses tolerated"])
        self.assertEqual(read_flags(data), {'pause': True, 'exit': True})

    def test_missing_file(self):
        with patch('builtins.print'):
            self.assertFalse(update_config(os.path.join(self.tmpdir.name, 'absent.json'), exit_val=True))

    def test_main(self):
        with patch('builtins.print'):
            self.assertEqual(main(['--config', self.path, '--pause', 'true']), 0)
            self.assertEqual(main(['--config', self.path, '--pause', 'sometimes']), 1)
            self.assertEqual(main(['--config', self.path, '--status']), 0)
        self.assertTrue(read_flags(self.read())['pause'])

    def test_main_requires_a_flag(self):
        with patch('builtins.print'), patch('sys.stdout'):
            self.assertEqual(main(['--config', self.path]), 1)


if __name__ == '__main__':
    unittest.main()
