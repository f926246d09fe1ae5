import unittest

from deferpy import Settings, load_settings
from deferpy.config import ENV_TMP_PREFIX, ENV_TMPDIR


class TestSettings(unittest.TestCase):
    def test_defaults(self):
        s = load_settings({})
        self.assertEqual(s, Settings())
        self.assertEqual(s.temp_prefix, "deferpy-")
        self.assertIsNone(s.temp_root)

    def test_from_environment(self):
        s = load_settings({ENV_TMP_PREFIX: "ci-", ENV_TMPDIR: "/scratch"})
        self.assertEqual(s.temp_prefix, "ci-")
        self.assertEqual(s.temp_root, "/scratch")

    def test_empty_values_fall_back(self):
        s = load_settings({ENV_TMP_PREFIX: "", ENV_TMPDIR: ""})
        self.assertEqual(s, Settings())
