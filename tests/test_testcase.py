import os
import unittest

from deferpy import HOSTED, ScopedTestCase

ENV_NAME = "DEFERPY_TESTCASE_VAR"


class TestScopedTestCase(unittest.TestCase):
    def test_restores_after_the_inner_test(self):
        os.environ.pop(ENV_NAME, None)
        seen: dict = {}

        class Inner(ScopedTestCase):
            def test_it(self):
                seen["mode"] = self.c.mode
                seen["dir"] = self.c.mkdir()
                self.c.setenv(ENV_NAME, "inside")
                self.assertEqual(os.environ[ENV_NAME], "inside")

        result = unittest.TestResult()
        Inner("test_it").run(result)
        self.assertTrue(result.wasSuccessful(), result.errors + result.failures)
        self.assertEqual(seen["mode"], HOSTED)
        self.assertNotIn(ENV_NAME, os.environ)
        self.assertFalse(os.path.exists(seen["dir"]))

    def test_restores_after_a_failing_test(self):
        os.environ.pop(ENV_NAME, None)

        class Inner(ScopedTestCase):
            def test_it(self):
                self.c.setenv(ENV_NAME, "inside")
                self.fail("expected")

        result = unittest.TestResult()
        Inner("test_it").run(result)
        self.assertEqual(len(result.failures), 1)
        self.assertNotIn(ENV_NAME, os.environ)
