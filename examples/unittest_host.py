"""
Hosted scopes: unittest's addCleanup unwinds everything, no done() needed.

Run: python examples/unittest_host.py
"""
import os
import unittest

from deferpy import ScopedTestCase


class TestWorkspace(ScopedTestCase):
    def test_workspace_env(self):
        home = self.c.mkdir()
        self.c.setenv("HOME", home)
        self.c.unsetenv("XDG_CONFIG_HOME")
        self.assertEqual(os.path.expanduser("~"), home)

    def test_sub_scopes(self):
        def body(c):
            c.setenv("EXAMPLE_LEVEL", "sub")
            self.assertEqual(os.environ["EXAMPLE_LEVEL"], "sub")

        self.c.setenv("EXAMPLE_LEVEL", "top")
        self.c.run("sub", body)
        self.assertEqual(os.environ["EXAMPLE_LEVEL"], "top")


if __name__ == "__main__":
    unittest.main()
