from __future__ import annotations
import unittest

from .scope import Scope


class ScopedTestCase(unittest.TestCase):
    """TestCase whose ``self.c`` scope is unwound through ``addCleanup``.

    Example:
        ```python
        class TestConfig(ScopedTestCase):
            def test_reads_home(self):
                self.c.setenv("HOME", self.c.mkdir())
                ...
        ```
    """
    c: Scope

    def setUp(self) -> None:
        super().setUp()
        self.c = Scope(self, name=self.id())
