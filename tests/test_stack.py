import unittest

from deferpy import ActionStack, UsageError


class TestActionStack(unittest.TestCase):
    def test_unwind_runs_in_lifo_order(self):
        order: list[str] = []
        s = ActionStack()
        for tag in ("a", "b", "c"):
            s.push(lambda tag=tag: order.append(tag))
        self.assertEqual(len(s), 3)
        self.assertTrue(s.pending)
        s.unwind()
        self.assertEqual(order, ["c", "b", "a"])
        self.assertTrue(s.done)
        self.assertFalse(s.pending)

    def test_unwind_is_idempotent(self):
        calls = {"n": 0}
        s = ActionStack()
        s.push(lambda: calls.__setitem__("n", calls["n"] + 1))
        s.unwind()
        s.unwind()
        self.assertEqual(calls["n"], 1)

    def test_push_after_unwind_is_a_usage_error(self):
        s = ActionStack(name="sealed")
        s.unwind()
        with self.assertRaisesRegex(UsageError, "unwound stack 'sealed'"):
            s.push(lambda: None)

    def test_push_rejects_non_callable(self):
        with self.assertRaises(UsageError):
            ActionStack().push("not an action")  # type: ignore[arg-type]

    def test_registration_is_closed_during_unwind(self):
        s = ActionStack()
        ran: list[str] = []
        s.push(lambda: ran.append("first"))
        s.push(lambda: s.push(lambda: ran.append("late")))
        with self.assertRaises(UsageError):
            s.unwind()
        self.assertEqual(ran, ["first"])

    def test_failing_action_does_not_stop_the_rest(self):
        ran: list[int] = []
        s = ActionStack()

        def boom():
            raise ValueError("boom")

        def bang():
            raise KeyError("bang")

        s.push(lambda: ran.append(0))
        s.push(bang)
        s.push(lambda: ran.append(1))
        s.push(boom)
        with self.assertLogs("deferpy.stack", level="WARNING"):
            with self.assertRaisesRegex(ValueError, "boom"):
                s.unwind()
        self.assertEqual(ran, [1, 0])
        self.assertTrue(s.done)
