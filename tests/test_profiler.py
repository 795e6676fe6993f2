import unittest

from healthgate.core.profiler import Profiler


class TestProfiler(unittest.IsolatedAsyncioTestCase):
    async def test_async_wrapper_logs_and_returns(self):
        @Profiler.profile
        async def work():
            return 42

        with self.assertLogs("healthgate.core.profiler", level="DEBUG") as logs:
            self.assertEqual(await work(), 42)
        self.assertIn("work took", logs.output[0])

    def test_sync_wrapper_logs_on_error(self):
        @Profiler.profile
        def broken():
            raise RuntimeError("nope")

        with self.assertLogs("healthgate.core.profiler", level="DEBUG"):
            with self.assertRaises(RuntimeError):
                broken()


if __name__ == "__main__":
    unittest.main()
