import asyncio
import time
import unittest

import httpx

from healthgate.contracts.probe import RegisteredProbe
from healthgate.contracts.status import CheckKind, Classification, Status
from healthgate.core.errors import ProbeEvaluationFailure
from healthgate.core.probe_runner import ProbeRunner
from healthgate.probes.factories import (
    callable_probe,
    http_probe,
    latency_probe,
    threshold_probe,
)


class TestFactories(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.runner = ProbeRunner(timeout=1.0)

    async def run_probe(self, probe):
        return await self.runner.run(RegisteredProbe(probe=probe))

    async def test_callable_probe(self):
        probe = callable_probe(
            "flag",
            lambda: True,
            classification=Classification.INFORMATIONAL,
            check_kind=CheckKind.LIVENESS,
            timeout=0.5,
        )
        self.assertEqual(probe.check_kind, CheckKind.LIVENESS)
        self.assertEqual(probe.timeout, 0.5)
        result = await self.run_probe(probe)
        self.assertEqual(result.status, Status.OK)

    async def test_threshold_above(self):
        probe = threshold_probe("queue_depth", lambda: 120, critical_above=100)
        result = await self.run_probe(probe)
        self.assertEqual(result.status, Status.CRITICAL)
        self.assertIn("above 100", result.message)
        self.assertEqual(result.details["value"], 120)

    async def test_threshold_below_with_async_reader(self):
        async def free_disk():
            return 2.5

        probe = threshold_probe("disk_free", free_disk, critical_below=5, unit="GB")
        result = await self.run_probe(probe)
        self.assertEqual(result.status, Status.CRITICAL)
        self.assertEqual(result.message, "disk_free is 2.5GB, below 5GB")

    async def test_threshold_within_bounds(self):
        probe = threshold_probe("load", lambda: 0.5, critical_above=0.9, critical_below=0.0)
        result = await self.run_probe(probe)
        self.assertEqual(result.status, Status.OK)

    def test_threshold_requires_a_bound(self):
        with self.assertRaises(ValueError):
            threshold_probe("load", lambda: 1)

    async def test_latency_within_budget(self):
        probe = latency_probe("cache", lambda: None, max_latency_seconds=0.5)
        result = await self.run_probe(probe)
        self.assertEqual(result.status, Status.OK)
        self.assertIn("latency_seconds", result.details)

    async def test_latency_over_budget(self):
        async def slow():
            await asyncio.sleep(0.05)

        probe = latency_probe("cache", slow, max_latency_seconds=0.01)
        result = await self.run_probe(probe)
        self.assertEqual(result.status, Status.CRITICAL)
        self.assertIn("budget", result.message)

    async def test_latency_operation_failure(self):
        def broken():
            raise ConnectionError("refused")

        probe = latency_probe("cache", broken, max_latency_seconds=1)
        result = await self.run_probe(probe)
        self.assertEqual(result.status, Status.CRITICAL)
        self.assertEqual(result.message, "cache failed: refused")

    async def test_blocking_operation_times_out(self):
        runner = ProbeRunner(timeout=0.2)
        entries = [
            RegisteredProbe(
                probe=latency_probe("db", lambda: time.sleep(1), max_latency_seconds=5)
            ),
            RegisteredProbe(probe=callable_probe("fast", lambda: True)),
        ]
        start = time.perf_counter()
        results = await runner.run_all(entries)
        elapsed = time.perf_counter() - start
        self.assertLess(elapsed, 0.8)
        self.assertEqual(results[0].status, Status.CRITICAL)
        self.assertEqual(results[0].message, "timed out after 0.2s")
        self.assertEqual(results[1].status, Status.OK)

    async def test_blocking_reader_times_out(self):
        def slow_reader():
            time.sleep(1)
            return 1

        runner = ProbeRunner(timeout=0.2)
        probe = threshold_probe("queue_depth", slow_reader, critical_above=100)
        start = time.perf_counter()
        result = await runner.run(RegisteredProbe(probe=probe))
        self.assertLess(time.perf_counter() - start, 0.8)
        self.assertEqual(result.status, Status.CRITICAL)
        self.assertIn("timed out", result.message)

    def test_latency_budget_validation(self):
        with self.assertRaises(ValueError):
            latency_probe("cache", lambda: None, max_latency_seconds=0)


class TestHttpProbe(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.runner = ProbeRunner(timeout=1.0)

    def client_for(self, handler):
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    async def test_expected_status(self):
        async with self.client_for(lambda request: httpx.Response(200)) as client:
            probe = http_probe("search", "http://search.internal/ping", client=client)
            result = await self.runner.run(RegisteredProbe(probe=probe))
        self.assertEqual(result.status, Status.OK)
        self.assertEqual(result.details["status_code"], 200)

    async def test_unexpected_status(self):
        async with self.client_for(lambda request: httpx.Response(503)) as client:
            probe = http_probe("search", "http://search.internal/ping", client=client)
            result = await self.runner.run(RegisteredProbe(probe=probe))
        self.assertEqual(result.status, Status.CRITICAL)
        self.assertIn("returned 503", result.message)

    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with self.client_for(handler) as client:
            probe = http_probe("search", "http://search.internal/ping", client=client)
            with self.assertRaises(ProbeEvaluationFailure):
                await probe.evaluate()
            result = await self.runner.run(RegisteredProbe(probe=probe))
        self.assertEqual(result.status, Status.CRITICAL)
        self.assertIn("unreachable", result.message)
        self.assertEqual(result.details["url"], "http://search.internal/ping")


if __name__ == "__main__":
    unittest.main()
