import unittest
from unittest.mock import AsyncMock

from helpers import raising_probe, static_probe

from healthgate.contracts.status import CheckKind, Classification
from healthgate.core.health_context import HealthContext
from healthgate.core.responder import ENGINE_CHECK_NAME, Responder


class TestResponder(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.context = HealthContext(migration_mode=True, probe_timeout=0.2)

    async def test_liveness_ignores_all_probes(self):
        for name in ("db", "cache", "queue"):
            self.context.register(static_probe(name, healthy=False), migrated=True)
        self.context.register(
            static_probe("loop", healthy=False, check_kind=CheckKind.LIVENESS),
            migrated=True,
        )
        self.context.migration.complete_migration()
        status_code, body = await self.context.respond(CheckKind.LIVENESS)
        self.assertEqual(status_code, 200)
        self.assertEqual(body, {"status": "ok"})

    async def test_empty_registry(self):
        status_code, body = await self.context.respond(CheckKind.READINESS)
        self.assertEqual(status_code, 200)
        self.assertEqual(body, {"status": "ok", "checks": []})

    async def test_unmigrated_cache_scenario(self):
        self.context.register(static_probe("db"), migrated=True)
        self.context.register(static_probe("cache", healthy=False, message="connection refused"))
        status_code, body = await self.context.respond(CheckKind.READINESS)
        self.assertEqual(status_code, 200)
        self.assertEqual(body["status"], "ok")
        self.assertEqual(
            body["checks"],
            [
                {"name": "db", "status": "ok", "message": None, "migrated": True},
                {
                    "name": "cache",
                    "status": "critical",
                    "message": "connection refused",
                    "migrated": False,
                },
            ],
        )

    async def test_migrated_cache_scenario(self):
        self.context.register(static_probe("db"), migrated=True)
        self.context.register(static_probe("cache", healthy=False, message="connection refused"))
        _, before = await self.context.respond(CheckKind.READINESS)
        self.context.set_migrated("cache", CheckKind.READINESS, True)
        status_code, after = await self.context.respond(CheckKind.READINESS)
        self.assertEqual(status_code, 500)
        self.assertEqual(after["status"], "critical")
        # Only the status and the flipped flag differ
        self.assertEqual([set(c) for c in before["checks"]], [set(c) for c in after["checks"]])
        self.assertEqual(after["checks"][1]["migrated"], True)
        self.assertEqual(after["checks"][1]["status"], "critical")
        self.assertEqual(after["checks"][0], before["checks"][0])

    async def test_every_probe_is_listed(self):
        self.context.register(static_probe("db", healthy=False), migrated=True)
        self.context.register(
            static_probe("tokens", healthy=False, classification=Classification.INFORMATIONAL)
        )
        self.context.register(raising_probe("buggy", KeyError("x")))
        status_code, body = await self.context.respond(CheckKind.READINESS)
        self.assertEqual(status_code, 500)
        self.assertEqual([c["name"] for c in body["checks"]], ["db", "tokens", "buggy"])
        self.assertTrue(all(c["status"] == "critical" for c in body["checks"]))

    async def test_custom_unhealthy_status_code(self):
        context = HealthContext(unhealthy_status_code=503)
        context.register(static_probe("db", healthy=False), migrated=True)
        status_code, _ = await context.respond(CheckKind.READINESS)
        self.assertEqual(status_code, 503)

    async def test_engine_failure_degrades_safely(self):
        aggregator = AsyncMock()
        aggregator.aggregate = AsyncMock(side_effect=RuntimeError("engine bug"))
        responder = Responder(aggregator)
        with self.assertLogs("healthgate.core.responder", level="ERROR"):
            status_code, body = await responder.respond(CheckKind.READINESS)
        self.assertEqual(status_code, 200)
        self.assertEqual(body["status"], "ok")
        self.assertEqual(body["checks"][0]["name"], ENGINE_CHECK_NAME)
        self.assertEqual(body["checks"][0]["status"], "critical")
        self.assertIn("engine bug", body["checks"][0]["message"])


class TestHealthContext(unittest.TestCase):
    def test_initialize_seeds_flags_and_seals(self):
        context = HealthContext().initialize(
            [static_probe("db"), static_probe("cache")],
            migrated={("db", CheckKind.READINESS)},
        )
        self.assertTrue(context.registry.sealed)
        self.assertTrue(context.registry.is_migrated("db", CheckKind.READINESS))
        self.assertFalse(context.registry.is_migrated("cache", CheckKind.READINESS))

    def test_initialize_warns_about_unknown_flags(self):
        with self.assertLogs("healthgate.core.health_context", level="WARNING") as logs:
            HealthContext().initialize(
                [static_probe("db")], migrated={("queue", CheckKind.READINESS)}
            )
        self.assertTrue(any("queue" in line for line in logs.output))

    def test_duplicate_fails_fast(self):
        from healthgate.core.errors import DuplicateNameError

        with self.assertRaises(DuplicateNameError):
            HealthContext().initialize([static_probe("db"), static_probe("db")])

    def test_from_config(self):
        class TestConfig:
            MIGRATION_MODE = False
            PROBE_TIMEOUT_SECONDS = 1.0
            PROBE_RETRIES = 1
            MAX_CONCURRENT_PROBES = 4
            RESULT_CACHE_SECONDS = 0.0
            UNHEALTHY_STATUS_CODE = 503
            MIGRATED_PROBES = "cache"

        context = HealthContext.from_config(
            [static_probe("db"), static_probe("cache")], config=TestConfig
        )
        self.assertFalse(context.migration.enabled)
        self.assertEqual(context.runner.retries, 1)
        self.assertEqual(context.responder.unhealthy_status_code, 503)
        self.assertTrue(context.registry.is_migrated("cache", CheckKind.READINESS))
        self.assertTrue(context.registry.sealed)


if __name__ == "__main__":
    unittest.main()
