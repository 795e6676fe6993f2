"""
Explicitly constructed wiring of registry, migration switch, runner,
aggregator and responder for one process.
"""
import logging
from typing import Iterable, Optional

from healthgate.config.config import Config
from healthgate.contracts.probe import Probe, RegisteredProbe
from healthgate.contracts.status import CheckKind
from healthgate.core.aggregator import Aggregator
from healthgate.core.metrics_manager import MetricsManager
from healthgate.core.migration import MigrationSwitch, parse_migrated_probes
from healthgate.core.probe_registry import ProbeRegistry
from healthgate.core.probe_runner import ProbeRunner
from healthgate.core.responder import Responder

logger = logging.getLogger(__name__)


class HealthContext:
    def __init__(
        self,
        registry: Optional[ProbeRegistry] = None,
        migration_mode: bool = Config.MIGRATION_MODE,
        probe_timeout: float = Config.PROBE_TIMEOUT_SECONDS,
        probe_retries: int = Config.PROBE_RETRIES,
        max_concurrent_probes: int = Config.MAX_CONCURRENT_PROBES,
        result_cache_seconds: float = Config.RESULT_CACHE_SECONDS,
        unhealthy_status_code: int = Config.UNHEALTHY_STATUS_CODE,
        metrics: Optional[MetricsManager] = None,
    ):
        self.registry = registry if registry is not None else ProbeRegistry()
        self.metrics = metrics or MetricsManager()
        self.migration = MigrationSwitch(self.registry, enabled=migration_mode)
        self.runner = ProbeRunner(
            timeout=probe_timeout,
            retries=probe_retries,
            max_concurrent_probes=max_concurrent_probes,
        )
        self.aggregator = Aggregator(
            self.registry,
            self.migration,
            self.runner,
            metrics=self.metrics,
            cache_seconds=result_cache_seconds,
        )
        self.responder = Responder(
            self.aggregator, unhealthy_status_code=unhealthy_status_code
        )

    @classmethod
    def from_config(cls, probes: Iterable[Probe] = (), config=Config, seal: bool = True):
        """
        Build a context from Config and register the startup probes.

        Raises:
            DuplicateNameError: If two probes share a name and check kind.
            ValueError: If MIGRATED_PROBES names an unknown check kind.
        """
        context = cls(
            migration_mode=config.MIGRATION_MODE,
            probe_timeout=config.PROBE_TIMEOUT_SECONDS,
            probe_retries=config.PROBE_RETRIES,
            max_concurrent_probes=config.MAX_CONCURRENT_PROBES,
            result_cache_seconds=config.RESULT_CACHE_SECONDS,
            unhealthy_status_code=config.UNHEALTHY_STATUS_CODE,
        )
        return context.initialize(
            probes, migrated=parse_migrated_probes(config.MIGRATED_PROBES), seal=seal
        )

    def initialize(self, probes: Iterable[Probe], migrated: Iterable = (), seal: bool = True):
        migrated = set(migrated)
        registered = set()
        for probe in probes:
            self.registry.register(probe, migrated=probe.key in migrated)
            registered.add(probe.key)
        for name, kind in sorted(migrated - registered, key=lambda k: (k[1].value, k[0])):
            logger.warning(f"Migrated flag configured for unknown {kind.value} probe '{name}'")
        if seal:
            self.registry.seal()
        return self

    def register(self, probe: Probe, migrated: bool = False) -> RegisteredProbe:
        return self.registry.register(probe, migrated=migrated)

    def set_migrated(self, name: str, check_kind: CheckKind, migrated: bool) -> bool:
        return self.migration.set_migrated(name, check_kind, migrated)

    async def respond(self, check_kind: CheckKind):
        return await self.responder.respond(check_kind)
