import logging
import time
from typing import Dict, Optional, Tuple

from healthgate.abstractions.registry import Registry
from healthgate.contracts.probe import RegisteredProbe
from healthgate.contracts.probe_result import AggregateResult
from healthgate.contracts.status import CheckKind, Status
from healthgate.core.metrics_manager import MetricsManager
from healthgate.core.migration import MigrationSwitch
from healthgate.core.probe_runner import ProbeRunner
from healthgate.core.profiler import Profiler

logger = logging.getLogger(__name__)


class Aggregator:
    """
    Runs every probe registered for a check kind and combines the results.

    The aggregate is CRITICAL only when a probe that currently counts as
    decisive (see MigrationSwitch.is_decisive) reports CRITICAL. Every other
    CRITICAL result is still carried in the aggregate for visibility. All
    probes are awaited even once the outcome is known.
    """

    def __init__(
        self,
        registry: Registry,
        migration: MigrationSwitch,
        runner: ProbeRunner,
        metrics: Optional[MetricsManager] = None,
        cache_seconds: float = 0.0,
    ):
        self.registry = registry
        self.migration = migration
        self.runner = runner
        self.metrics = metrics
        self.cache_seconds = cache_seconds
        # kind -> (expires_at, entries snapshot, migration mode, result)
        self._cache: Dict[
            CheckKind, Tuple[float, Tuple[RegisteredProbe, ...], bool, AggregateResult]
        ] = {}
        self._last_status: Dict[CheckKind, Status] = {}

    def _cached(self, check_kind, entries, mode) -> Optional[AggregateResult]:
        if self.cache_seconds <= 0:
            return None
        hit = self._cache.get(check_kind)
        if hit is None:
            return None
        expires_at, cached_entries, cached_mode, result = hit
        # A registry or migration change since caching invalidates the entry
        if time.monotonic() >= expires_at or cached_mode != mode or cached_entries != entries:
            return None
        return result

    def invalidate(self):
        self._cache.clear()

    @Profiler.profile
    async def aggregate(self, check_kind: CheckKind) -> AggregateResult:
        entries = self.registry.probes_for(check_kind)
        mode = self.migration.enabled
        cached = self._cached(check_kind, entries, mode)
        if cached is not None:
            logger.debug(f"Serving cached {check_kind.value} aggregate")
            return cached

        results = await self.runner.run_all(entries)

        decisive_failures = []
        for entry, result in zip(entries, results):
            if self.metrics:
                self.metrics.observe_probe(result)
            if not result.is_critical:
                continue
            if self.migration.is_decisive(entry):
                decisive_failures.append(result.name)
                logger.warning(
                    f"Decisive probe '{result.name}' is critical: {result.message}"
                )
            else:
                logger.warning(
                    f"Probe '{result.name}' is critical but does not affect "
                    f"{check_kind.value} ({entry.classification.value}, "
                    f"migrated={entry.migrated}): {result.message}"
                )

        status = Status.CRITICAL if decisive_failures else Status.OK
        aggregate = AggregateResult(
            check_kind=check_kind, status=status, results=tuple(results)
        )
        self._record_transition(check_kind, status, decisive_failures)
        if self.metrics:
            self.metrics.observe_aggregate(aggregate)
        if self.cache_seconds > 0:
            self._cache[check_kind] = (
                time.monotonic() + self.cache_seconds,
                entries,
                mode,
                aggregate,
            )
        return aggregate

    def _record_transition(self, check_kind, status, decisive_failures):
        previous = self._last_status.get(check_kind)
        self._last_status[check_kind] = status
        if previous is None or previous is status:
            return
        if status is Status.CRITICAL:
            logger.warning(
                f"Health transition: {check_kind.value} ok -> critical "
                f"(failing: {', '.join(decisive_failures)})"
            )
        else:
            logger.info(f"Health transition: {check_kind.value} critical -> ok")
