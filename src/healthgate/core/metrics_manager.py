import logging
from typing import Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

from healthgate.contracts.probe_result import AggregateResult, ProbeResult
from healthgate.contracts.status import Status

logger = logging.getLogger(__name__)


class MetricsManager:
    """
    Prometheus metrics for probe evaluations and aggregate status.

    Each manager owns its own CollectorRegistry so several health contexts can
    live in one process (tests, multiple apps).
    """

    CONTENT_TYPE = CONTENT_TYPE_LATEST

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or CollectorRegistry()
        self.PROBE_DURATION = Histogram(
            "healthgate_probe_duration_seconds",
            "Probe evaluation time in seconds",
            ["probe", "kind"],
            registry=self.registry,
        )
        self.PROBE_RESULTS = Counter(
            "healthgate_probe_results_total",
            "Probe evaluations by outcome",
            ["probe", "kind", "status"],
            registry=self.registry,
        )
        self.AGGREGATE_STATUS = Gauge(
            "healthgate_aggregate_status",
            "Aggregate status per check kind (1 ok, 0 critical)",
            ["kind"],
            registry=self.registry,
        )
        logger.info("MetricsManager initialized.")

    def observe_probe(self, result: ProbeResult):
        kind = result.check_kind.value
        self.PROBE_DURATION.labels(probe=result.name, kind=kind).observe(
            result.duration_seconds
        )
        self.PROBE_RESULTS.labels(
            probe=result.name, kind=kind, status=result.status.value
        ).inc()

    def observe_aggregate(self, aggregate: AggregateResult):
        self.AGGREGATE_STATUS.labels(kind=aggregate.check_kind.value).set(
            1 if aggregate.status is Status.OK else 0
        )

    def export(self) -> bytes:
        return generate_latest(self.registry)
