import asyncio
import inspect
import logging
import time
from typing import Any, Iterable, List, Optional, Tuple

from healthgate.config.config import Config
from healthgate.contracts.probe import Probe, RegisteredProbe
from healthgate.contracts.probe_result import ProbeOutcome, ProbeResult
from healthgate.contracts.status import Status
from healthgate.core.errors import (
    ProbeEvaluationFailure,
    ProbeInternalFault,
    ProbeTimeout,
)
from healthgate.core.profiler import Profiler

logger = logging.getLogger(__name__)


def to_outcome(value: Any) -> ProbeOutcome:
    """
    Normalize whatever a probe returned into a ProbeOutcome.

    Raises:
        TypeError: If the value is not an outcome, Status, bool or mapping.
    """
    if isinstance(value, ProbeOutcome):
        return value
    if isinstance(value, Status):
        return ProbeOutcome(status=value)
    if isinstance(value, bool):
        return ProbeOutcome(status=Status.from_bool(value))
    if isinstance(value, dict):
        return ProbeOutcome.model_validate(value)
    raise TypeError(f"unsupported probe return value {value!r}")


class ProbeRunner:
    """
    Evaluates probes with a per-probe timeout, optional retries and a bound on
    concurrency. Never raises for probe failures: every fault becomes a
    CRITICAL ProbeResult.
    """

    def __init__(
        self,
        timeout: float = Config.PROBE_TIMEOUT_SECONDS,
        retries: int = Config.PROBE_RETRIES,
        max_concurrent_probes: int = Config.MAX_CONCURRENT_PROBES,
    ):
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        if retries < 0:
            raise ValueError("retries must not be negative")
        if max_concurrent_probes < 1:
            raise ValueError("max_concurrent_probes must be at least 1")
        self.timeout = timeout
        self.retries = retries
        self.max_concurrent_probes = max_concurrent_probes

    @staticmethod
    async def _call(probe: Probe):
        try:
            if inspect.iscoroutinefunction(probe.evaluate):
                value = await probe.evaluate()
            else:
                # Keep blocking dependency clients off the event loop
                value = await asyncio.to_thread(probe.evaluate)
            if inspect.isawaitable(value):
                value = await value
        except (TimeoutError, asyncio.TimeoutError) as e:
            # Raised by the dependency client itself, not by the evaluation budget
            raise ProbeEvaluationFailure(str(e) or type(e).__name__) from e
        return value

    async def _acquire_and_call(
        self, probe: Probe, semaphore: Optional[asyncio.Semaphore]
    ):
        if semaphore is None:
            return await self._call(probe)
        async with semaphore:
            return await self._call(probe)

    async def _attempt(
        self,
        probe: Probe,
        timeout: float,
        semaphore: Optional[asyncio.Semaphore] = None,
    ) -> Tuple[ProbeOutcome, bool]:
        """
        Run one evaluation. Returns the outcome and whether a retry may help.

        Time spent waiting for a concurrency slot counts against the timeout.
        """
        try:
            value = await asyncio.wait_for(
                self._acquire_and_call(probe, semaphore), timeout=timeout
            )
            outcome = to_outcome(value)
        except asyncio.TimeoutError:
            error = ProbeTimeout(probe.name, timeout)
            logger.warning(f"Probe '{probe.name}' {error}")
            return ProbeOutcome.critical(str(error), timeout_seconds=timeout), False
        except ProbeEvaluationFailure as e:
            logger.warning(f"Probe '{probe.name}' failed: {e}")
            return (
                ProbeOutcome(status=Status.CRITICAL, message=str(e), details=e.details),
                True,
            )
        except Exception as e:
            fault = ProbeInternalFault(probe.name, e)
            logger.exception(f"Probe '{probe.name}' malfunctioned")
            return ProbeOutcome.critical(str(fault)), True
        return outcome, outcome.status is Status.CRITICAL

    async def run(
        self, entry: RegisteredProbe, semaphore: Optional[asyncio.Semaphore] = None
    ) -> ProbeResult:
        probe = entry.probe
        timeout = probe.timeout or self.timeout
        start = time.perf_counter()
        attempts = 0
        while True:
            attempts += 1
            outcome, retryable = await self._attempt(probe, timeout, semaphore)
            if not retryable or attempts > self.retries:
                break
            logger.info(
                f"Retrying probe '{probe.name}' (attempt {attempts + 1} of {self.retries + 1})"
            )
        details = outcome.details
        if attempts > 1:
            details = {**details, "attempts": attempts}
        return ProbeResult(
            name=probe.name,
            check_kind=probe.check_kind,
            classification=probe.classification,
            migrated=entry.migrated,
            status=outcome.status,
            message=outcome.message,
            details=details,
            duration_seconds=time.perf_counter() - start,
        )

    @Profiler.profile
    async def run_all(self, entries: Iterable[RegisteredProbe]) -> List[ProbeResult]:
        """
        Evaluate every entry concurrently and return results in input order.
        """
        entries = list(entries)
        if not entries:
            return []
        # One semaphore per call: it must belong to the running event loop
        semaphore = asyncio.Semaphore(self.max_concurrent_probes)
        return list(
            await asyncio.gather(*(self.run(e, semaphore) for e in entries))
        )
