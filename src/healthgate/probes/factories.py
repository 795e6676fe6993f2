"""
Factory functions that build Probe records for common kinds of checks.

Every factory returns the same uniform Probe shape; specialised behaviour
lives in the evaluate closure rather than in subclasses.
"""
import asyncio
import inspect
import logging
import time
from typing import Any, Callable, Optional

import httpx

from healthgate.contracts.probe import Probe
from healthgate.contracts.probe_result import ProbeOutcome
from healthgate.contracts.status import CheckKind, Classification
from healthgate.core.errors import ProbeEvaluationFailure

logger = logging.getLogger(__name__)


async def _resolve(fn: Callable[[], Any]):
    if inspect.iscoroutinefunction(fn):
        value = await fn()
    else:
        # Blocking readers must not stall the loop, or the runner's timeout cannot fire
        value = await asyncio.to_thread(fn)
    if inspect.isawaitable(value):
        value = await value
    return value


def callable_probe(
    name: str,
    fn: Callable[[], Any],
    classification: Classification = Classification.DECISIVE,
    check_kind: CheckKind = CheckKind.READINESS,
    timeout: Optional[float] = None,
) -> Probe:
    return Probe(
        name=name,
        evaluate=fn,
        classification=classification,
        check_kind=check_kind,
        timeout=timeout,
    )


def threshold_probe(
    name: str,
    read_value: Callable[[], Any],
    critical_above: Optional[float] = None,
    critical_below: Optional[float] = None,
    unit: str = "",
    classification: Classification = Classification.DECISIVE,
    timeout: Optional[float] = None,
) -> Probe:
    """
    Capacity style check: CRITICAL when the reading crosses a bound.

    Args:
        read_value: Returns the current reading (sync or async), e.g. free disk
            space or queue depth.
        critical_above: Readings strictly above this are critical.
        critical_below: Readings strictly below this are critical.
        unit: Suffix used in messages.
    """
    if critical_above is None and critical_below is None:
        raise ValueError("threshold_probe needs critical_above or critical_below")

    async def evaluate():
        value = await _resolve(read_value)
        details = {"value": value}
        if critical_above is not None:
            details["critical_above"] = critical_above
            if value > critical_above:
                return ProbeOutcome.critical(
                    f"{name} is {value}{unit}, above {critical_above}{unit}", **details
                )
        if critical_below is not None:
            details["critical_below"] = critical_below
            if value < critical_below:
                return ProbeOutcome.critical(
                    f"{name} is {value}{unit}, below {critical_below}{unit}", **details
                )
        return ProbeOutcome.ok(**details)

    return Probe(
        name=name, evaluate=evaluate, classification=classification, timeout=timeout
    )


def latency_probe(
    name: str,
    operation: Callable[[], Any],
    max_latency_seconds: float,
    classification: Classification = Classification.DECISIVE,
    timeout: Optional[float] = None,
) -> Probe:
    """
    Times ``operation`` and reports CRITICAL when it is slower than the budget.
    """
    if max_latency_seconds <= 0:
        raise ValueError("max_latency_seconds must be positive")

    async def evaluate():
        start = time.perf_counter()
        try:
            await _resolve(operation)
        except ProbeEvaluationFailure:
            raise
        except Exception as e:
            raise ProbeEvaluationFailure(f"{name} failed: {e}") from e
        latency = time.perf_counter() - start
        details = {
            "latency_seconds": round(latency, 6),
            "max_latency_seconds": max_latency_seconds,
        }
        if latency > max_latency_seconds:
            return ProbeOutcome.critical(
                f"{name} took {latency:.3f}s, budget is {max_latency_seconds:g}s",
                **details,
            )
        return ProbeOutcome.ok(**details)

    return Probe(
        name=name, evaluate=evaluate, classification=classification, timeout=timeout
    )


def http_probe(
    name: str,
    url: str,
    expected_status: int = 200,
    client: Optional[httpx.AsyncClient] = None,
    classification: Classification = Classification.DECISIVE,
    timeout: Optional[float] = None,
) -> Probe:
    """
    Pings an HTTP dependency with GET and expects ``expected_status``.

    A shared ``client`` may be passed; otherwise one is opened per evaluation.
    """

    async def get(http_client):
        try:
            return await http_client.get(url)
        except httpx.HTTPError as e:
            raise ProbeEvaluationFailure(
                f"{name} unreachable: {type(e).__name__}: {e}", url=url
            ) from e

    async def evaluate():
        if client is not None:
            resp = await get(client)
        else:
            async with httpx.AsyncClient() as http_client:
                resp = await get(http_client)
        if resp.status_code != expected_status:
            return ProbeOutcome.critical(
                f"{name} returned {resp.status_code}, expected {expected_status}",
                url=url,
                status_code=resp.status_code,
            )
        logger.debug(f"HTTP probe {name} ok: {url} -> {resp.status_code}")
        return ProbeOutcome.ok(url=url, status_code=resp.status_code)

    return Probe(
        name=name, evaluate=evaluate, classification=classification, timeout=timeout
    )
