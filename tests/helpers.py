import asyncio

from healthgate.contracts.probe import Probe
from healthgate.contracts.probe_result import ProbeOutcome
from healthgate.contracts.status import CheckKind, Classification


def static_probe(
    name,
    healthy=True,
    classification=Classification.DECISIVE,
    check_kind=CheckKind.READINESS,
    message=None,
):
    async def evaluate():
        if healthy:
            return ProbeOutcome.ok(message)
        return ProbeOutcome.critical(message or f"{name} is down")

    return Probe(
        name=name,
        evaluate=evaluate,
        classification=classification,
        check_kind=check_kind,
    )


def raising_probe(name, exc, classification=Classification.DECISIVE):
    async def evaluate():
        raise exc

    return Probe(name=name, evaluate=evaluate, classification=classification)


def sleeping_probe(name, seconds, classification=Classification.DECISIVE, timeout=None):
    async def evaluate():
        await asyncio.sleep(seconds)
        return True

    return Probe(
        name=name, evaluate=evaluate, classification=classification, timeout=timeout
    )
