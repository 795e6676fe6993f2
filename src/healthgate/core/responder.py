import logging
from typing import Any, Dict, Tuple

from healthgate.contracts.health_response import (
    CheckEntry,
    LivenessResponse,
    ReadinessResponse,
)
from healthgate.contracts.status import CheckKind, Status
from healthgate.core.aggregator import Aggregator

logger = logging.getLogger(__name__)

ENGINE_CHECK_NAME = "healthcheck_engine"


class Responder:
    """
    Maps check kinds to an HTTP status code and a JSON-ready body.
    """

    def __init__(self, aggregator: Aggregator, unhealthy_status_code: int = 500):
        self.aggregator = aggregator
        self.unhealthy_status_code = unhealthy_status_code

    async def respond(self, check_kind: CheckKind) -> Tuple[int, Dict[str, Any]]:
        if check_kind is CheckKind.LIVENESS:
            # Liveness only proves the process is scheduling requests
            return 200, LivenessResponse().model_dump(mode="json")
        return await self._readiness()

    async def _readiness(self) -> Tuple[int, Dict[str, Any]]:
        try:
            aggregate = await self.aggregator.aggregate(CheckKind.READINESS)
        except Exception as e:
            # An engine bug must not pull the instance out of rotation
            logger.exception("Readiness aggregation failed")
            body = ReadinessResponse(
                status=Status.OK,
                checks=[
                    CheckEntry(
                        name=ENGINE_CHECK_NAME,
                        status=Status.CRITICAL,
                        message=f"aggregation failed: {type(e).__name__}: {e}",
                        migrated=False,
                    )
                ],
            )
            return 200, body.model_dump(mode="json")
        status_code = (
            200 if aggregate.status is Status.OK else self.unhealthy_status_code
        )
        return status_code, ReadinessResponse.from_aggregate(aggregate).model_dump(
            mode="json"
        )
