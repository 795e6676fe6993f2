import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Response
from fastapi.responses import ORJSONResponse

from healthgate.config.config import Config
from healthgate.config.logging_config import setup_logging
from healthgate.contracts.health_response import (
    LivenessResponse,
    MigrationEntry,
    MigrationStatus,
    MigrationUpdate,
    ReadinessResponse,
)
from healthgate.contracts.status import CheckKind
from healthgate.core.errors import ProbeNotFoundError
from healthgate.core.health_context import HealthContext

logger = logging.getLogger(__name__)


def create_app(
    context: Optional[HealthContext] = None,
    liveness_path: str = Config.LIVENESS_PATH,
    readiness_path: str = Config.READINESS_PATH,
    admin_endpoints: bool = Config.ADMIN_ENDPOINTS_ENABLED,
    configure_logging: bool = True,
) -> FastAPI:
    """
    Build the FastAPI app exposing liveness, readiness and metrics endpoints.

    Args:
        context: Health context to serve. Defaults to an unsealed one built
            from Config; register probes on ``app.state.health`` before serving.
        admin_endpoints: Mount the migration status/flip endpoints.
        configure_logging: Apply the dictConfig logging setup. Pass False when
            embedding in an application that owns logging.

    Serve with ``uvicorn --factory healthgate.server:create_app``.
    """
    if configure_logging:
        setup_logging()
    if context is None:
        context = HealthContext.from_config(seal=False)
    app = FastAPI(default_response_class=ORJSONResponse)
    app.state.health = context

    @app.get(liveness_path, response_model=LivenessResponse)
    async def liveness():
        status_code, body = await context.respond(CheckKind.LIVENESS)
        return ORJSONResponse(body, status_code=status_code)

    @app.get(
        readiness_path,
        response_model=ReadinessResponse,
        responses={context.responder.unhealthy_status_code: {"model": ReadinessResponse}},
    )
    async def readiness():
        status_code, body = await context.respond(CheckKind.READINESS)
        return ORJSONResponse(body, status_code=status_code)

    @app.get("/metrics")
    def metrics():
        return Response(context.metrics.export(), media_type=context.metrics.CONTENT_TYPE)

    if admin_endpoints:
        migration_path = f"{liveness_path}/migration"

        @app.get(migration_path, response_model=MigrationStatus)
        async def migration_status():
            return context.migration.status()

        @app.put(
            f"{migration_path}/{{check_kind}}/{{name}}", response_model=MigrationEntry
        )
        async def set_migrated(check_kind: CheckKind, name: str, update: MigrationUpdate):
            try:
                context.set_migrated(name, check_kind, update.migrated)
            except ProbeNotFoundError as e:
                raise HTTPException(status_code=404, detail=str(e))
            for entry in context.migration.status().probes:
                if entry.name == name and entry.check_kind is check_kind:
                    return entry
            raise HTTPException(status_code=404, detail=f"Probe '{name}' disappeared")

        logger.info(f"Migration admin endpoints mounted under {migration_path}")

    return app

