import os


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """
    Configuration class for environment variables and default settings.
    """

    # Per-probe evaluation budget; a probe still running after this is CRITICAL
    PROBE_TIMEOUT_SECONDS = float(os.environ.get("PROBE_TIMEOUT_SECONDS", "3.0"))
    # Extra attempts for probes that fail (not for timeouts)
    PROBE_RETRIES = int(os.environ.get("PROBE_RETRIES", "0"))
    MAX_CONCURRENT_PROBES = int(os.environ.get("MAX_CONCURRENT_PROBES", "20"))

    # While true, DECISIVE probes only fail readiness once marked migrated
    MIGRATION_MODE = _env_bool("MIGRATION_MODE", "true")
    # Comma separated "name" (readiness) or "kind:name" entries seeded as migrated
    MIGRATED_PROBES = os.environ.get("MIGRATED_PROBES", "")

    # 0 disables reuse of aggregate results across requests
    RESULT_CACHE_SECONDS = float(os.environ.get("RESULT_CACHE_SECONDS", "0"))

    LIVENESS_PATH = os.environ.get("LIVENESS_PATH", "/healthcheck")
    READINESS_PATH = os.environ.get("READINESS_PATH", f"{LIVENESS_PATH}/ready")
    UNHEALTHY_STATUS_CODE = int(os.environ.get("UNHEALTHY_STATUS_CODE", "500"))

    # Operator endpoints for flipping migration flags at runtime
    ADMIN_ENDPOINTS_ENABLED = _env_bool("ADMIN_ENDPOINTS_ENABLED", "false")
