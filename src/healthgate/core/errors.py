class HealthCheckError(Exception):
    """Base class for errors raised by the health check engine."""


class ProbeEvaluationFailure(HealthCheckError):
    """
    Raised by a probe when its dependency check fails.

    The runner converts it into a CRITICAL result carrying the error text.
    """

    def __init__(self, message, **details):
        super().__init__(message)
        self.details = details


class ProbeTimeout(HealthCheckError):
    """A probe exceeded its evaluation budget."""

    def __init__(self, probe_name, timeout):
        super().__init__(f"timed out after {timeout:g}s")
        self.probe_name = probe_name
        self.timeout = timeout


class ProbeInternalFault(HealthCheckError):
    """A probe implementation raised something other than ProbeEvaluationFailure."""

    def __init__(self, probe_name, cause):
        super().__init__(f"probe raised {type(cause).__name__}: {cause}")
        self.probe_name = probe_name
        self.cause = cause


class DuplicateNameError(HealthCheckError):
    def __init__(self, name, check_kind):
        super().__init__(
            f"A {check_kind.value} probe named '{name}' is already registered"
        )
        self.name = name
        self.check_kind = check_kind


class ProbeNotFoundError(HealthCheckError, LookupError):
    def __init__(self, name, check_kind):
        super().__init__(f"No {check_kind.value} probe named '{name}' is registered")
        self.name = name
        self.check_kind = check_kind


class RegistrySealedError(HealthCheckError):
    """Registration was attempted after the registry was sealed."""
