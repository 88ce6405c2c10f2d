"""Common exceptions for the deployment tool.

``DeploymentError`` is the single error type raised where external processes
and HTTP calls are invoked, so downstream classification always sees a known
shape: a kind, a message and the raw tool output.
"""

from enum import StrEnum


class ErrorKind(StrEnum):
    """Classification of a deployment failure."""

    NETWORK = "network"
    TIMEOUT = "timeout"
    RATE_LIMIT = "rate_limit"
    PLATFORM_UNAVAILABLE = "platform_unavailable"
    CONFIGURATION = "configuration"
    DEPENDENCY = "dependency"
    RESOURCE = "resource"
    AUTHENTICATION = "authentication"
    BUILD = "build"
    VALIDATION = "validation"
    UNKNOWN = "unknown"

    @property
    def retryable(self) -> bool:
        """Whether failures of this kind are transient and worth retrying."""
        return self in RETRYABLE_KINDS


RETRYABLE_KINDS = frozenset({ErrorKind.NETWORK, ErrorKind.TIMEOUT, ErrorKind.RATE_LIMIT, ErrorKind.PLATFORM_UNAVAILABLE})


class DeploymentError(Exception):
    """Raised when a build, deploy or status call fails.

    Attributes:
        kind: Classification known at the raise site, ``UNKNOWN`` when the
            error handler should classify it from the message and output.
        raw_output: Combined stdout/stderr of the failing command, if any.
    """

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.UNKNOWN, raw_output: str | None = None):
        self.message = message
        self.kind = kind
        self.raw_output = raw_output
        super().__init__(message)


class UnknownEnvironmentError(ValueError):
    """Raised when an environment name is outside the supported set."""

    def __init__(self, environment: str):
        self.environment = environment
        super().__init__(f"Unknown environment: {environment}")
