"""Classification of build and deployment failures.

The classification decides whether a failure is retried and which recovery
actions are suggested. An explicit kind set where the error was raised wins;
otherwise the message and captured tool output are matched against the
patterns below, first match wins.
"""

import re

from pages_deployer.exceptions import DeploymentError, ErrorKind

from .models import ClassifiedError

_PATTERNS: list[tuple[ErrorKind, re.Pattern[str]]] = [
    (
        ErrorKind.RESOURCE,
        re.compile(r"enospc|no space left|out of memory|heap out of memory|javascript heap|cannot allocate memory"),
    ),
    (
        ErrorKind.DEPENDENCY,
        re.compile(
            r"module not found|cannot find module|cannot find package|err_module_not_found|command not found"
            r"|\b(?:vite|tsc|wrangler|npm|pnpm|yarn|node)(?:: command)?: not found"
        ),
    ),
    (
        ErrorKind.AUTHENTICATION,
        re.compile(
            r"not logged in|unauthori[sz]ed|authentication (?:error|failed|required)|wrangler login"
            r"|invalid (?:api )?token|(?:http|status|code)[ :]*403\b|forbidden"
        ),
    ),
    (ErrorKind.RATE_LIMIT, re.compile(r"rate.?limit|too many requests|(?:http|status|code)[ :]*429\b|quota exceeded")),
    (
        ErrorKind.PLATFORM_UNAVAILABLE,
        re.compile(r"service unavailable|bad gateway|gateway time-?out|temporarily unavailable|(?:http|status|code)[ :]*50[234]\b"),
    ),
    (
        ErrorKind.NETWORK,
        re.compile(r"etimedout|econnreset|econnrefused|enotfound|eai_again|network error|socket hang up|timed out|\btimeout\b"),
    ),
    (
        ErrorKind.CONFIGURATION,
        re.compile(r"configuration|wrangler\.toml|environment variable|missing required|missing script|build script|package\.json|not configured"),
    ),
    (ErrorKind.BUILD, re.compile(r"build failed|compilation|typescript|syntax ?error|transform failed|rollup failed")),
    (ErrorKind.VALIDATION, re.compile(r"validation|invalid")),
]


def error_code(kind: ErrorKind) -> str:
    return f"{kind.upper()}_ERROR"


def _describe(error: BaseException | str) -> tuple[str, ErrorKind, str | None]:
    if isinstance(error, DeploymentError):
        return error.message, ErrorKind(error.kind), error.raw_output
    if isinstance(error, TimeoutError):
        return str(error) or "Operation timed out", ErrorKind.TIMEOUT, None
    return str(error), ErrorKind.UNKNOWN, None


def match_kind(text: str) -> ErrorKind:
    """Return the first kind whose pattern matches ``text``."""
    lowered = text.lower()
    for kind, pattern in _PATTERNS:
        if pattern.search(lowered):
            return kind
    return ErrorKind.UNKNOWN


def classify_error(error: BaseException | str, stage: str) -> ClassifiedError:
    """Classify a failure raised during ``stage``.

    Args:
        error: The exception (or message) to classify
        stage: Pipeline stage the failure happened in

    Returns:
        ClassifiedError: Kind, retryability and the original message
    """
    message, kind, raw_output = _describe(error)
    if kind == ErrorKind.UNKNOWN:
        kind = match_kind(f"{message}\n{raw_output or ''}")

    return ClassifiedError(
        kind=kind,
        code=error_code(kind),
        message=message,
        stage=stage,
        retryable=kind.retryable,
        raw_output=raw_output,
    )


def is_retryable(error: BaseException) -> bool:
    """Return True if ``error`` is a transient failure worth retrying."""
    message, kind, raw_output = _describe(error)
    if kind == ErrorKind.UNKNOWN:
        kind = match_kind(f"{message}\n{raw_output or ''}")
    return kind.retryable
