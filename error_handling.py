"""
Error Handling Module for the Copilot usage pipeline.
Provides the phase-tagged exception hierarchy, a retry decorator for
GitHub API requests and a decorator for structured pipeline phase errors.
"""

import time
import logging
import functools
from typing import TypeVar, Callable, Any

import requests

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class PipelinePhaseError(Exception):
    """Base exception for pipeline phase errors."""

    def __init__(self, message: str, phase: str = "", details: dict | None = None):
        self.phase = phase
        self.details = details or {}
        super().__init__(message)


class ConfigError(PipelinePhaseError):
    """Raised when the action inputs are missing or contradictory."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, phase="CONFIG", details=details)


class FetchError(PipelinePhaseError):
    """Raised when the Copilot usage data cannot be fetched."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, phase="FETCH", details=details)


class MetricsCalculationError(PipelinePhaseError):
    """Raised when metrics calculation fails."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, phase="CALCULATE", details=details)


class WriteError(PipelinePhaseError):
    """Raised when a report, CSV file, output or artifact cannot be written."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, phase="WRITE", details=details)


class DataValidationError(PipelinePhaseError):
    """Raised when usage data or an exported file fails validation."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, phase="VALIDATION", details=details)


class APIError(Exception):
    """An HTTP call to GitHub or the Actions results service failed."""

    def __init__(self, message: str, status_code: int | None = None, endpoint: str = ""):
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class AuthenticationError(APIError):
    """Token rejected or lacking the Copilot billing scope (401/403)."""


class RateLimitError(APIError):
    """Primary or secondary GitHub rate limit hit (429, or 403 with no quota left)."""


class ServerError(APIError):
    """GitHub answered 5xx."""


MAX_RATE_LIMIT_WAIT = 60.0


def _is_rate_limited(response: requests.Response) -> bool:
    if response.status_code == 429:
        return True
    return response.status_code == 403 and (
        response.headers.get("X-RateLimit-Remaining") == "0"
        or "rate limit" in (response.text or "").lower()
    )


def _classify(response: requests.Response | None) -> APIError:
    if response is None:
        return APIError("HTTP error without a response")
    status, endpoint = response.status_code, response.url
    message = f"HTTP {status} from {endpoint}"
    if _is_rate_limited(response):
        return RateLimitError(message, status, endpoint)
    if status in (401, 403):
        return AuthenticationError(message, status, endpoint)
    if status >= 500:
        return ServerError(message, status, endpoint)
    return APIError(message, status, endpoint)


def rate_limit_wait(response: requests.Response, default: float) -> float:
    """Seconds GitHub asks us to wait before the next request.

    ``Retry-After`` wins; otherwise the ``X-RateLimit-Reset`` epoch is used.
    The result is capped at ``MAX_RATE_LIMIT_WAIT``.
    """
    retry_after = response.headers.get("Retry-After", "")
    reset = response.headers.get("X-RateLimit-Reset", "")
    if retry_after.isdigit():
        wait = float(retry_after)
    elif reset.isdigit():
        wait = max(int(reset) - time.time(), 1.0)
    else:
        wait = default
    return min(wait, MAX_RATE_LIMIT_WAIT)


def handle_api_errors(max_attempts: int = 3, base_delay: float = 1.0, max_delay: float = 30.0) -> Callable[[F], F]:
    """
    Retry a single HTTP call that ends in ``raise_for_status()``.

    Rate limits wait as long as GitHub asks; 5xx, timeouts and dropped
    connections back off exponentially from ``base_delay``. Anything else
    (bad token, missing org, 404) raises at once as an ``APIError`` subclass.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            for attempt in range(1, max_attempts + 1):
                backoff = min(base_delay * 2 ** (attempt - 1), max_delay)
                try:
                    return func(*args, **kwargs)
                except requests.exceptions.HTTPError as exc:
                    error = _classify(exc.response)
                    if not isinstance(error, (RateLimitError, ServerError)) or attempt == max_attempts:
                        raise error from exc
                    if isinstance(error, RateLimitError):
                        wait = rate_limit_wait(exc.response, backoff)
                    else:
                        wait = backoff
                    reason = str(error)
                except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as exc:
                    if attempt == max_attempts:
                        raise APIError(f"{func.__name__} gave up after {max_attempts} attempts: {exc}") from exc
                    wait = backoff
                    reason = type(exc).__name__
                logger.warning(
                    "%s: %s (attempt %d/%d), retrying in %.1fs",
                    func.__name__, reason, attempt, max_attempts, wait,
                )
                time.sleep(wait)
            raise AssertionError("unreachable")

        return wrapper  # type: ignore[return-value]

    return decorator


def handle_pipeline_phase(phase_name: str, error_cls: type[PipelinePhaseError] = PipelinePhaseError) -> Callable[[F], F]:
    """Re-raise whatever escapes a pipeline step as ``error_cls``.

    Errors that already carry a phase pass through untouched, so the first
    step to fail names the phase reported by ``generate_report.main``.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except PipelinePhaseError:
                raise
            except Exception as exc:
                logger.debug("[%s] %s raised %r", phase_name, func.__name__, exc)
                raise error_cls(
                    f"{phase_name} failed: {exc}",
                    details={"step": func.__name__, "cause": type(exc).__name__},
                ) from exc

        return wrapper  # type: ignore[return-value]

    return decorator
