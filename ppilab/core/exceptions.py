"""Exception taxonomy and FastAPI exception handlers.

Domain errors raised by the model banks, the forecast engine and the metric
evaluator share one base class so that the HTTP layer can render any of them
as RFC 7807 Problem Details.
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

from ppilab.core.logging import get_logger
from ppilab.core.problem_details import ProblemDetailResponse, problem_response

logger = get_logger(__name__)


# =============================================================================
# Exception Classes
# =============================================================================


class PPILabError(Exception):
    """Base exception for PPILab application errors.

    All application-specific exceptions inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize application error.

        Args:
            message: Human-readable error message.
            code: Machine-readable error code.
            status_code: HTTP status code.
            details: Additional error context.
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    @property
    def title(self) -> str:
        """RFC 7807 title - short summary of problem type."""
        return self.code.replace("_", " ").title()


class NotFoundError(PPILabError):
    """Requested resource (e.g. a previous scenario result) does not exist."""

    def __init__(
        self,
        message: str = "Resource not found",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, code="NOT_FOUND", status_code=404, details=details)


class ValidationError(PPILabError):
    """Input data failed validation (malformed dataset, unknown predictor, ...)."""

    def __init__(
        self,
        message: str = "Validation failed",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message, code="VALIDATION_ERROR", status_code=422, details=details
        )


class BadRequestError(PPILabError):
    """Request is malformed or inconsistent with the loaded models."""

    def __init__(
        self,
        message: str = "Bad request",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, code="BAD_REQUEST", status_code=400, details=details)


class ServiceUnavailableError(PPILabError):
    """Fitted models are not loaded, so no request can be served yet."""

    def __init__(
        self,
        message: str = "Fitted models are not loaded",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message, code="SERVICE_UNAVAILABLE", status_code=503, details=details
        )


# -----------------------------------------------------------------------------
# Modeling taxonomy
# -----------------------------------------------------------------------------


class ModelFitFailure(PPILabError):
    """A single model family could not be fitted.

    Raised when the optimizer does not converge or the family rejects its
    input. Banks catch this per family, drop the family and carry on.
    """

    def __init__(self, family: str, reason: str) -> None:
        super().__init__(
            message=f"Model family '{family}' failed to fit: {reason}",
            code="MODEL_FIT_FAILURE",
            status_code=500,
            details={"family": family, "reason": reason},
        )
        self.family = family
        self.reason = reason


class EmptyModelBank(PPILabError):
    """No candidate in a bank fitted successfully, so nothing can be selected."""

    def __init__(self, bank: str, failures: dict[str, str] | None = None) -> None:
        super().__init__(
            message=f"No successfully fitted models in bank '{bank}'",
            code="EMPTY_MODEL_BANK",
            status_code=500,
            details={"bank": bank, "failures": failures or {}},
        )
        self.bank = bank


class InvalidHorizon(PPILabError):
    """Requested forecast target is not strictly in the future (or too far)."""

    def __init__(self, message: str = "Target must be in the future", horizon: int | None = None) -> None:
        super().__init__(
            message=message,
            code="INVALID_HORIZON",
            status_code=422,
            details={"horizon": horizon},
        )
        self.horizon = horizon


class DegenerateMetric(PPILabError):
    """Metric is undefined for the given data (e.g. R² on a constant series)."""

    def __init__(self, metric: str, reason: str) -> None:
        super().__init__(
            message=f"Metric '{metric}' is undefined: {reason}",
            code="DEGENERATE_METRIC",
            status_code=422,
            details={"metric": metric},
        )
        self.metric = metric


class DivisionByZero(DegenerateMetric):
    """Percentage metric is undefined because an actual value is exactly zero."""

    def __init__(self, metric: str, n_zeros: int) -> None:
        super().__init__(metric, f"{n_zeros} actual value(s) are zero")
        self.code = "DIVISION_BY_ZERO"
        self.details["n_zeros"] = n_zeros


# =============================================================================
# Exception Handlers (RFC 7807)
# =============================================================================


async def ppilab_exception_handler(
    _request: Request,
    exc: PPILabError,
) -> ProblemDetailResponse:
    """Handle PPILabError exceptions with RFC 7807 Problem Details.

    Args:
        _request: FastAPI request object.
        exc: The raised exception.

    Returns:
        RFC 7807 Problem Detail response.
    """
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "app.error_handled",
        error=exc.message,
        error_type=type(exc).__name__,
        error_code=exc.code,
        status_code=exc.status_code,
        details=exc.details,
    )

    return problem_response(
        status=exc.status_code,
        title=exc.title,
        detail=exc.message,
        error_code=exc.code,
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> ProblemDetailResponse:
    """Convert request body validation errors to a 422 problem with field errors.

    Args:
        request: FastAPI request object.
        exc: Pydantic validation error.

    Returns:
        RFC 7807 Problem Detail response with field-level errors.
    """
    field_errors: list[dict[str, str]] = []
    for error in exc.errors():
        loc = error.get("loc", [])
        field_path = ".".join(str(part) for part in loc if part != "body")
        field_errors.append(
            {
                "field": field_path,
                "message": str(error.get("msg", "Validation failed")),
                "type": str(error.get("type", "unknown")),
            }
        )

    logger.warning(
        "app.validation_error",
        error_count=len(field_errors),
        path=str(request.url.path),
        fields=[e["field"] for e in field_errors],
    )

    return problem_response(
        status=422,
        title="Validation Error",
        detail=f"Request validation failed with {len(field_errors)} error(s).",
        error_code="VALIDATION_ERROR",
        errors=field_errors,
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> ProblemDetailResponse:
    """Handle unexpected exceptions with a generic 500 problem.

    Args:
        request: FastAPI request object.
        exc: The raised exception.

    Returns:
        RFC 7807 Problem Detail response.
    """
    logger.error(
        "app.unhandled_error",
        error=str(exc),
        error_type=type(exc).__name__,
        path=str(request.url.path),
        exc_info=True,
    )

    return problem_response(
        status=500,
        title="Internal Server Error",
        detail="An unexpected error occurred. Contact support with the request_id.",
        error_code="INTERNAL_ERROR",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers with FastAPI app.

    Args:
        app: FastAPI application instance.
    """
    app.add_exception_handler(PPILabError, ppilab_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)
