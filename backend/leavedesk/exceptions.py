from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str
    detail: str | None = None
    status_code: int


class AppError(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class InvalidDateRange(AppError):
    """An end date precedes its start date."""

    def __init__(self, message: str = "end_date must not precede start_date") -> None:
        super().__init__(message, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)


class EmployeeNotResolvable(AppError):
    """The employee directory has no record for the referenced employee."""

    def __init__(self, message: str = "Employee could not be resolved") -> None:
        super().__init__(message, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)


class StaleWorkflowState(AppError):
    """The caller's expected stage is not the group's current stage."""

    def __init__(self, message: str = "Request is not at the expected workflow step") -> None:
        super().__init__(message, status_code=status.HTTP_409_CONFLICT)


class UnauthorizedStageAction(AppError):
    """The caller cannot review the stage it is trying to advance."""

    def __init__(self, message: str = "Not authorized to review this workflow step") -> None:
        super().__init__(message, status_code=status.HTTP_403_FORBIDDEN)


class WorkflowAlreadyStarted(AppError):
    """Withdrawal attempted after a reviewer has acted."""

    def __init__(self, message: str = "Request can no longer be withdrawn") -> None:
        super().__init__(message, status_code=status.HTTP_409_CONFLICT)


class MissingApprovalSignature(AppError):
    """Director approval submitted without a signature."""

    def __init__(self, message: str = "A signature is required for the final approval") -> None:
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST)


class InconsistentRequestGroup(AppError):
    """Periods of one request group disagree on their workflow state."""

    def __init__(self, message: str = "Request group periods are out of sync") -> None:
        super().__init__(message, status_code=status.HTTP_409_CONFLICT)


async def _app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=type(exc).__name__,
            detail=exc.message,
            status_code=exc.status_code,
        ).model_dump(),
    )


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse(
            error="ValidationError",
            detail=str(exc.errors()),
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        ).model_dump(),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers on the application."""
    app.add_exception_handler(AppError, _app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)  # type: ignore[arg-type]
