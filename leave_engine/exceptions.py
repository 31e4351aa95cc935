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


class EmployeeNotFound(AppError):
    """No employee exists with the given id."""

    def __init__(self, employee_id: object) -> None:
        self.employee_id = employee_id
        super().__init__(f"Employee {employee_id} not found", status_code=status.HTTP_404_NOT_FOUND)


class LeaveTypeNotFound(AppError):
    """No leave type exists with the given id."""

    def __init__(self, leave_type_id: object) -> None:
        self.leave_type_id = leave_type_id
        super().__init__(f"Leave type {leave_type_id} not found", status_code=status.HTTP_404_NOT_FOUND)


class MissingHiringDate(AppError):
    """The employee exists but has no hiring date to anchor the leave year.

    This is a data-integrity fault that an administrator must correct; it is
    never reported as a zero balance.
    """

    def __init__(self, employee_id: object) -> None:
        self.employee_id = employee_id
        super().__init__(
            f"Employee {employee_id} has no hiring date; an administrator must set it "
            "before leave balances can be calculated",
            status_code=status.HTTP_409_CONFLICT,
        )


class NoCompletedLeaveYear(AppError):
    """Carryover was requested before the employee's first anniversary."""

    def __init__(self, employee_id: object, first_anniversary: object) -> None:
        self.employee_id = employee_id
        self.first_anniversary = first_anniversary
        super().__init__(
            f"Employee {employee_id} has no completed leave year to carry over before {first_anniversary}",
            status_code=status.HTTP_409_CONFLICT,
        )


class StoreUnavailable(AppError):
    """A store read or write failed or timed out. Safe to retry."""

    def __init__(self, message: str = "Leave store is unavailable, please retry") -> None:
        super().__init__(message, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)


class InvalidRange(AppError):
    """The end date of a leave request precedes its start date."""

    def __init__(self, start_date: object, end_date: object) -> None:
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(
            f"end_date {end_date} is before start_date {start_date}",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        )


class InsufficientBalance(AppError):
    """The requested days exceed the days available for a new request."""

    def __init__(self, requested: int, available: int) -> None:
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient leave balance. You requested {requested} days "
            f"but only have {available} days available.",
            status_code=status.HTTP_400_BAD_REQUEST,
        )


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
