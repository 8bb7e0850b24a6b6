from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from authsvc.core import errors as api_errors
from authsvc.services._shared.errors import (
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    InvalidTokenError,
    OperationFailedError,
    RegistrationFailedError,
    ServiceError,
    UserInactiveError,
)
from authsvc.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)

Clock = Callable[[], datetime]


def now_utc() -> datetime:
    """Return the current UTC time (timezone-aware)."""
    return datetime.now(UTC)


@dataclass(slots=True)
class ServiceContext:
    """
    Carry cross-cutting request-scoped data passed explicitly to services.

    :param request_id: Correlation id for logging/tracing.
    :param actor_id: Authenticated user identifier, when known.
    """

    request_id: str | None = None
    actor_id: int | None = None


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Centralize error translation.
    * Keep services thin, orchestration-only, no web/ORM leakage.

    Notes
    -----
    - Services must never touch the global session; always use a Unit of Work.
    - Request data (correlation ids, actor) arrives through ``ctx``; services
      never read Flask globals.
    """

    def __init__(self, *, ctx: ServiceContext | None = None, clock: Clock | None = None) -> None:
        """
        Initialize the base service.

        :param ctx: Optional request-scoped context (tracing, actor).
        :type ctx: ServiceContext | None
        :param clock: Callable returning the current UTC time.
        :type clock: Callable[[], datetime] | None
        """
        self.ctx = ctx or ServiceContext()
        self._clock = clock or now_utc

    def now(self) -> datetime:
        return self._clock()

    def log_extra(self, **fields: object) -> dict[str, object]:
        """Build a logging ``extra`` dict carrying the request id."""
        return {"request_id": self.ctx.request_id, **fields}

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: Read-write UoW instance.
        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork()

    def ro_uow(self, *, enforce_db_readonly: bool = True) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :param enforce_db_readonly: Apply ``SET TRANSACTION READ ONLY`` when supported.
        :type enforce_db_readonly: bool
        :returns: Read-only UoW instance.
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork(enforce_db_readonly=enforce_db_readonly)

    # -------------------------- Error handling ------------------------------

    @staticmethod
    def translate_exceptions(exc: Exception) -> Exception:
        """
        Map domain/service-level errors to API-level (HTTP) errors.

        :param exc: Exception raised within the service.
        :type exc: Exception
        :returns: Translated exception ready to be re-raised.
        :rtype: Exception
        """
        if isinstance(exc, DuplicateEmailError):
            # → 409 Conflict
            return api_errors.Conflict(exc.message, code=exc.code)

        if isinstance(
            exc,
            InvalidCredentialsError | InvalidRefreshTokenError | UserInactiveError | InvalidTokenError,
        ):
            # → 401 Unauthorized
            return api_errors.Unauthorized(exc.message, code=exc.code)

        if isinstance(exc, RegistrationFailedError | OperationFailedError):
            # → 500, message stays generic
            return api_errors.InternalError(exc.message, code=exc.code)

        # Any other ServiceError subclass → 400 Bad Request
        if isinstance(exc, ServiceError):
            return api_errors.APIError(message=exc.message, status_code=400, code=exc.code)

        # Fallback: return untouched (will bubble up to Flask handler)
        return exc
