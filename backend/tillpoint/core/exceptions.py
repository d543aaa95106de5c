"""
Error types for the service layer and their HTTP translation.

Services raise the domain exceptions below and never import FastAPI.
Routers turn them into HTTPExceptions through BusinessError so that
every endpoint reports the same status codes for the same failures.
Internal details are logged, never returned to the caller.
"""
from fastapi import HTTPException, status
import logging

logger = logging.getLogger(__name__)


class DomainError(Exception):
    """Base class for expected business-rule failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequestError(DomainError, ValueError):
    """Caller supplied bad input. Nothing was written."""


class NotFoundError(DomainError):
    """A referenced sale, product, expense or user does not exist."""

    def __init__(self, resource: str, identifier=None):
        message = f"{resource} not found"
        super().__init__(message)
        self.resource = resource
        self.identifier = identifier


class ConflictError(DomainError):
    """The write clashes with current state (closed sale, stock, lost update)."""


class BusinessError:
    """Factories for HTTP errors with safe messages."""

    @staticmethod
    def not_found(resource: str = "Resource", reason: str = "") -> HTTPException:
        if reason:
            logger.info(f"Not found: {resource} - {reason}")
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found",
        )

    @staticmethod
    def unauthorized(reason: str = "") -> HTTPException:
        """
        Generic 401 for all authentication failures.

        Same response for wrong password, unknown user and bad token so
        that accounts cannot be enumerated.
        """
        logger.warning(f"Unauthorized access attempt: {reason}")
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication failed",
            headers={"WWW-Authenticate": "Bearer"},
        )

    @staticmethod
    def forbidden(reason: str = "") -> HTTPException:
        logger.warning(f"Forbidden access: {reason}")
        return HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden",
        )

    @staticmethod
    def bad_request(detail: str) -> HTTPException:
        """
        400 for input validation / business logic errors.

        OK to include specific details here since the caller caused the issue.
        Examples: "No items provided", "Invalid payment amount"
        """
        logger.info(f"Bad request: {detail}")
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )

    @staticmethod
    def conflict(detail: str) -> HTTPException:
        logger.info(f"Conflict: {detail}")
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
        )

    @staticmethod
    def server_error(original_error: Exception = None) -> HTTPException:
        """Generic 500 - logs the actual error internally, hides it from the caller."""
        if original_error:
            logger.error(
                f"Internal server error: {type(original_error).__name__}: {str(original_error)}",
                exc_info=original_error,
            )
        else:
            logger.error("Internal server error occurred", exc_info=True)

        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )

    @staticmethod
    def from_domain(error: DomainError) -> HTTPException:
        """Map a service-layer exception onto its HTTP status."""
        if isinstance(error, NotFoundError):
            return BusinessError.not_found(error.resource, reason=str(error.identifier or ""))
        if isinstance(error, ConflictError):
            return BusinessError.conflict(error.message)
        return BusinessError.bad_request(error.message)
