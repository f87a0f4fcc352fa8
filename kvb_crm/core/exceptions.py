"""
Custom exceptions for the KVB API.
Provides consistent error handling across the application.
"""
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse


class KVBException(Exception):
    """Base exception for KVB"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


class NotFoundError(KVBException):
    """Resource not found"""
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str = "Resource", resource_id: str = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with id '{resource_id}' not found"
        super().__init__(message)


class AlreadyExistsError(KVBException):
    """Resource already exists"""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, resource: str = "Resource", field: str = None, value: str = None):
        if field and value:
            message = f"{resource} with {field} '{value}' already exists"
        else:
            message = f"{resource} already exists"
        super().__init__(message)


class UnauthorizedError(KVBException):
    """Authentication failed"""
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Unauthorized - Invalid Token"):
        super().__init__(message)


class ForbiddenError(KVBException):
    """Access denied"""
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


class ValidationError(KVBException):
    """Validation failed"""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "Validation failed", field: str = None):
        if field:
            message = f"Validation failed for field '{field}': {message}"
        super().__init__(message)


class ExternalServiceError(KVBException):
    """External service call failed"""
    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, service: str = "External service", message: str = None):
        msg = f"{service} call failed"
        if message:
            msg = f"{msg}: {message}"
        super().__init__(msg)


async def kvb_exception_handler(request: Request, exc: KVBException) -> JSONResponse:
    """Render domain exceptions that escaped a route as JSON."""
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# HTTP Exception helpers
def raise_not_found(resource: str = "Resource", resource_id: str = None, message: str = None):
    """Raise 404 HTTPException"""
    err = NotFoundError(resource, resource_id)
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=message or err.message)


def raise_already_exists(resource: str = "Resource", field: str = None, value: str = None):
    """Raise 400 HTTPException for duplicate"""
    err = AlreadyExistsError(resource, field, value)
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=err.message)


def raise_unauthorized(message: str = "Unauthorized - Invalid Token"):
    """Raise 401 HTTPException"""
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=message)


def raise_forbidden(message: str = "Access denied"):
    """Raise 403 HTTPException"""
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=message)


def raise_bad_request(message: str = "Validation failed", field: str = None):
    """Raise 400 HTTPException"""
    err = ValidationError(message, field)
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=err.message)
