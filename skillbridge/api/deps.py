# skillbridge/api/deps.py
"""
Shared router helpers: translate domain failures into HTTP errors.
"""

from fastapi import HTTPException, status

from skillbridge.services.errors import DomainError, ErrorKind, Result

ERROR_STATUS_CODES = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.UNAUTHORIZED: status.HTTP_403_FORBIDDEN,
    ErrorKind.INVALID_STATE: status.HTTP_409_CONFLICT,
    ErrorKind.VALIDATION_FAILED: status.HTTP_400_BAD_REQUEST,
    ErrorKind.CAPACITY_EXCEEDED: status.HTTP_409_CONFLICT,
    ErrorKind.DUPLICATE_ACTIVE: status.HTTP_409_CONFLICT,
}


def http_error(kind: ErrorKind, message: str) -> HTTPException:
    return HTTPException(
        status_code=ERROR_STATUS_CODES[ErrorKind(kind)],
        detail={"error": ErrorKind(kind).value, "message": message},
    )


def domain_http_error(exc: DomainError) -> HTTPException:
    return http_error(exc.kind, exc.message)


def unwrap(result: Result):
    """Value of an ``Ok``; an ``Err`` becomes the matching HTTPException."""
    if result.ok:
        return result.value
    raise http_error(result.kind, result.message)
