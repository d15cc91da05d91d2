"""
HTTP controllers for books, authors and users.
"""

from fastapi import HTTPException, status

from utilities.logger import ControllerLogger


def internal_error(log: ControllerLogger, message: str, exc: Exception = None) -> HTTPException:
    """
    Log a 500-path message and build the matching HTTPException.

    The response names the controller action but never carries exception text.
    """
    detail = f"{log.location}: {message}"
    log.failure(detail, exc=exc)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
