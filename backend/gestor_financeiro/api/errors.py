"""
Translation of service errors into HTTP responses.
"""

from fastapi import HTTPException

from gestor_financeiro.exceptions import ConflictError, GestorError, NotFoundError


def to_http_exception(error: GestorError) -> HTTPException:
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=404, detail=f"{error.entity} not found")
    if isinstance(error, ConflictError):
        return HTTPException(status_code=409, detail=str(error))
    return HTTPException(status_code=503, detail=str(error))
