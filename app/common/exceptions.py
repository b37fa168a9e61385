"""
Jerarquía de excepciones tipadas de la API

Todas heredan de HTTPException para que los servicios puedan seguir el patrón
`except HTTPException: raise` y los handlers globales de app.main conviertan
cualquier error en un cuerpo JSON `{"error": "..."}`.

    AppError (base)
    |
    +-- ValidationError   -> 400 (entrada inválida, reglas XOR, tipos de ledger)
    +-- NotFoundError     -> 404 (entidad inexistente en el tenant)
    +-- ConflictError     -> 409 (duplicados, actualizaciones concurrentes)
"""

from fastapi import HTTPException, status


class AppError(HTTPException):
    """Error base de la aplicación"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(status_code=self.status_code, detail=message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ValidationError(AppError):
    """Datos faltantes o inválidos, o violación de una regla de integridad"""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(AppError):
    """La entidad solicitada no existe"""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    """Duplicados o modificación concurrente detectada"""

    status_code = status.HTTP_409_CONFLICT
