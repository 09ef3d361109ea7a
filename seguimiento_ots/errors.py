"""Erros de domínio das OTs.

Cada erro carrega o ``status_code`` HTTP usado pelo handler registrado em
``create_app()``; as mensagens são exibidas ao usuário final.
"""


class WorkOrderError(Exception):
    status_code = 500


class Unauthorized(WorkOrderError):
    status_code = 401

    def __init__(self, message: str = "No se encontró un usuario autenticado"):
        super().__init__(message)


class NotFound(WorkOrderError):
    status_code = 404


class Conflict(WorkOrderError):
    status_code = 409


class StorageError(WorkOrderError):
    status_code = 500


class ValidationError(WorkOrderError):
    status_code = 400


class ArchivedOrderError(ValidationError):
    """OT já despachada: não aceita novas datas de etapa."""

    status_code = 409


__all__ = [
    "WorkOrderError",
    "Unauthorized",
    "NotFound",
    "Conflict",
    "StorageError",
    "ValidationError",
    "ArchivedOrderError",
]
