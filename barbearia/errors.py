"""Erros de domínio da agenda e do financeiro.

Todos herdam de ``ValueError`` (convenção dos services: regras de negócio
violadas levantam ValueError) e carregam a lista completa de motivos para
que o chamador possa exibi-los de uma vez.
"""
from __future__ import annotations

from collections.abc import Iterable


class AgendaError(ValueError):
    http_status = 400
    default_message = "Operação rejeitada."

    def __init__(
        self, reasons: Iterable[str] | str | None = None
    ) -> None:
        if reasons is None:
            reasons = [self.default_message]
        elif isinstance(reasons, str):
            reasons = [reasons]
        self.reasons: list[str] = list(reasons)
        super().__init__("; ".join(self.reasons))

    @property
    def message(self) -> str:
        return self.reasons[0] if len(self.reasons) == 1 else (
            self.default_message
        )

    def to_dict(self) -> dict:
        return {
            "success": False,
            "error": type(self).__name__,
            "message": self.message,
            "errors": list(self.reasons),
        }


class ValidationFailed(AgendaError):
    default_message = "Dados inválidos."


class ConflictDetected(AgendaError):
    http_status = 409
    default_message = "Horário indisponível para este barbeiro."


class IllegalTransition(AgendaError):
    http_status = 409
    default_message = "Transição de status não permitida."


class ReferenceNotFound(AgendaError, LookupError):
    http_status = 404
    default_message = "Registro não encontrado."


class OutOfRange(AgendaError):
    default_message = "Valor fora do intervalo permitido."
