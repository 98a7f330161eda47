"""Validação estrutural de agendamentos propostos.

Funções puras: não acessam o banco. Todas as regras são avaliadas e todos
os motivos de rejeição são devolvidos juntos, sempre na mesma ordem.
"""
from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from flask import current_app, has_app_context

from barbearia.models import FormaPagamentoEnum
from barbearia.utils.formatters import format_currency

from .agenda_service import parse_data_hora

# Valores padrão quando não há app context (uso fora do Flask, testes puros)
_DEFAULTS: dict[str, Any] = {
    "HORARIO_ABERTURA": 8,
    "HORARIO_FECHAMENTO": 18,
    "JANELA_CONFLITO_MINUTOS": 30,
    "MAX_SERVICOS_AGENDAMENTO": 5,
    "VALOR_MAXIMO_AGENDAMENTO": "10000.00",
    "VALOR_MAXIMO_MOVIMENTACAO": "100000.00",
    "COMISSAO_PADRAO": "50",
}

VALOR_MINIMO = Decimal("0.01")

MSG_SERVICOS = "Deve ter entre 1 e {max} serviços."
MSG_DATA_FUTURA = "Data/hora deve ser futura."
MSG_DATA_INVALIDA = "Data/hora deve ser válida."
MSG_EXPEDIENTE = "Horário deve estar entre {ini:02d}:00 e {fim:02d}:00."
MSG_VALOR = "Valor total deve estar entre R$ 0,01 e {max}."
MSG_FORMA_PAGAMENTO = "Forma de pagamento inválida."


def get_setting(key: str) -> Any:
    """Lê uma configuração de regra de negócio (app.config ou padrão)."""
    if has_app_context():
        value = current_app.config.get(key)
        if value is not None:
            return value
    return _DEFAULTS[key]


def to_decimal(value: object) -> Decimal:
    """Converte para Decimal sem passar por float.

    Accepts Decimal, int, float, or str. Leaves Decimal untouched.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError("Valor numérico inválido")
    try:
        return Decimal(str(value).strip().replace(",", "."))
    except (InvalidOperation, ValueError):
        raise ValueError("Valor numérico inválido")


def validar_servico_ids(servico_ids: object) -> list[str]:
    max_servicos = int(get_setting("MAX_SERVICOS_AGENDAMENTO"))
    if not isinstance(servico_ids, (list, tuple)) or not (
        1 <= len(servico_ids) <= max_servicos
    ):
        return [MSG_SERVICOS.format(max=max_servicos)]
    return []


def validar_data_hora(
    data_hora: object, agora: datetime | None = None
) -> list[str]:
    """Data futura e início dentro do expediente [abertura, fechamento).

    Valores com fuso são convertidos para o horário local antes da
    comparação (agendamentos são gravados como horário local naive).
    """
    if not isinstance(data_hora, datetime):
        return [MSG_DATA_INVALIDA]

    motivos: list[str] = []
    data_hora = parse_data_hora(data_hora)
    agora = parse_data_hora(agora or datetime.now())
    if data_hora <= agora:
        motivos.append(MSG_DATA_FUTURA)

    abertura = int(get_setting("HORARIO_ABERTURA"))
    fechamento = int(get_setting("HORARIO_FECHAMENTO"))
    if not (abertura <= data_hora.hour < fechamento):
        motivos.append(MSG_EXPEDIENTE.format(ini=abertura, fim=fechamento))
    return motivos


def validar_valor_total(valor_total: object) -> list[str]:
    """Valor em (0, máximo]. Ausente (None) é aceito."""
    if valor_total is None:
        return []
    maximo = to_decimal(get_setting("VALOR_MAXIMO_AGENDAMENTO"))
    msg = MSG_VALOR.format(max=format_currency(maximo))
    try:
        valor = to_decimal(valor_total)
    except ValueError:
        return [msg]
    if not valor.is_finite() or not (VALOR_MINIMO <= valor <= maximo):
        return [msg]
    return []


def _validar_enum(value: object, enum_cls, msg: str) -> list[str]:
    if value is None or value == "":
        return []
    if isinstance(value, enum_cls):
        return []
    try:
        enum_cls(str(value).upper())
    except ValueError:
        return [msg]
    return []


def validar_agendamento(
    candidato: Mapping[str, Any], agora: datetime | None = None
) -> list[str]:
    """Valida um agendamento proposto e retorna TODOS os motivos de rejeição.

    Lista vazia significa válido. Chaves lidas de ``candidato``:
      - servico_ids (lista, 1..MAX_SERVICOS_AGENDAMENTO)
      - data_hora (datetime naive, horário local)
      - valor_total (opcional)
      - forma_pagamento (opcional)
    """
    motivos: list[str] = []
    motivos += validar_servico_ids(candidato.get("servico_ids"))
    motivos += validar_data_hora(candidato.get("data_hora"), agora=agora)
    motivos += validar_valor_total(candidato.get("valor_total"))
    motivos += _validar_enum(
        candidato.get("forma_pagamento"),
        FormaPagamentoEnum,
        MSG_FORMA_PAGAMENTO,
    )
    return motivos
