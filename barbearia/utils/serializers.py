"""Conversão de modelos para dicionários serializáveis em JSON."""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum as PyEnum
from typing import Any

from sqlalchemy.inspection import inspect as sa_inspect


def jsonify_value(value: Any) -> Any:
    """Convert values to JSON-serializable representations.

    Decimal vira string com 2 casas (sem perda por float).
    """
    if isinstance(value, PyEnum):
        return value.value
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, Decimal):
        return f"{value:.2f}"
    if isinstance(value, datetime):
        return value.replace(microsecond=0).isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): jsonify_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [jsonify_value(v) for v in value]
    return str(value)


def row_to_dict(obj: Any, exclude: tuple[str, ...] = ()) -> dict[str, Any]:
    """Dict com todas as colunas mapeadas do modelo."""
    mapper = sa_inspect(obj).mapper
    return {
        col.key: jsonify_value(getattr(obj, col.key))
        for col in mapper.columns
        if col.key not in exclude
    }


def agendamento_to_dict(ag: Any, duracao_total: int | None = None) -> dict:
    data = row_to_dict(ag)
    data["servico_ids"] = list(ag.servico_ids or [])
    data["cliente_nome"] = ag.cliente.nome if ag.cliente else None
    data["barbeiro_nome"] = ag.barbeiro.nome if ag.barbeiro else None
    if duracao_total is not None:
        data["duracao_total"] = duracao_total
    return data


def usuario_to_dict(user: Any) -> dict:
    return row_to_dict(user, exclude=("password_hash",))
