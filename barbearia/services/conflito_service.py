"""Detecção de conflito de horário entre agendamentos do mesmo barbeiro.

A regra é uma janela de proximidade: dois agendamentos conflitam quando a
diferença absoluta entre seus inícios é MENOR que a janela (30 min por
padrão). A duração dos serviços não é considerada.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timedelta

from barbearia import db
from barbearia.models import Agendamento, StatusAgendamentoEnum

from .validacao_service import get_setting

logger = logging.getLogger(__name__)

MSG_CONFLITO = "Horário indisponível para este barbeiro."


def _janela(janela_minutos: int | None) -> timedelta:
    if janela_minutos is None:
        janela_minutos = int(get_setting("JANELA_CONFLITO_MINUTOS"))
    return timedelta(minutes=janela_minutos)


def conflitam(
    inicio_a: datetime, inicio_b: datetime, janela_minutos: int | None = None
) -> bool:
    """True se os dois inícios estão a menos de `janela` um do outro."""
    return abs(inicio_a - inicio_b) < _janela(janela_minutos)


def find_conflitos(
    data_hora: datetime,
    existentes: Iterable[Agendamento],
    ignorar_id: int | None = None,
    janela_minutos: int | None = None,
) -> list[Agendamento]:
    """Retorna os agendamentos de ``existentes`` que colidem com ``data_hora``.

    - Agendamentos CANCELADO são ignorados.
    - ``ignorar_id`` exclui o próprio agendamento em edição.
    - ``existentes`` deve conter apenas agendamentos do mesmo barbeiro.
    """
    janela = _janela(janela_minutos)
    conflitos: list[Agendamento] = []
    for ag in existentes:
        if ag.status == StatusAgendamentoEnum.CANCELADO:
            continue
        if ignorar_id is not None and ag.id == ignorar_id:
            continue
        if abs(ag.data_hora - data_hora) < janela:
            conflitos.append(ag)
    return conflitos


def has_conflito(
    data_hora: datetime,
    existentes: Iterable[Agendamento],
    ignorar_id: int | None = None,
    janela_minutos: int | None = None,
) -> bool:
    return bool(
        find_conflitos(
            data_hora,
            existentes,
            ignorar_id=ignorar_id,
            janela_minutos=janela_minutos,
        )
    )


def get_agendamentos_ativos_barbeiro(
    barbeiro_id: int,
    proximo_de: datetime | None = None,
    janela_minutos: int | None = None,
) -> list[Agendamento]:
    """Carrega do banco os agendamentos não cancelados do barbeiro.

    Se ``proximo_de`` for informado, restringe a busca à vizinhança da
    janela (filtro apenas de desempenho; a decisão continua em
    ``find_conflitos``).
    """
    q = db.session.query(Agendamento).filter(
        Agendamento.barbeiro_id == int(barbeiro_id),
        Agendamento.status != StatusAgendamentoEnum.CANCELADO,
    )
    if proximo_de is not None:
        janela = _janela(janela_minutos)
        q = q.filter(
            Agendamento.data_hora > proximo_de - janela,
            Agendamento.data_hora < proximo_de + janela,
        )
    return q.order_by(Agendamento.data_hora.asc()).all()
