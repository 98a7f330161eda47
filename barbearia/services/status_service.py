"""Máquina de estados do Agendamento.

AGENDADO e CONFIRMADO são estados de espera com os mesmos direitos;
CONCLUIDO, CANCELADO e NAO_COMPARECEU são terminais.
"""
from __future__ import annotations

from barbearia.errors import IllegalTransition
from barbearia.models import StatusAgendamentoEnum as S

TERMINAIS: frozenset[S] = frozenset(
    {S.CONCLUIDO, S.CANCELADO, S.NAO_COMPARECEU}
)

TRANSICOES: dict[S, frozenset[S]] = {
    S.AGENDADO: frozenset(
        {S.CONFIRMADO, S.EM_ANDAMENTO, S.CANCELADO, S.NAO_COMPARECEU}
    ),
    S.CONFIRMADO: frozenset({S.EM_ANDAMENTO, S.CANCELADO, S.NAO_COMPARECEU}),
    S.EM_ANDAMENTO: frozenset({S.CONCLUIDO, S.CANCELADO}),
    S.CONCLUIDO: frozenset(),
    S.CANCELADO: frozenset(),
    S.NAO_COMPARECEU: frozenset(),
}


def parse_status(value: S | str) -> S:
    """Converte 'em_andamento' / 'EM_ANDAMENTO' / enum para o enum."""
    if isinstance(value, S):
        return value
    if not isinstance(value, str) or not value.strip():
        raise IllegalTransition("Status inválido.")
    try:
        return S[value.strip().upper()]
    except KeyError:
        raise IllegalTransition(f"Status desconhecido: {value}")


def is_terminal(status: S | str) -> bool:
    return parse_status(status) in TERMINAIS


def pode_transitar(atual: S | str, alvo: S | str) -> bool:
    return parse_status(alvo) in TRANSICOES[parse_status(atual)]


def validar_transicao(atual: S | str, alvo: S | str) -> S:
    """Valida a transição e retorna o status alvo.

    :raises IllegalTransition: se a transição não for permitida, incluindo
        qualquer tentativa de sair de um estado terminal.
    """
    atual_s = parse_status(atual)
    alvo_s = parse_status(alvo)
    if atual_s in TERMINAIS:
        raise IllegalTransition(
            f"Agendamento {atual_s.value} não pode mudar de status."
        )
    if alvo_s not in TRANSICOES[atual_s]:
        raise IllegalTransition(
            f"Transição {atual_s.value} -> {alvo_s.value} não permitida."
        )
    return alvo_s
