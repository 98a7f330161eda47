from __future__ import annotations

from datetime import datetime
from types import SimpleNamespace

from barbearia.models import StatusAgendamentoEnum as S
from barbearia.services.conflito_service import (
    conflitam,
    find_conflitos,
    has_conflito,
)


def _ag(id_, hora, minuto=0, status=S.AGENDADO):
    return SimpleNamespace(
        id=id_, data_hora=datetime(2024, 3, 11, hora, minuto), status=status
    )


def test_janela_de_trinta_minutos():
    # Existente às 14:00
    existentes = [_ag(1, 14)]
    assert has_conflito(datetime(2024, 3, 11, 14, 20), existentes)
    assert not has_conflito(datetime(2024, 3, 11, 14, 35), existentes)
    assert has_conflito(datetime(2024, 3, 11, 13, 35), existentes)


def test_diferenca_exata_de_trinta_minutos_nao_conflita():
    existentes = [_ag(1, 14)]
    assert not has_conflito(datetime(2024, 3, 11, 14, 30), existentes)
    assert not has_conflito(datetime(2024, 3, 11, 13, 30), existentes)


def test_conflito_e_simetrico():
    a = datetime(2024, 3, 11, 10, 0)
    for b in (
        datetime(2024, 3, 11, 10, 10),
        datetime(2024, 3, 11, 10, 30),
        datetime(2024, 3, 11, 9, 45),
    ):
        assert conflitam(a, b) == conflitam(b, a)


def test_cancelados_nao_ocupam_horario():
    existentes = [_ag(1, 14, status=S.CANCELADO)]
    assert not has_conflito(datetime(2024, 3, 11, 14, 0), existentes)


def test_demais_status_ocupam_horario():
    for status in (S.CONFIRMADO, S.EM_ANDAMENTO, S.CONCLUIDO, S.NAO_COMPARECEU):
        assert has_conflito(
            datetime(2024, 3, 11, 14, 0), [_ag(1, 14, status=status)]
        )


def test_ignorar_id_exclui_o_proprio_agendamento():
    existentes = [_ag(7, 14), _ag(8, 16)]
    assert find_conflitos(
        datetime(2024, 3, 11, 14, 10), existentes, ignorar_id=7
    ) == []
    conflitos = find_conflitos(
        datetime(2024, 3, 11, 15, 50), existentes, ignorar_id=7
    )
    assert [c.id for c in conflitos] == [8]


def test_janela_configuravel():
    existentes = [_ag(1, 14)]
    assert has_conflito(
        datetime(2024, 3, 11, 14, 40), existentes, janela_minutos=45
    )
