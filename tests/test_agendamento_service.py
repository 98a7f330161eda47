from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal

import pytest

from barbearia import db
from barbearia.errors import (
    ConflictDetected,
    IllegalTransition,
    ReferenceNotFound,
    ValidationFailed,
)
from barbearia.models import (
    Agendamento,
    MovimentacaoFinanceira,
    StatusAgendamentoEnum,
    TipoMovimentacaoEnum,
)
from barbearia.services import agendamento_service as svc


def _payload(cadastros, dia, hora, minuto=0, barbeiro="joao", **extra):
    dados = {
        "cliente_id": cadastros["cliente"].id,
        "barbeiro_id": cadastros[barbeiro].id,
        "servico_ids": [cadastros["corte"].id],
        "data_hora": datetime.combine(dia, time(hora, minuto)).isoformat(),
    }
    dados.update(extra)
    return dados


def test_propose_cria_agendado_com_valor_calculado(cadastros, amanha):
    corte = cadastros["corte"].id
    ag = svc.propose_agendamento(
        _payload(cadastros, amanha, 10, servico_ids=[corte, corte])
    )
    assert ag.id is not None
    assert ag.status == StatusAgendamentoEnum.AGENDADO
    assert Decimal(ag.valor_total) == Decimal("50.00")
    assert ag.servico_ids == [corte, corte]
    assert ag.data_hora == datetime.combine(amanha, time(10, 0))


def test_status_informado_na_criacao_e_ignorado(cadastros, amanha):
    ag = svc.propose_agendamento(
        _payload(cadastros, amanha, 10, status="CONCLUIDO")
    )
    assert ag.status == StatusAgendamentoEnum.AGENDADO


def test_valor_total_informado_e_mantido(cadastros, amanha):
    ag = svc.propose_agendamento(
        _payload(cadastros, amanha, 10, valor_total="30,00")
    )
    assert Decimal(ag.valor_total) == Decimal("30.00")


def test_propose_rejeita_com_todos_os_motivos(cadastros):
    ontem_noite = datetime.combine(date(2020, 1, 1), time(20, 0))
    with pytest.raises(ValidationFailed) as exc:
        svc.propose_agendamento(
            {
                "cliente_id": "abc",
                "barbeiro_id": cadastros["joao"].id,
                "servico_ids": [],
                "data_hora": ontem_noite.isoformat(),
            }
        )
    assert exc.value.reasons == [
        "Cliente ID deve ser um número válido.",
        "Deve ter entre 1 e 5 serviços.",
        "Data/hora deve ser futura.",
        "Horário deve estar entre 08:00 e 18:00.",
    ]
    assert db.session.query(Agendamento).count() == 0


def test_data_hora_malformada(cadastros):
    with pytest.raises(ValidationFailed) as exc:
        svc.propose_agendamento(
            {
                "cliente_id": cadastros["cliente"].id,
                "barbeiro_id": cadastros["joao"].id,
                "servico_ids": [cadastros["corte"].id],
                "data_hora": "amanhã às 10",
            }
        )
    assert exc.value.reasons == ["Data/hora deve ser válida."]


def test_referencias_inexistentes(cadastros, amanha):
    with pytest.raises(ReferenceNotFound):
        svc.propose_agendamento(_payload(cadastros, amanha, 10, cliente_id=999))
    with pytest.raises(ReferenceNotFound):
        svc.propose_agendamento(
            _payload(cadastros, amanha, 10, barbeiro_id=999)
        )
    with pytest.raises(ReferenceNotFound):
        svc.propose_agendamento(
            _payload(cadastros, amanha, 10, servico_ids=[999])
        )
    assert db.session.query(Agendamento).count() == 0


def test_janela_de_conflito_por_barbeiro(cadastros, amanha):
    svc.propose_agendamento(_payload(cadastros, amanha, 14))

    with pytest.raises(ConflictDetected):
        svc.propose_agendamento(_payload(cadastros, amanha, 14, 20))
    with pytest.raises(ConflictDetected):
        svc.propose_agendamento(_payload(cadastros, amanha, 13, 35))

    assert svc.propose_agendamento(_payload(cadastros, amanha, 14, 35)).id
    # Outro barbeiro no mesmo horário não conflita
    assert svc.propose_agendamento(
        _payload(cadastros, amanha, 14, barbeiro="pedro")
    ).id


def test_cancelado_libera_horario(cadastros, amanha):
    ag = svc.propose_agendamento(_payload(cadastros, amanha, 9))
    svc.cancelar_agendamento(ag.id)
    novo = svc.propose_agendamento(_payload(cadastros, amanha, 9))
    assert novo.id != ag.id


def test_edit_ignora_o_proprio_agendamento(cadastros, amanha):
    ag = svc.propose_agendamento(_payload(cadastros, amanha, 10))
    editado = svc.edit_agendamento(
        ag.id,
        {"data_hora": datetime.combine(amanha, time(10, 15)).isoformat()},
    )
    assert editado.data_hora == datetime.combine(amanha, time(10, 15))


def test_edit_aplica_mesma_regra_de_conflito(cadastros, amanha):
    svc.propose_agendamento(_payload(cadastros, amanha, 10))
    outro = svc.propose_agendamento(_payload(cadastros, amanha, 11))
    with pytest.raises(ConflictDetected):
        svc.edit_agendamento(
            outro.id,
            {"data_hora": datetime.combine(amanha, time(10, 20)).isoformat()},
        )
    db.session.refresh(outro)
    assert outro.data_hora == datetime.combine(amanha, time(11, 0))


def test_edit_recalcula_valor_quando_servicos_mudam(cadastros, amanha):
    ag = svc.propose_agendamento(_payload(cadastros, amanha, 10))
    ids = [cadastros["corte"].id, cadastros["barba"].id]
    editado = svc.edit_agendamento(ag.id, {"servico_ids": ids})
    assert Decimal(editado.valor_total) == Decimal("45.00")

    editado = svc.edit_agendamento(ag.id, {"observacoes": "  cliente   vip "})
    assert editado.observacoes == "cliente vip"
    assert Decimal(editado.valor_total) == Decimal("45.00")


def test_edit_com_servico_desativado_mantem_valor(cadastros, amanha):
    barba = cadastros["barba"]
    ag = svc.propose_agendamento(
        _payload(cadastros, amanha, 10, servico_ids=[barba.id])
    )
    barba.ativo = False
    barba.preco = Decimal("99.00")
    db.session.commit()

    editado = svc.edit_agendamento(ag.id, {"observacoes": "chegar cedo"})
    assert editado.observacoes == "chegar cedo"
    assert Decimal(editado.valor_total) == Decimal("20.00")
    assert editado.servico_ids == [barba.id]

    # incluir um serviço inativo numa edição continua proibido
    with pytest.raises(ReferenceNotFound):
        svc.edit_agendamento(
            ag.id, {"servico_ids": [barba.id, cadastros["corte"].id]}
        )


def test_edit_com_barbeiro_desativado_mantido(cadastros, amanha):
    ag = svc.propose_agendamento(_payload(cadastros, amanha, 10))
    cadastros["joao"].ativo = False
    db.session.commit()

    editado = svc.edit_agendamento(ag.id, {"observacoes": "sem pressa"})
    assert editado.barbeiro_id == cadastros["joao"].id

    cadastros["pedro"].ativo = False
    db.session.commit()
    with pytest.raises(ReferenceNotFound):
        svc.edit_agendamento(ag.id, {"barbeiro_id": cadastros["pedro"].id})


def test_edit_nao_altera_status_nem_terminais(cadastros, amanha):
    ag = svc.propose_agendamento(_payload(cadastros, amanha, 10))
    svc.edit_agendamento(ag.id, {"status": "CONCLUIDO"})
    assert ag.status == StatusAgendamentoEnum.AGENDADO

    svc.marcar_nao_compareceu(ag.id)
    with pytest.raises(IllegalTransition):
        svc.edit_agendamento(ag.id, {"observacoes": "tarde demais"})


def test_ciclo_completo_de_status(cadastros, amanha):
    ag = svc.propose_agendamento(_payload(cadastros, amanha, 10))
    with pytest.raises(IllegalTransition):
        svc.finalizar_atendimento(ag.id)

    svc.confirmar_agendamento(ag.id)
    svc.iniciar_atendimento(ag.id)
    ag = svc.finalizar_atendimento(ag.id)
    assert ag.status == StatusAgendamentoEnum.CONCLUIDO

    with pytest.raises(IllegalTransition):
        svc.cancelar_agendamento(ag.id)
    with pytest.raises(IllegalTransition):
        svc.transition_agendamento(ag.id, "agendado")


def test_transicao_de_agendamento_inexistente(db_session):
    with pytest.raises(ReferenceNotFound):
        svc.transition_agendamento(42, "CONFIRMADO")


def test_list_agendamentos_filtros(cadastros, amanha):
    a = svc.propose_agendamento(_payload(cadastros, amanha, 15))
    b = svc.propose_agendamento(_payload(cadastros, amanha, 9, barbeiro="pedro"))
    svc.cancelar_agendamento(b.id)

    assert [x.id for x in svc.list_agendamentos()] == [b.id, a.id]
    assert [x.id for x in svc.list_agendamentos(status="cancelado")] == [b.id]
    assert [
        x.id
        for x in svc.list_agendamentos(barbeiro_id=cadastros["joao"].id)
    ] == [a.id]
    # Data malformada é ignorada
    assert len(svc.list_agendamentos(data_inicio="ontem")) == 2
    assert svc.list_agendamentos(data_fim=date(2020, 1, 1)) == []
    with pytest.raises(ValidationFailed):
        svc.list_agendamentos(status="FINALIZADO")


def test_get_agendamentos_do_dia(cadastros, amanha):
    ag = svc.propose_agendamento(_payload(cadastros, amanha, 17, 30))
    assert [x.id for x in svc.get_agendamentos_do_dia(amanha)] == [ag.id]
    assert svc.get_agendamentos_do_dia(date(2020, 1, 1)) == []


def test_horarios_disponiveis(cadastros, amanha):
    svc.propose_agendamento(_payload(cadastros, amanha, 14))
    grade = svc.get_horarios_disponiveis(cadastros["joao"].id, amanha)
    assert len(grade) == 20
    assert grade[0]["horario"] == f"{amanha.isoformat()}T08:00:00"
    livres = {g["horario"][11:16]: g["disponivel"] for g in grade}
    assert livres["14:00"] is False
    assert livres["13:30"] is True
    assert livres["14:30"] is True
    assert livres["08:00"] is True

    passado = svc.get_horarios_disponiveis(
        cadastros["joao"].id, date(2020, 1, 1)
    )
    assert not any(g["disponivel"] for g in passado)


def test_horarios_de_barbeiro_inexistente(db_session, amanha):
    with pytest.raises(ReferenceNotFound):
        svc.get_horarios_disponiveis(999, amanha)


def test_delete_preserva_movimentacao_vinculada(cadastros, amanha):
    ag = svc.propose_agendamento(_payload(cadastros, amanha, 10))
    mov = MovimentacaoFinanceira()
    mov.tipo = TipoMovimentacaoEnum.RECEITA
    mov.categoria = "servico"
    mov.descricao = "Sinal"
    mov.valor = Decimal("10.00")
    mov.data = date.today()
    mov.agendamento_id = ag.id
    db.session.add(mov)
    db.session.commit()

    svc.delete_agendamento(ag.id)
    assert db.session.get(Agendamento, ag.id) is None
    db.session.refresh(mov)
    assert mov.agendamento_id is None


def test_duracao_total_derivada(cadastros, amanha):
    ids = [cadastros["corte"].id, cadastros["barba"].id]
    ag = svc.propose_agendamento(_payload(cadastros, amanha, 10, servico_ids=ids))
    assert svc.get_duracao_total(ag) == 50
