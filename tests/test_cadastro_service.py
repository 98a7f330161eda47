from __future__ import annotations

from decimal import Decimal

import pytest

from barbearia.errors import ReferenceNotFound, ValidationFailed
from barbearia.services import cadastro_service


def test_create_cliente_sanitiza_campos(db_session):
    c = cadastro_service.create_cliente(
        {
            "nome": "  Ana   Souza ",
            "telefone": " (11) 90000-0000 ",
            "email": "",
            "data_nascimento": "15/08/1990",
        }
    )
    assert c.nome == "Ana Souza"
    assert c.telefone == "(11) 90000-0000"
    assert c.email is None
    assert c.data_nascimento.isoformat() == "1990-08-15"
    assert cadastro_service.get_cliente(c.id) is c


def test_create_cliente_invalido(db_session):
    with pytest.raises(ValidationFailed) as exc:
        cadastro_service.create_cliente(
            {"nome": "A", "data_nascimento": "ontem"}
        )
    assert len(exc.value.reasons) == 2


def test_cpf_duplicado(db_session):
    cadastro_service.create_cliente({"nome": "Ana", "cpf": "123.456.789-00"})
    with pytest.raises(ValidationFailed):
        cadastro_service.create_cliente(
            {"nome": "Bia", "cpf": "123.456.789-00"}
        )


def test_busca_de_clientes(db_session):
    cadastro_service.create_cliente({"nome": "Carlos", "telefone": "1111"})
    cadastro_service.create_cliente({"nome": "Bruno", "telefone": "2222"})
    nomes = [c.nome for c in cadastro_service.list_clientes()]
    assert nomes == ["Bruno", "Carlos"]
    assert [c.nome for c in cadastro_service.list_clientes("222")] == [
        "Bruno"
    ]


def test_create_barbeiro(db_session):
    b = cadastro_service.create_barbeiro(
        {"nome": "João", "especialidades": ["Corte", " ", "Barba"]}
    )
    assert b.especialidades == ["Corte", "Barba"]
    assert Decimal(b.comissao) == Decimal("50")

    b2 = cadastro_service.create_barbeiro({"nome": "Pedro", "comissao": "35"})
    assert Decimal(b2.comissao) == Decimal("35.00")
    with pytest.raises(ValidationFailed):
        cadastro_service.create_barbeiro({"nome": "Zé", "comissao": "150"})


def test_create_servico(db_session):
    s = cadastro_service.create_servico(
        {"nome": "Corte", "preco": "35,00", "duracao": "40"}
    )
    assert Decimal(s.preco) == Decimal("35.00")
    assert s.duracao == 40
    assert cadastro_service.list_servicos() == [s]

    with pytest.raises(ValidationFailed) as exc:
        cadastro_service.create_servico(
            {"nome": "Barba", "preco": "0", "duracao": "2"}
        )
    assert len(exc.value.reasons) == 2


def test_registros_inexistentes(db_session):
    with pytest.raises(ReferenceNotFound):
        cadastro_service.get_cliente(1)
    with pytest.raises(ReferenceNotFound):
        cadastro_service.get_barbeiro(1)
    with pytest.raises(ReferenceNotFound):
        cadastro_service.get_servico(1)


def test_update_cliente_substitui_campos(db_session):
    c = cadastro_service.create_cliente(
        {"nome": "Ana", "telefone": "1111", "email": "ana@x.com"}
    )
    editado = cadastro_service.update_cliente(
        c.id, {"nome": " Ana  Paula ", "telefone": "2222"}
    )
    assert editado.id == c.id
    assert editado.nome == "Ana Paula"
    assert editado.telefone == "2222"
    assert editado.email is None
    assert editado.ativo is True


def test_update_invalido_nao_altera_registro(db_session):
    c = cadastro_service.create_cliente({"nome": "Ana", "telefone": "1111"})
    with pytest.raises(ValidationFailed):
        cadastro_service.update_cliente(c.id, {"nome": "A", "ativo": "sim"})
    db_session.expire_all()
    assert cadastro_service.get_cliente(c.id).nome == "Ana"
    with pytest.raises(ReferenceNotFound):
        cadastro_service.update_cliente(99, {"nome": "Ana"})


def test_update_cpf_duplicado(db_session):
    cadastro_service.create_cliente({"nome": "Ana", "cpf": "111"})
    bia = cadastro_service.create_cliente({"nome": "Bia", "cpf": "222"})
    with pytest.raises(ValidationFailed):
        cadastro_service.update_cliente(bia.id, {"nome": "Bia", "cpf": "111"})
    assert cadastro_service.get_cliente(bia.id).cpf == "222"


def test_update_barbeiro_mantem_comissao_ausente(db_session):
    b = cadastro_service.create_barbeiro({"nome": "João", "comissao": "35"})
    editado = cadastro_service.update_barbeiro(
        b.id, {"nome": "João Silva", "especialidades": ["Barba"]}
    )
    assert editado.nome == "João Silva"
    assert editado.especialidades == ["Barba"]
    assert Decimal(editado.comissao) == Decimal("35.00")

    editado = cadastro_service.update_barbeiro(
        b.id, {"nome": "João Silva", "comissao": "60"}
    )
    assert Decimal(editado.comissao) == Decimal("60.00")


def test_update_servico_e_reativacao(db_session):
    s = cadastro_service.create_servico({"nome": "Corte", "preco": "30"})
    cadastro_service.desativar_servico(s.id)
    assert cadastro_service.list_servicos() == []

    editado = cadastro_service.update_servico(
        s.id, {"nome": "Corte", "preco": "35", "duracao": 45, "ativo": True}
    )
    assert Decimal(editado.preco) == Decimal("35.00")
    assert editado.duracao == 45
    assert cadastro_service.list_servicos() == [editado]


def test_desativados_saem_das_listagens(db_session):
    c = cadastro_service.create_cliente({"nome": "Ana"})
    b = cadastro_service.create_barbeiro({"nome": "João"})
    cadastro_service.desativar_cliente(c.id)
    cadastro_service.desativar_barbeiro(b.id)

    assert cadastro_service.list_clientes() == []
    assert cadastro_service.list_barbeiros() == []
    assert cadastro_service.list_barbeiros(apenas_ativos=False) == [b]
    # exclusão lógica: o registro continua acessível
    assert cadastro_service.get_cliente(c.id).ativo is False
    with pytest.raises(ReferenceNotFound):
        cadastro_service.desativar_servico(42)


def test_desativados_nao_recebem_agendamentos(cadastros, amanha):
    from datetime import datetime, time

    from barbearia.services import agendamento_service

    cadastro_service.desativar_barbeiro(cadastros["pedro"].id)
    cadastro_service.desativar_servico(cadastros["barba"].id)
    dados = {
        "cliente_id": cadastros["cliente"].id,
        "barbeiro_id": cadastros["pedro"].id,
        "servico_ids": [cadastros["corte"].id],
        "data_hora": datetime.combine(amanha, time(10, 0)).isoformat(),
    }
    with pytest.raises(ReferenceNotFound):
        agendamento_service.propose_agendamento(dados)

    dados["barbeiro_id"] = cadastros["joao"].id
    dados["servico_ids"] = [cadastros["barba"].id]
    with pytest.raises(ReferenceNotFound):
        agendamento_service.propose_agendamento(dados)
