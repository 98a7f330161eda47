from __future__ import annotations

from decimal import Decimal
from types import SimpleNamespace

import pytest

from barbearia.errors import ReferenceNotFound
from barbearia.services.precificacao_service import (
    compute_duracao,
    compute_total,
    get_catalogo,
)

CATALOGO = {
    "cut": SimpleNamespace(preco=Decimal("25.00"), duracao=30),
    "beard": SimpleNamespace(preco=Decimal("20.00"), duracao=20),
}


def test_servico_repetido_conta_duas_vezes():
    assert compute_total(["cut", "cut"], CATALOGO) == Decimal("50.00")


def test_soma_na_ordem_informada():
    assert compute_total(["beard", "cut"], CATALOGO) == Decimal("45.00")
    assert compute_duracao(["beard", "cut", "cut"], CATALOGO) == 80


def test_servico_inexistente():
    with pytest.raises(ReferenceNotFound) as exc:
        compute_total(["cut", "wax"], CATALOGO)
    assert "wax" in exc.value.message


def test_get_catalogo_ignora_inativos(cadastros):
    barba = cadastros["barba"]
    barba.ativo = False
    ids = [cadastros["corte"].id, barba.id]
    assert set(get_catalogo(ids)) == {cadastros["corte"].id}
    assert set(get_catalogo(ids, apenas_ativos=False)) == set(ids)
    assert get_catalogo([]) == {}
