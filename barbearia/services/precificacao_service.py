from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import ROUND_HALF_UP, Decimal

from barbearia import db
from barbearia.errors import ReferenceNotFound
from barbearia.models import Servico

from .validacao_service import to_decimal

CENTAVOS = Decimal("0.01")


def quantize(valor: Decimal) -> Decimal:
    return valor.quantize(CENTAVOS, rounding=ROUND_HALF_UP)


def _lookup(servico_id: object, catalogo: Mapping) -> Servico:
    servico = catalogo.get(servico_id)
    if servico is None:
        raise ReferenceNotFound(f"Serviço id={servico_id} não encontrado.")
    return servico


def compute_total(servico_ids: Iterable, catalogo: Mapping) -> Decimal:
    """Soma o preço atual de cada serviço, na ordem, contando repetições.

    ``catalogo`` mapeia id -> objeto com atributo ``preco``.

    :raises ReferenceNotFound: se algum id não existir no catálogo
    """
    total = Decimal("0")
    for sid in servico_ids:
        total += to_decimal(_lookup(sid, catalogo).preco)
    return quantize(total)


def compute_duracao(servico_ids: Iterable, catalogo: Mapping) -> int:
    """Duração total em minutos (derivada, não persistida)."""
    return sum(int(_lookup(sid, catalogo).duracao) for sid in servico_ids)


def get_catalogo(
    servico_ids: Iterable[int], apenas_ativos: bool = True
) -> dict[int, Servico]:
    """Carrega os serviços referenciados como {id: Servico}."""
    ids = {int(sid) for sid in servico_ids}
    if not ids:
        return {}
    q = db.session.query(Servico).filter(Servico.id.in_(ids))
    if apenas_ativos:
        q = q.filter(Servico.ativo.is_(True))
    return {s.id: s for s in q.all()}
