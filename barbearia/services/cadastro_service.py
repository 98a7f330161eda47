"""Cadastros de apoio à agenda: clientes, barbeiros e serviços.

Exclusão é lógica (``ativo = False``): registros inativos deixam de ser
listados e de aceitar novos agendamentos, mas o histórico é preservado.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from barbearia import db
from barbearia.errors import ReferenceNotFound, ValidationFailed
from barbearia.models import Barbeiro, Cliente, Servico
from barbearia.utils.sanitization import sanitizar_input

from .precificacao_service import quantize
from .validacao_service import VALOR_MINIMO, to_decimal

logger = logging.getLogger(__name__)


def _parse_date(value: str | None) -> date | None:
    if not value:
        return None
    v = value.strip()
    # Try ISO first (YYYY-MM-DD) then common BR format
    for fmt in ("%Y-%m-%d", "%d/%m/%Y"):
        try:
            return datetime.strptime(v, fmt).date()
        except ValueError:
            continue
    return None


def _texto_opcional(dados: Mapping[str, Any], campo: str) -> str | None:
    val = sanitizar_input(dados.get(campo))
    return val if isinstance(val, str) and val else None


def _nome(dados: Mapping[str, Any], motivos: list[str]) -> str:
    nome = _texto_opcional(dados, "nome") or ""
    if not (2 <= len(nome) <= 100):
        motivos.append("Nome deve ter entre 2 e 100 caracteres.")
    return nome


def _ativo(dados: Mapping[str, Any], campos: dict, motivos: list[str]) -> None:
    """``ativo`` opcional na edição; só aceita booleano."""
    if "ativo" not in dados:
        return
    if not isinstance(dados["ativo"], bool):
        motivos.append("Ativo deve ser verdadeiro ou falso.")
        return
    campos["ativo"] = dados["ativo"]


def _salvar(obj: Any, campos: Mapping[str, Any], rotulo: str, acao: str):
    for key, value in campos.items():
        setattr(obj, key, value)
    db.session.add(obj)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ValidationFailed(f"{rotulo} já cadastrado (CPF duplicado).")
    logger.info("%s #%s %s: %s", rotulo, obj.id, acao, obj.nome)
    return obj


def _desativar(obj: Any, rotulo: str) -> None:
    obj.ativo = False
    db.session.add(obj)
    db.session.commit()
    logger.warning("%s #%s desativado", rotulo, obj.id)


# ----------------------------------
# Clientes
# ----------------------------------


def _campos_cliente(dados: Mapping[str, Any], edicao: bool = False) -> dict:
    motivos: list[str] = []
    campos: dict[str, Any] = {"nome": _nome(dados, motivos)}
    for field in ("email", "telefone", "cpf", "observacoes"):
        campos[field] = _texto_opcional(dados, field)
    raw_nasc = _texto_opcional(dados, "data_nascimento")
    campos["data_nascimento"] = _parse_date(raw_nasc)
    if raw_nasc and campos["data_nascimento"] is None:
        motivos.append("Data de nascimento inválida.")
    if edicao:
        _ativo(dados, campos, motivos)
    if motivos:
        raise ValidationFailed(motivos)
    return campos


def create_cliente(dados: Mapping[str, Any]) -> Cliente:
    return _salvar(Cliente(), _campos_cliente(dados), "Cliente", "cadastrado")


def update_cliente(cliente_id: int, dados: Mapping[str, Any]) -> Cliente:
    """Edição completa (os campos ausentes são limpos, como num PUT)."""
    c = get_cliente(cliente_id)
    campos = _campos_cliente(dados, edicao=True)
    return _salvar(c, campos, "Cliente", "atualizado")


def desativar_cliente(cliente_id: int) -> None:
    _desativar(get_cliente(cliente_id), "Cliente")


def get_cliente(cliente_id: int) -> Cliente:
    c = db.session.get(Cliente, int(cliente_id))
    if c is None:
        raise ReferenceNotFound(f"Cliente id={cliente_id} não encontrado.")
    return c


def list_clientes(busca: str | None = None) -> list[Cliente]:
    """Clientes ativos por nome; ``busca`` filtra por nome/telefone."""
    q = db.session.query(Cliente).filter(Cliente.ativo.is_(True))
    termo = sanitizar_input(busca)
    if termo:
        like = f"%{termo}%"
        q = q.filter(
            or_(Cliente.nome.ilike(like), Cliente.telefone.ilike(like))
        )
    return q.order_by(Cliente.nome.asc()).all()


# ----------------------------------
# Barbeiros
# ----------------------------------


def _campos_barbeiro(dados: Mapping[str, Any], edicao: bool = False) -> dict:
    motivos: list[str] = []
    campos: dict[str, Any] = {"nome": _nome(dados, motivos)}
    for field in ("email", "telefone", "cpf"):
        campos[field] = _texto_opcional(dados, field)

    especialidades = dados.get("especialidades") or []
    if not isinstance(especialidades, (list, tuple)):
        motivos.append("Especialidades deve ser uma lista.")
        especialidades = []
    campos["especialidades"] = [
        e for e in (sanitizar_input(x) for x in especialidades)
        if isinstance(e, str) and e
    ]

    raw_comissao = dados.get("comissao")
    # Ausente: default da coluna (50%) ou valor atual na edição
    if raw_comissao not in (None, ""):
        try:
            comissao = to_decimal(raw_comissao)
        except ValueError:
            comissao = None
        if (
            comissao is None
            or not comissao.is_finite()
            or not (0 <= comissao <= 100)
        ):
            motivos.append("Comissão deve estar entre 0 e 100.")
        else:
            campos["comissao"] = quantize(comissao)
    if edicao:
        _ativo(dados, campos, motivos)
    if motivos:
        raise ValidationFailed(motivos)
    return campos


def create_barbeiro(dados: Mapping[str, Any]) -> Barbeiro:
    return _salvar(
        Barbeiro(), _campos_barbeiro(dados), "Barbeiro", "cadastrado"
    )


def update_barbeiro(barbeiro_id: int, dados: Mapping[str, Any]) -> Barbeiro:
    b = get_barbeiro(barbeiro_id)
    campos = _campos_barbeiro(dados, edicao=True)
    return _salvar(b, campos, "Barbeiro", "atualizado")


def desativar_barbeiro(barbeiro_id: int) -> None:
    """Agendamentos já marcados permanecem; novos são recusados."""
    _desativar(get_barbeiro(barbeiro_id), "Barbeiro")


def get_barbeiro(barbeiro_id: int) -> Barbeiro:
    b = db.session.get(Barbeiro, int(barbeiro_id))
    if b is None:
        raise ReferenceNotFound(f"Barbeiro id={barbeiro_id} não encontrado.")
    return b


def list_barbeiros(apenas_ativos: bool = True) -> list[Barbeiro]:
    q = db.session.query(Barbeiro)
    if apenas_ativos:
        q = q.filter(Barbeiro.ativo.is_(True))
    return q.order_by(Barbeiro.nome.asc()).all()


# ----------------------------------
# Serviços
# ----------------------------------


def _campos_servico(dados: Mapping[str, Any], edicao: bool = False) -> dict:
    motivos: list[str] = []
    campos: dict[str, Any] = {
        "nome": _nome(dados, motivos),
        "descricao": _texto_opcional(dados, "descricao"),
        "categoria": _texto_opcional(dados, "categoria") or "Corte",
    }

    try:
        preco = to_decimal(dados.get("preco"))
    except ValueError:
        preco = None
    if (
        preco is None
        or not preco.is_finite()
        or not (VALOR_MINIMO <= preco <= 10000)
    ):
        motivos.append("Preço deve estar entre R$ 0,01 e R$ 10.000,00.")
    else:
        campos["preco"] = quantize(preco)

    try:
        duracao = int(str(dados.get("duracao", 30)).strip())
    except ValueError:
        duracao = 0
    if not (5 <= duracao <= 480):
        motivos.append("Duração deve estar entre 5 e 480 minutos.")
    campos["duracao"] = duracao

    if edicao:
        _ativo(dados, campos, motivos)
    if motivos:
        raise ValidationFailed(motivos)
    return campos


def create_servico(dados: Mapping[str, Any]) -> Servico:
    return _salvar(Servico(), _campos_servico(dados), "Serviço", "cadastrado")


def update_servico(servico_id: int, dados: Mapping[str, Any]) -> Servico:
    """Novo preço vale só para agendamentos futuros (valor congelado)."""
    s = get_servico(servico_id)
    campos = _campos_servico(dados, edicao=True)
    return _salvar(s, campos, "Serviço", "atualizado")


def desativar_servico(servico_id: int) -> None:
    _desativar(get_servico(servico_id), "Serviço")


def get_servico(servico_id: int) -> Servico:
    s = db.session.get(Servico, int(servico_id))
    if s is None:
        raise ReferenceNotFound(f"Serviço id={servico_id} não encontrado.")
    return s


def list_servicos(apenas_ativos: bool = True) -> list[Servico]:
    q = db.session.query(Servico)
    if apenas_ativos:
        q = q.filter(Servico.ativo.is_(True))
    return q.order_by(Servico.categoria.asc(), Servico.nome.asc()).all()
