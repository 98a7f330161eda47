from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Mapping
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from sqlalchemy.sql import func

from barbearia import db
from barbearia.errors import (
    AgendaError,
    IllegalTransition,
    OutOfRange,
    ReferenceNotFound,
    ValidationFailed,
)
from barbearia.models import (
    Agendamento,
    Barbeiro,
    MovimentacaoFinanceira,
    StatusAgendamentoEnum,
    TipoMovimentacaoEnum,
)
from barbearia.utils.formatters import format_currency
from barbearia.utils.sanitization import sanitizar_input

from .agenda_service import parse_data
from .precificacao_service import quantize
from .validacao_service import VALOR_MINIMO, get_setting, to_decimal

logger = logging.getLogger(__name__)

# Vocabulário de categorias por tipo
CATEGORIAS: dict[TipoMovimentacaoEnum, tuple[str, ...]] = {
    TipoMovimentacaoEnum.RECEITA: ("servico", "produto", "outros"),
    TipoMovimentacaoEnum.DESPESA: (
        "comissao",
        "aluguel",
        "energia",
        "agua",
        "internet",
        "material",
        "marketing",
        "outros",
    ),
}

ZERO = Decimal("0.00")


# ----------------------------------
# Helpers
# ----------------------------------


def _um_ano_antes(d: date) -> date:
    try:
        return d.replace(year=d.year - 1)
    except ValueError:
        # 29/02 -> 28/02 do ano anterior
        return d.replace(year=d.year - 1, day=28)


def _parse_tipo(value: object) -> TipoMovimentacaoEnum | None:
    if isinstance(value, TipoMovimentacaoEnum):
        return value
    try:
        return TipoMovimentacaoEnum(str(value).strip().upper())
    except ValueError:
        return None


def resolve_periodo(
    data_inicio: object = None,
    data_fim: object = None,
    hoje: date | None = None,
) -> tuple[date, date]:
    """Resolve o período de relatório.

    Padrão: primeiro dia do mês corrente até hoje. Um limite ausente ou
    malformado cai no seu padrão, sem abortar o relatório. Limites
    invertidos são trocados.
    """
    hoje = hoje or date.today()
    padrao_inicio = hoje.replace(day=1)

    def _ou_padrao(value: object, padrao: date) -> date:
        if value in (None, ""):
            return padrao
        try:
            return parse_data(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            logger.info("Data de período inválida ignorada: %r", value)
            return padrao

    inicio = _ou_padrao(data_inicio, padrao_inicio)
    fim = _ou_padrao(data_fim, hoje)
    if inicio > fim:
        inicio, fim = fim, inicio
    return inicio, fim


def normalizar_movimentacao(
    dados: Mapping[str, Any], hoje: date | None = None
) -> dict[str, Any]:
    """Valida e tipa uma movimentação.

    :raises ValidationFailed: campos ausentes/malformados (todos os motivos,
        incluindo eventuais violações de faixa)
    :raises OutOfRange: apenas valor/data fora dos limites permitidos
    """
    hoje = hoje or date.today()
    estruturais: list[str] = []
    faixa: list[str] = []
    campos: dict[str, Any] = {}

    tipo = _parse_tipo(dados.get("tipo"))
    if tipo is None:
        estruturais.append("Tipo deve ser receita ou despesa.")
    campos["tipo"] = tipo

    categoria = sanitizar_input(dados.get("categoria"))
    categoria = categoria.lower() if isinstance(categoria, str) else None
    if not categoria:
        estruturais.append("Categoria é obrigatória.")
    elif tipo is not None and categoria not in CATEGORIAS[tipo]:
        estruturais.append(
            f"Categoria '{categoria}' inválida para {tipo.value.lower()}."
        )
    campos["categoria"] = categoria

    descricao = sanitizar_input(dados.get("descricao"))
    if not isinstance(descricao, str) or not (2 <= len(descricao) <= 200):
        estruturais.append("Descrição deve ter entre 2 e 200 caracteres.")
    campos["descricao"] = descricao

    maximo = to_decimal(get_setting("VALOR_MAXIMO_MOVIMENTACAO"))
    try:
        valor = to_decimal(dados.get("valor"))
        if not valor.is_finite():
            raise ValueError("Valor numérico inválido")
    except ValueError:
        estruturais.append("Valor deve ser numérico.")
        valor = None
    else:
        if not (VALOR_MINIMO <= valor <= maximo):
            faixa.append(
                "Valor deve estar entre R$ 0,01 e "
                f"{format_currency(maximo)}."
            )
        valor = quantize(valor)
    campos["valor"] = valor

    try:
        data_mov = parse_data(dados.get("data"))  # type: ignore[arg-type]
    except (TypeError, ValueError):
        estruturais.append("Data deve ser válida.")
        data_mov = None
    else:
        if data_mov > hoje or data_mov < _um_ano_antes(hoje):
            faixa.append("Data deve estar entre um ano atrás e hoje.")
    campos["data"] = data_mov

    raw_ag = dados.get("agendamento_id")
    campos["agendamento_id"] = None
    if raw_ag not in (None, ""):
        try:
            ag_id = int(str(raw_ag))
            if ag_id < 1:
                raise ValueError
            campos["agendamento_id"] = ag_id
        except ValueError:
            estruturais.append(
                "ID do agendamento deve ser um número válido."
            )

    obs = sanitizar_input(dados.get("observacoes"))
    campos["observacoes"] = obs if isinstance(obs, str) and obs else None

    if estruturais:
        raise ValidationFailed(estruturais + faixa)
    if faixa:
        raise OutOfRange(faixa)
    return campos


def _validar_agendamento_vinculado(agendamento_id: int | None) -> None:
    if agendamento_id is None:
        return
    if db.session.get(Agendamento, agendamento_id) is None:
        raise ReferenceNotFound(
            f"Agendamento {agendamento_id} não encontrado."
        )


# ----------------------------------
# Livro-caixa
# ----------------------------------


def record_movimentacao(
    dados: Mapping[str, Any],
    usuario_id: int | None = None,
    hoje: date | None = None,
) -> MovimentacaoFinanceira:
    """Registra uma receita/despesa no livro-caixa.

    Não há unicidade por agendamento: várias movimentações podem apontar
    para o mesmo ``agendamento_id``.
    """
    try:
        campos = normalizar_movimentacao(dados, hoje=hoje)
        _validar_agendamento_vinculado(campos["agendamento_id"])
    except AgendaError as exc:
        logger.info("Movimentação rejeitada: %s", exc.reasons)
        raise

    mov = MovimentacaoFinanceira()
    for key, value in campos.items():
        setattr(mov, key, value)
    db.session.add(mov)
    db.session.commit()
    logger.info(
        "Movimentação #%s registrada: %s/%s %s em %s (usuario=%s)",
        mov.id,
        mov.tipo.value,
        mov.categoria,
        mov.valor,
        mov.data.isoformat(),
        usuario_id,
    )
    return mov


def update_movimentacao(
    movimentacao_id: int,
    dados: Mapping[str, Any],
    hoje: date | None = None,
) -> MovimentacaoFinanceira:
    mov = get_movimentacao(movimentacao_id)
    campos = normalizar_movimentacao(dados, hoje=hoje)
    _validar_agendamento_vinculado(campos["agendamento_id"])
    for key, value in campos.items():
        setattr(mov, key, value)
    db.session.add(mov)
    db.session.commit()
    logger.info("Movimentação #%s atualizada", mov.id)
    return mov


def delete_movimentacao(movimentacao_id: int) -> None:
    mov = get_movimentacao(movimentacao_id)
    db.session.delete(mov)
    db.session.commit()
    logger.warning("Movimentação #%s removida", movimentacao_id)


def get_movimentacao(movimentacao_id: int) -> MovimentacaoFinanceira:
    mov = db.session.get(MovimentacaoFinanceira, int(movimentacao_id))
    if mov is None:
        raise ReferenceNotFound("Movimentação não encontrada.")
    return mov


def list_movimentacoes(
    tipo: str | None = None,
    categoria: str | None = None,
    data_inicio: object = None,
    data_fim: object = None,
) -> list[MovimentacaoFinanceira]:
    """Lista movimentações (data desc, created_at desc).

    Filtros malformados são ignorados.
    """
    q = db.session.query(MovimentacaoFinanceira)
    if tipo:
        tipo_enum = _parse_tipo(tipo)
        if tipo_enum is None:
            raise ValidationFailed("Tipo deve ser receita ou despesa.")
        q = q.filter(MovimentacaoFinanceira.tipo == tipo_enum)
    if categoria:
        q = q.filter(MovimentacaoFinanceira.categoria == categoria.lower())
    for raw, op in ((data_inicio, "ge"), (data_fim, "le")):
        if raw in (None, ""):
            continue
        try:
            d = parse_data(raw)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            logger.debug("Filtro de data ignorado: %r", raw)
            continue
        if op == "ge":
            q = q.filter(MovimentacaoFinanceira.data >= d)
        else:
            q = q.filter(MovimentacaoFinanceira.data <= d)
    return q.order_by(
        MovimentacaoFinanceira.data.desc(),
        MovimentacaoFinanceira.created_at.desc(),
        MovimentacaoFinanceira.id.desc(),
    ).all()


# ----------------------------------
# Relatórios
# ----------------------------------


def _ordenar_categorias(totais: Mapping[str, Decimal]) -> list[dict]:
    """Total desc; empate pelo nome da categoria asc."""
    return [
        {"categoria": cat, "total": total}
        for cat, total in sorted(
            totais.items(), key=lambda kv: (-kv[1], kv[0])
        )
    ]


def summarize(
    movimentacoes: Iterable[Any], inicio: date, fim: date
) -> dict[str, Any]:
    """Agrega movimentações do período [inicio, fim] (inclusivo).

    Retorno:
      total_receitas, total_despesas, saldo (pode ser negativo),
      receitas_por_categoria, despesas_por_categoria
      (listas de {"categoria", "total"}).
    """
    por_tipo: dict[TipoMovimentacaoEnum, defaultdict[str, Decimal]] = {
        TipoMovimentacaoEnum.RECEITA: defaultdict(Decimal),
        TipoMovimentacaoEnum.DESPESA: defaultdict(Decimal),
    }
    for mov in movimentacoes:
        if not (inicio <= mov.data <= fim):
            continue
        tipo = _parse_tipo(mov.tipo)
        if tipo is None:
            continue
        por_tipo[tipo][mov.categoria] += to_decimal(mov.valor)

    receitas = por_tipo[TipoMovimentacaoEnum.RECEITA]
    despesas = por_tipo[TipoMovimentacaoEnum.DESPESA]
    total_receitas = sum(receitas.values(), ZERO)
    total_despesas = sum(despesas.values(), ZERO)
    return {
        "total_receitas": total_receitas,
        "total_despesas": total_despesas,
        "saldo": total_receitas - total_despesas,
        "receitas_por_categoria": _ordenar_categorias(receitas),
        "despesas_por_categoria": _ordenar_categorias(despesas),
    }


def get_resumo_financeiro(
    data_inicio: object = None,
    data_fim: object = None,
    hoje: date | None = None,
) -> dict[str, Any]:
    """Resumo financeiro do período, com o período efetivamente usado."""
    inicio, fim = resolve_periodo(data_inicio, data_fim, hoje=hoje)
    movimentacoes = (
        db.session.query(MovimentacaoFinanceira)
        .filter(
            MovimentacaoFinanceira.data >= inicio,
            MovimentacaoFinanceira.data <= fim,
        )
        .all()
    )
    resumo = summarize(movimentacoes, inicio, fim)
    resumo["periodo"] = {"inicio": inicio, "fim": fim}
    return resumo


def conciliar_agendamento(
    agendamento_id: int,
    usuario_id: int | None = None,
    data: object = None,
    hoje: date | None = None,
) -> MovimentacaoFinanceira:
    """Lança a receita de um agendamento CONCLUIDO (conciliação manual).

    Nunca é disparada automaticamente pela máquina de estados.
    """
    ag = db.session.get(Agendamento, int(agendamento_id))
    if ag is None:
        raise ReferenceNotFound(f"Agendamento {agendamento_id} não encontrado.")
    if ag.status != StatusAgendamentoEnum.CONCLUIDO:
        raise IllegalTransition(
            f"Agendamento {ag.status.value} não pode ser conciliado: "
            "somente agendamentos concluídos."
        )
    hoje = hoje or date.today()
    nome = ag.barbeiro.nome if ag.barbeiro is not None else "-"
    return record_movimentacao(
        {
            "tipo": TipoMovimentacaoEnum.RECEITA,
            "categoria": "servico",
            "descricao": f"Atendimento #{ag.id} - {nome}",
            "valor": ag.valor_total,
            "data": data or hoje,
            "agendamento_id": ag.id,
        },
        usuario_id=usuario_id,
        hoje=hoje,
    )


def calcular_comissao(receita: Decimal, percentual: object) -> Decimal:
    """Comissão = receita x percentual / 100, em centavos."""
    pct = to_decimal(percentual)
    return (to_decimal(receita) * pct / Decimal(100)).quantize(
        Decimal("0.01"), rounding=ROUND_HALF_UP
    )


def _range_datetime(inicio: date, fim: date) -> tuple[datetime, datetime]:
    return (
        datetime.combine(inicio, time.min),
        datetime.combine(fim + timedelta(days=1), time.min),
    )


def get_desempenho_barbeiros(
    data_inicio: object = None,
    data_fim: object = None,
    hoje: date | None = None,
) -> list[dict[str, Any]]:
    """Atendimentos concluídos, receita, comissão e ticket médio por barbeiro.

    Ordenado por receita desc, depois nome.
    """
    inicio, fim = resolve_periodo(data_inicio, data_fim, hoje=hoje)
    dt_ini, dt_fim = _range_datetime(inicio, fim)
    rows = (
        db.session.query(
            Agendamento.barbeiro_id,
            func.count(Agendamento.id),
            func.coalesce(func.sum(Agendamento.valor_total), 0),
        )
        .filter(
            Agendamento.status == StatusAgendamentoEnum.CONCLUIDO,
            Agendamento.data_hora >= dt_ini,
            Agendamento.data_hora < dt_fim,
        )
        .group_by(Agendamento.barbeiro_id)
        .all()
    )
    por_barbeiro = {
        bid: (int(qtd), to_decimal(total)) for bid, qtd, total in rows
    }

    resultado: list[dict[str, Any]] = []
    for barbeiro in db.session.query(Barbeiro).all():
        qtd, receita = por_barbeiro.get(barbeiro.id, (0, ZERO))
        if qtd == 0 and not barbeiro.ativo:
            continue
        receita = quantize(receita)
        percentual = (
            barbeiro.comissao
            if barbeiro.comissao is not None
            else get_setting("COMISSAO_PADRAO")
        )
        resultado.append(
            {
                "barbeiro_id": barbeiro.id,
                "nome": barbeiro.nome,
                "atendimentos": qtd,
                "receita": receita,
                "comissao": calcular_comissao(receita, percentual),
                "ticket_medio": quantize(receita / qtd) if qtd else ZERO,
            }
        )
    resultado.sort(key=lambda r: (-r["receita"], r["nome"]))
    return resultado


def get_estatisticas_agendamentos(
    data_inicio: object = None,
    data_fim: object = None,
    hoje: date | None = None,
) -> dict[str, Any]:
    """Contagem por status, taxa de cancelamento e receita de concluídos."""
    inicio, fim = resolve_periodo(data_inicio, data_fim, hoje=hoje)
    dt_ini, dt_fim = _range_datetime(inicio, fim)
    rows = (
        db.session.query(
            Agendamento.status,
            func.count(Agendamento.id),
            func.coalesce(func.sum(Agendamento.valor_total), 0),
        )
        .filter(
            Agendamento.data_hora >= dt_ini,
            Agendamento.data_hora < dt_fim,
        )
        .group_by(Agendamento.status)
        .all()
    )
    por_status = {s.value: 0 for s in StatusAgendamentoEnum}
    receita_concluidos = ZERO
    for status, qtd, total in rows:
        por_status[status.value] = int(qtd)
        if status == StatusAgendamentoEnum.CONCLUIDO:
            receita_concluidos = quantize(to_decimal(total))
    total = sum(por_status.values())
    cancelados = por_status[StatusAgendamentoEnum.CANCELADO.value]
    taxa = (
        quantize(Decimal(cancelados) * 100 / Decimal(total)) if total else ZERO
    )
    return {
        "periodo": {"inicio": inicio, "fim": fim},
        "total": total,
        "por_status": por_status,
        "taxa_cancelamento": taxa,
        "receita_concluidos": receita_concluidos,
    }
