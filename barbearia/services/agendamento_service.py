from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date as date_cls
from datetime import datetime, time, timedelta
from typing import Any

from barbearia import db
from barbearia.errors import (
    AgendaError,
    ConflictDetected,
    IllegalTransition,
    ReferenceNotFound,
    ValidationFailed,
)
from barbearia.models import (
    Agendamento,
    Barbeiro,
    Cliente,
    FormaPagamentoEnum,
    StatusAgendamentoEnum,
)
from barbearia.utils.sanitization import sanitizar_input

from . import conflito_service, precificacao_service, status_service
from .agenda_service import (
    format_dt_iso,
    gerar_grade_horarios,
    parse_data,
    parse_data_hora,
)
from .validacao_service import get_setting, to_decimal, validar_agendamento

logger = logging.getLogger(__name__)

CAMPOS_EDITAVEIS = (
    "cliente_id",
    "barbeiro_id",
    "data_hora",
    "servico_ids",
    "valor_total",
    "observacoes",
    "forma_pagamento",
)


# ----------------------------------
# Helpers
# ----------------------------------


def _parse_id(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return parsed if parsed > 0 else None


def normalizar_candidato(
    dados: Mapping[str, Any],
) -> tuple[dict[str, Any], list[str]]:
    """Converte o payload bruto em candidato tipado.

    Retorna (candidato, motivos). Problemas de formato viram motivos de
    rejeição, somados depois aos de ``validar_agendamento``.
    """
    motivos: list[str] = []
    candidato: dict[str, Any] = {}

    cliente_id = _parse_id(dados.get("cliente_id"))
    if cliente_id is None:
        motivos.append("Cliente ID deve ser um número válido.")
    candidato["cliente_id"] = cliente_id

    barbeiro_id = _parse_id(dados.get("barbeiro_id"))
    if barbeiro_id is None:
        motivos.append("Barbeiro ID deve ser um número válido.")
    candidato["barbeiro_id"] = barbeiro_id

    raw_ids = dados.get("servico_ids")
    if isinstance(raw_ids, (list, tuple)):
        servico_ids = [_parse_id(sid) for sid in raw_ids]
        if any(sid is None for sid in servico_ids):
            motivos.append("IDs de serviços devem ser números válidos.")
            servico_ids = [sid for sid in servico_ids if sid is not None]
        candidato["servico_ids"] = servico_ids
    else:
        candidato["servico_ids"] = raw_ids

    try:
        candidato["data_hora"] = parse_data_hora(dados.get("data_hora"))
    except (TypeError, ValueError):
        # validar_agendamento reporta MSG_DATA_INVALIDA
        candidato["data_hora"] = None

    valor = dados.get("valor_total")
    candidato["valor_total"] = None if valor in (None, "") else valor

    fp = dados.get("forma_pagamento")
    candidato["forma_pagamento"] = None if fp in (None, "") else fp

    obs = sanitizar_input(dados.get("observacoes"))
    candidato["observacoes"] = obs if isinstance(obs, str) and obs else None
    return candidato, motivos


def _forma_pagamento(value: object) -> FormaPagamentoEnum | None:
    if value is None:
        return None
    if isinstance(value, FormaPagamentoEnum):
        return value
    return FormaPagamentoEnum(str(value).upper())


def _validar_referencias(
    candidato: Mapping[str, Any], atual: Mapping[str, Any] | None = None
) -> Barbeiro:
    """Confere cliente e barbeiro; bloqueia a linha do barbeiro.

    O lock (SELECT ... FOR UPDATE) serializa o ciclo verificar-gravar por
    barbeiro até o commit/rollback da transação corrente. Na edição,
    referências mantidas (``atual``) só precisam existir.
    """

    def exige_ativo(campo: str) -> bool:
        return atual is None or candidato[campo] != atual[campo]

    cliente = db.session.get(Cliente, candidato["cliente_id"])
    if cliente is None or (not cliente.ativo and exige_ativo("cliente_id")):
        raise ReferenceNotFound(
            f"Cliente id={candidato['cliente_id']} não encontrado."
        )
    barbeiro = (
        db.session.query(Barbeiro)
        .filter(Barbeiro.id == candidato["barbeiro_id"])
        .with_for_update()
        .one_or_none()
    )
    if barbeiro is None or (
        not barbeiro.ativo and exige_ativo("barbeiro_id")
    ):
        raise ReferenceNotFound(
            f"Barbeiro id={candidato['barbeiro_id']} não encontrado."
        )
    return barbeiro


def _checar_conflito(
    candidato: Mapping[str, Any], ignorar_id: int | None = None
) -> None:
    existentes = conflito_service.get_agendamentos_ativos_barbeiro(
        candidato["barbeiro_id"], proximo_de=candidato["data_hora"]
    )
    conflitos = conflito_service.find_conflitos(
        candidato["data_hora"], existentes, ignorar_id=ignorar_id
    )
    if conflitos:
        logger.warning(
            "Conflito de horário: barbeiro=%s data_hora=%s colide com %s",
            candidato["barbeiro_id"],
            format_dt_iso(candidato["data_hora"]),
            [c.id for c in conflitos],
        )
        raise ConflictDetected(conflito_service.MSG_CONFLITO)


def _preparar(
    candidato: dict[str, Any],
    motivos: list[str],
    agora: datetime | None,
    ignorar_id: int | None = None,
    atual: Mapping[str, Any] | None = None,
) -> None:
    """Pipeline compartilhado por criação e edição.

    Validação -> referências (com lock) -> conflito. Levanta AgendaError.
    """
    motivos = motivos + validar_agendamento(candidato, agora=agora)
    if motivos:
        raise ValidationFailed(motivos)
    _validar_referencias(candidato, atual)
    _checar_conflito(candidato, ignorar_id=ignorar_id)


def _get_or_404(agendamento_id: int) -> Agendamento:
    ag = db.session.get(Agendamento, int(agendamento_id))
    if ag is None:
        raise ReferenceNotFound(f"Agendamento {agendamento_id} não encontrado")
    return ag


# ----------------------------------
# Operações
# ----------------------------------


def propose_agendamento(
    dados: Mapping[str, Any],
    usuario_id: int | None = None,
    agora: datetime | None = None,
) -> Agendamento:
    """Valida, checa conflito, precifica e grava um novo agendamento.

    O agendamento nasce AGENDADO. ``valor_total`` informado pelo chamador é
    validado por faixa e mantido; ausente, usa a soma dos serviços.

    :raises ValidationFailed: com todos os motivos de rejeição
    :raises ReferenceNotFound: cliente, barbeiro ou serviço inexistente
    :raises ConflictDetected: barbeiro já ocupado na janela de conflito
    """
    candidato, motivos = normalizar_candidato(dados)
    try:
        _preparar(candidato, motivos, agora)
        catalogo = precificacao_service.get_catalogo(candidato["servico_ids"])
        calculado = precificacao_service.compute_total(
            candidato["servico_ids"], catalogo
        )
        if candidato["valor_total"] is not None:
            valor_total = precificacao_service.quantize(
                to_decimal(candidato["valor_total"])
            )
        else:
            valor_total = calculado

        ag = Agendamento()
        ag.cliente_id = candidato["cliente_id"]
        ag.barbeiro_id = candidato["barbeiro_id"]
        ag.data_hora = candidato["data_hora"]
        ag.servico_ids = list(candidato["servico_ids"])
        ag.valor_total = valor_total
        ag.status = StatusAgendamentoEnum.AGENDADO
        ag.observacoes = candidato["observacoes"]
        ag.forma_pagamento = _forma_pagamento(candidato["forma_pagamento"])
        db.session.add(ag)
        db.session.commit()
    except AgendaError as exc:
        db.session.rollback()
        logger.info("Agendamento rejeitado: %s", exc.reasons)
        raise

    if valor_total != calculado:
        logger.info(
            "Agendamento #%s gravado com valor informado %s (serviços: %s)",
            ag.id,
            valor_total,
            calculado,
        )
    logger.info(
        "Agendamento #%s criado: barbeiro=%s cliente=%s data_hora=%s "
        "usuario=%s",
        ag.id,
        ag.barbeiro_id,
        ag.cliente_id,
        format_dt_iso(ag.data_hora),
        usuario_id,
    )
    return ag


def edit_agendamento(
    agendamento_id: int,
    dados: Mapping[str, Any],
    agora: datetime | None = None,
) -> Agendamento:
    """Edita os campos do agendamento reaplicando validação e conflito.

    O próprio agendamento é excluído do conjunto de conflito. Status não é
    editável aqui (usar ``transition_agendamento``). Se ``servico_ids``
    mudar e ``valor_total`` não vier, o valor é recalculado; caso
    contrário o valor congelado é mantido.
    """
    ag = _get_or_404(agendamento_id)
    if status_service.is_terminal(ag.status):
        raise IllegalTransition(
            f"Agendamento {ag.status.value} não pode ser editado."
        )

    atual = {
        "cliente_id": ag.cliente_id,
        "barbeiro_id": ag.barbeiro_id,
        "data_hora": ag.data_hora,
        "servico_ids": list(ag.servico_ids or []),
        "valor_total": None,
        "observacoes": ag.observacoes,
        "forma_pagamento": ag.forma_pagamento,
    }
    mesclado = dict(atual)
    mesclado.update({k: dados[k] for k in CAMPOS_EDITAVEIS if k in dados})

    candidato, motivos = normalizar_candidato(mesclado)
    try:
        _preparar(candidato, motivos, agora, ignorar_id=ag.id, atual=atual)
        servicos_mudaram = candidato["servico_ids"] != atual["servico_ids"]
        calculado = None
        if servicos_mudaram:
            # Serviços mantidos não são reavaliados (valor congelado)
            catalogo = precificacao_service.get_catalogo(
                candidato["servico_ids"]
            )
            calculado = precificacao_service.compute_total(
                candidato["servico_ids"], catalogo
            )
        if candidato["valor_total"] is not None:
            ag.valor_total = precificacao_service.quantize(
                to_decimal(candidato["valor_total"])
            )
        elif calculado is not None:
            ag.valor_total = calculado

        ag.cliente_id = candidato["cliente_id"]
        ag.barbeiro_id = candidato["barbeiro_id"]
        ag.data_hora = candidato["data_hora"]
        ag.servico_ids = list(candidato["servico_ids"])
        ag.observacoes = candidato["observacoes"]
        ag.forma_pagamento = _forma_pagamento(candidato["forma_pagamento"])
        db.session.add(ag)
        db.session.commit()
    except AgendaError as exc:
        db.session.rollback()
        logger.info(
            "Edição do agendamento #%s rejeitada: %s", ag.id, exc.reasons
        )
        raise
    logger.info("Agendamento #%s atualizado", ag.id)
    return ag


def transition_agendamento(
    agendamento_id: int,
    alvo: StatusAgendamentoEnum | str,
    usuario_id: int | None = None,
) -> Agendamento:
    """Aplica uma transição da máquina de estados.

    :raises ReferenceNotFound: se o agendamento não existir
    :raises IllegalTransition: transição inválida ou estado terminal
    """
    ag = _get_or_404(agendamento_id)
    anterior = ag.status
    novo = status_service.validar_transicao(anterior, alvo)
    ag.status = novo
    db.session.add(ag)
    db.session.commit()
    logger.info(
        "Agendamento #%s: %s -> %s (usuario=%s)",
        ag.id,
        anterior.value,
        novo.value,
        usuario_id,
    )
    return ag


def confirmar_agendamento(agendamento_id: int, usuario_id=None) -> Agendamento:
    return transition_agendamento(
        agendamento_id, StatusAgendamentoEnum.CONFIRMADO, usuario_id
    )


def iniciar_atendimento(agendamento_id: int, usuario_id=None) -> Agendamento:
    return transition_agendamento(
        agendamento_id, StatusAgendamentoEnum.EM_ANDAMENTO, usuario_id
    )


def finalizar_atendimento(agendamento_id: int, usuario_id=None) -> Agendamento:
    return transition_agendamento(
        agendamento_id, StatusAgendamentoEnum.CONCLUIDO, usuario_id
    )


def cancelar_agendamento(agendamento_id: int, usuario_id=None) -> Agendamento:
    return transition_agendamento(
        agendamento_id, StatusAgendamentoEnum.CANCELADO, usuario_id
    )


def marcar_nao_compareceu(agendamento_id: int, usuario_id=None) -> Agendamento:
    return transition_agendamento(
        agendamento_id, StatusAgendamentoEnum.NAO_COMPARECEU, usuario_id
    )


def delete_agendamento(agendamento_id: int) -> None:
    """Remoção física (administrativa), fora da máquina de estados.

    Movimentações vinculadas permanecem, com ``agendamento_id`` anulado.
    """
    ag = _get_or_404(agendamento_id)
    db.session.delete(ag)
    db.session.commit()
    logger.warning("Agendamento #%s excluído", agendamento_id)


# ----------------------------------
# Consultas
# ----------------------------------


def get_agendamento(agendamento_id: int) -> Agendamento:
    return _get_or_404(agendamento_id)


def list_agendamentos(
    status: str | None = None,
    data_inicio: str | date_cls | None = None,
    data_fim: str | date_cls | None = None,
    barbeiro_id: int | None = None,
    cliente_id: int | None = None,
) -> list[Agendamento]:
    """Lista agendamentos por filtros opcionais, ordenados por data_hora.

    Datas malformadas são ignoradas (o filtro correspondente não é
    aplicado), em vez de abortar a consulta.
    """
    q = db.session.query(Agendamento)
    if status:
        try:
            st = status_service.parse_status(status)
        except IllegalTransition:
            raise ValidationFailed("Status inválido.")
        q = q.filter(Agendamento.status == st)
    if data_inicio:
        try:
            ini = parse_data(data_inicio)
            q = q.filter(
                Agendamento.data_hora >= datetime.combine(ini, time.min)
            )
        except ValueError:
            logger.debug("data_inicio ignorada: %r", data_inicio)
    if data_fim:
        try:
            fim = parse_data(data_fim) + timedelta(days=1)
            q = q.filter(
                Agendamento.data_hora < datetime.combine(fim, time.min)
            )
        except ValueError:
            logger.debug("data_fim ignorada: %r", data_fim)
    if barbeiro_id is not None:
        q = q.filter(Agendamento.barbeiro_id == int(barbeiro_id))
    if cliente_id is not None:
        q = q.filter(Agendamento.cliente_id == int(cliente_id))
    return q.order_by(Agendamento.data_hora.asc()).all()


def get_agendamentos_do_dia(data: date_cls | None = None) -> list[Agendamento]:
    """Retorna os agendamentos cujo data_hora cai no dia informado.

    Se ``data`` for None, usa a data de hoje (horário local).
    """
    if data is None:
        data = date_cls.today()
    start_dt = datetime.combine(data, time.min)
    end_exclusive = datetime.combine(data + timedelta(days=1), time.min)

    # BETWEEN start_dt (inclusive) e next day (exclusive)
    return (
        Agendamento.query.filter(
            Agendamento.data_hora >= start_dt,
            Agendamento.data_hora < end_exclusive,
        )
        .order_by(Agendamento.data_hora.asc())
        .all()
    )


def get_horarios_disponiveis(
    barbeiro_id: int,
    dia: date_cls,
    agora: datetime | None = None,
) -> list[dict[str, Any]]:
    """Grade de 30 em 30 minutos do expediente com disponibilidade.

    Um horário está disponível quando é futuro e não conflita com nenhum
    agendamento ativo do barbeiro segundo a janela de conflito.
    """
    if db.session.get(Barbeiro, int(barbeiro_id)) is None:
        raise ReferenceNotFound(f"Barbeiro id={barbeiro_id} não encontrado.")
    agora = agora or datetime.now()
    grade = gerar_grade_horarios(
        dia,
        abertura=int(get_setting("HORARIO_ABERTURA")),
        fechamento=int(get_setting("HORARIO_FECHAMENTO")),
    )
    existentes = list_agendamentos(
        data_inicio=dia, data_fim=dia, barbeiro_id=barbeiro_id
    )
    return [
        {
            "horario": format_dt_iso(slot),
            "disponivel": slot > agora
            and not conflito_service.has_conflito(slot, existentes),
        }
        for slot in grade
    ]


def get_duracao_total(ag: Agendamento) -> int | None:
    """Duração derivada dos serviços (None se algum serviço sumiu)."""
    catalogo = precificacao_service.get_catalogo(
        ag.servico_ids or [], apenas_ativos=False
    )
    try:
        return precificacao_service.compute_duracao(ag.servico_ids, catalogo)
    except ReferenceNotFound:
        return None

