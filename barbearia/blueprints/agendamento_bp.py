from __future__ import annotations

from flask import Blueprint, request
from flask_login import current_user

from barbearia.errors import ValidationFailed
from barbearia.models import RoleEnum
from barbearia.services import agendamento_service
from barbearia.services.agenda_service import parse_data
from barbearia.utils.decorators import admin_required, role_required
from barbearia.utils.respostas import json_payload, query_int, sucesso
from barbearia.utils.serializers import agendamento_to_dict

agendamento_bp = Blueprint(
    "agendamento_bp", __name__, url_prefix="/agendamentos"
)

_EQUIPE = (RoleEnum.FUNCIONARIO, RoleEnum.BARBEIRO)


def _dump(ag, detalhado: bool = False) -> dict:
    duracao = agendamento_service.get_duracao_total(ag) if detalhado else None
    return agendamento_to_dict(ag, duracao_total=duracao)


@agendamento_bp.route("", methods=["GET"])
@role_required(*_EQUIPE)
def listar():
    ags = agendamento_service.list_agendamentos(
        status=request.args.get("status"),
        data_inicio=request.args.get("data_inicio"),
        data_fim=request.args.get("data_fim"),
        barbeiro_id=query_int("barbeiro_id"),
        cliente_id=query_int("cliente_id"),
    )
    return sucesso([_dump(ag) for ag in ags])


@agendamento_bp.route("/<int:agendamento_id>", methods=["GET"])
@role_required(*_EQUIPE)
def detalhe(agendamento_id: int):
    ag = agendamento_service.get_agendamento(agendamento_id)
    return sucesso(_dump(ag, detalhado=True))


@agendamento_bp.route("", methods=["POST"])
@role_required(*_EQUIPE)
def criar():
    ag = agendamento_service.propose_agendamento(
        json_payload(), usuario_id=getattr(current_user, "id", None)
    )
    return sucesso(
        _dump(ag, detalhado=True),
        message="Agendamento criado com sucesso.",
        status=201,
    )


@agendamento_bp.route("/<int:agendamento_id>", methods=["PUT", "PATCH"])
@role_required(*_EQUIPE)
def atualizar(agendamento_id: int):
    ag = agendamento_service.edit_agendamento(agendamento_id, json_payload())
    return sucesso(
        _dump(ag, detalhado=True), message="Agendamento atualizado."
    )


@agendamento_bp.route("/<int:agendamento_id>", methods=["DELETE"])
@admin_required
def excluir(agendamento_id: int):
    agendamento_service.delete_agendamento(agendamento_id)
    return sucesso(message="Agendamento excluído.")


@agendamento_bp.route("/<int:agendamento_id>/status", methods=["POST"])
@role_required(*_EQUIPE)
def alterar_status(agendamento_id: int):
    alvo = json_payload().get("status")
    if not alvo:
        raise ValidationFailed("Status é obrigatório.")
    ag = agendamento_service.transition_agendamento(
        agendamento_id, alvo, usuario_id=getattr(current_user, "id", None)
    )
    return sucesso(_dump(ag), message="Status atualizado.")


@agendamento_bp.route("/<int:agendamento_id>/cancelar", methods=["PATCH"])
@role_required(*_EQUIPE)
def cancelar(agendamento_id: int):
    ag = agendamento_service.cancelar_agendamento(
        agendamento_id, usuario_id=getattr(current_user, "id", None)
    )
    return sucesso(_dump(ag), message="Agendamento cancelado.")


@agendamento_bp.route("/disponibilidade", methods=["GET"])
@role_required(*_EQUIPE)
def disponibilidade():
    """Grade de horários do barbeiro: ?barbeiro_id=1&data=2024-03-10."""
    barbeiro_id = query_int("barbeiro_id")
    if barbeiro_id is None:
        raise ValidationFailed("Parâmetro 'barbeiro_id' é obrigatório.")
    try:
        dia = parse_data(request.args.get("data") or "")
    except ValueError:
        raise ValidationFailed("Parâmetro 'data' deve ser YYYY-MM-DD.")
    horarios = agendamento_service.get_horarios_disponiveis(barbeiro_id, dia)
    return sucesso(horarios)
