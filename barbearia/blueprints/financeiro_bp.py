from __future__ import annotations

from flask import Blueprint, request
from flask_login import current_user

from barbearia.models import RoleEnum
from barbearia.services import financeiro_service
from barbearia.utils.decorators import admin_required, role_required
from barbearia.utils.respostas import json_payload, sucesso
from barbearia.utils.serializers import row_to_dict

financeiro_bp = Blueprint("financeiro_bp", __name__, url_prefix="/financeiro")


def _periodo() -> dict:
    return {
        "data_inicio": request.args.get("data_inicio"),
        "data_fim": request.args.get("data_fim"),
    }


@financeiro_bp.route("", methods=["GET"])
@role_required(RoleEnum.FUNCIONARIO)
def listar():
    movs = financeiro_service.list_movimentacoes(
        tipo=request.args.get("tipo"),
        categoria=request.args.get("categoria"),
        **_periodo(),
    )
    return sucesso([row_to_dict(m) for m in movs])


@financeiro_bp.route("/<int:movimentacao_id>", methods=["GET"])
@role_required(RoleEnum.FUNCIONARIO)
def detalhe(movimentacao_id: int):
    mov = financeiro_service.get_movimentacao(movimentacao_id)
    return sucesso(row_to_dict(mov))


@financeiro_bp.route("", methods=["POST"])
@role_required(RoleEnum.FUNCIONARIO)
def criar():
    mov = financeiro_service.record_movimentacao(
        json_payload(), usuario_id=getattr(current_user, "id", None)
    )
    return sucesso(
        row_to_dict(mov), message="Movimentação registrada.", status=201
    )


@financeiro_bp.route("/<int:movimentacao_id>", methods=["PUT"])
@role_required(RoleEnum.FUNCIONARIO)
def atualizar(movimentacao_id: int):
    mov = financeiro_service.update_movimentacao(
        movimentacao_id, json_payload()
    )
    return sucesso(row_to_dict(mov), message="Movimentação atualizada.")


@financeiro_bp.route("/<int:movimentacao_id>", methods=["DELETE"])
@admin_required
def excluir(movimentacao_id: int):
    financeiro_service.delete_movimentacao(movimentacao_id)
    return sucesso(message="Movimentação removida.")


@financeiro_bp.route("/resumo", methods=["GET"])
@role_required(RoleEnum.FUNCIONARIO)
def resumo():
    return sucesso(financeiro_service.get_resumo_financeiro(**_periodo()))


@financeiro_bp.route("/conciliar/<int:agendamento_id>", methods=["POST"])
@role_required(RoleEnum.FUNCIONARIO)
def conciliar(agendamento_id: int):
    dados = request.get_json(silent=True) or {}
    mov = financeiro_service.conciliar_agendamento(
        agendamento_id,
        usuario_id=getattr(current_user, "id", None),
        data=dados.get("data") if isinstance(dados, dict) else None,
    )
    return sucesso(
        row_to_dict(mov), message="Receita do atendimento lançada.", status=201
    )


@financeiro_bp.route("/desempenho", methods=["GET"])
@admin_required
def desempenho():
    return sucesso(financeiro_service.get_desempenho_barbeiros(**_periodo()))


@financeiro_bp.route("/estatisticas", methods=["GET"])
@role_required(RoleEnum.FUNCIONARIO)
def estatisticas():
    return sucesso(
        financeiro_service.get_estatisticas_agendamentos(**_periodo())
    )
