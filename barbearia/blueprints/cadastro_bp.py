from __future__ import annotations

from flask import Blueprint, request

from barbearia.models import RoleEnum
from barbearia.services import cadastro_service
from barbearia.utils.decorators import admin_required, role_required
from barbearia.utils.respostas import json_payload, sucesso
from barbearia.utils.serializers import row_to_dict

cadastro_bp = Blueprint("cadastro_bp", __name__)

_EQUIPE = (RoleEnum.FUNCIONARIO, RoleEnum.BARBEIRO)


@cadastro_bp.route("/clientes", methods=["GET"])
@role_required(*_EQUIPE)
def listar_clientes():
    clientes = cadastro_service.list_clientes(busca=request.args.get("q"))
    return sucesso([row_to_dict(c) for c in clientes])


@cadastro_bp.route("/clientes/<int:cliente_id>", methods=["GET"])
@role_required(*_EQUIPE)
def detalhe_cliente(cliente_id: int):
    return sucesso(row_to_dict(cadastro_service.get_cliente(cliente_id)))


@cadastro_bp.route("/clientes", methods=["POST"])
@role_required(*_EQUIPE)
def criar_cliente():
    c = cadastro_service.create_cliente(json_payload())
    return sucesso(row_to_dict(c), message="Cliente cadastrado.", status=201)


@cadastro_bp.route("/clientes/<int:cliente_id>", methods=["PUT"])
@role_required(RoleEnum.FUNCIONARIO)
def editar_cliente(cliente_id: int):
    c = cadastro_service.update_cliente(cliente_id, json_payload())
    return sucesso(row_to_dict(c), message="Cliente atualizado.")


@cadastro_bp.route("/clientes/<int:cliente_id>", methods=["DELETE"])
@admin_required
def desativar_cliente(cliente_id: int):
    cadastro_service.desativar_cliente(cliente_id)
    return sucesso(None, message="Cliente desativado.")


@cadastro_bp.route("/barbeiros", methods=["GET"])
@role_required(*_EQUIPE)
def listar_barbeiros():
    barbeiros = cadastro_service.list_barbeiros()
    return sucesso([row_to_dict(b) for b in barbeiros])


@cadastro_bp.route("/barbeiros/<int:barbeiro_id>", methods=["GET"])
@role_required(*_EQUIPE)
def detalhe_barbeiro(barbeiro_id: int):
    return sucesso(row_to_dict(cadastro_service.get_barbeiro(barbeiro_id)))


@cadastro_bp.route("/barbeiros", methods=["POST"])
@admin_required
def criar_barbeiro():
    b = cadastro_service.create_barbeiro(json_payload())
    return sucesso(row_to_dict(b), message="Barbeiro cadastrado.", status=201)


@cadastro_bp.route("/barbeiros/<int:barbeiro_id>", methods=["PUT"])
@admin_required
def editar_barbeiro(barbeiro_id: int):
    b = cadastro_service.update_barbeiro(barbeiro_id, json_payload())
    return sucesso(row_to_dict(b), message="Barbeiro atualizado.")


@cadastro_bp.route("/barbeiros/<int:barbeiro_id>", methods=["DELETE"])
@admin_required
def desativar_barbeiro(barbeiro_id: int):
    cadastro_service.desativar_barbeiro(barbeiro_id)
    return sucesso(None, message="Barbeiro desativado.")


@cadastro_bp.route("/servicos", methods=["GET"])
@role_required(*_EQUIPE)
def listar_servicos():
    servicos = cadastro_service.list_servicos()
    return sucesso([row_to_dict(s) for s in servicos])


@cadastro_bp.route("/servicos/<int:servico_id>", methods=["GET"])
@role_required(*_EQUIPE)
def detalhe_servico(servico_id: int):
    return sucesso(row_to_dict(cadastro_service.get_servico(servico_id)))


@cadastro_bp.route("/servicos", methods=["POST"])
@admin_required
def criar_servico():
    s = cadastro_service.create_servico(json_payload())
    return sucesso(row_to_dict(s), message="Serviço cadastrado.", status=201)


@cadastro_bp.route("/servicos/<int:servico_id>", methods=["PUT"])
@admin_required
def editar_servico(servico_id: int):
    s = cadastro_service.update_servico(servico_id, json_payload())
    return sucesso(row_to_dict(s), message="Serviço atualizado.")


@cadastro_bp.route("/servicos/<int:servico_id>", methods=["DELETE"])
@admin_required
def desativar_servico(servico_id: int):
    cadastro_service.desativar_servico(servico_id)
    return sucesso(None, message="Serviço desativado.")
