from __future__ import annotations

from datetime import timedelta

from flask import Blueprint, abort, session
from flask_login import current_user, login_required, login_user, logout_user

from barbearia.models import RoleEnum
from barbearia.services.user_service import (
    authenticate_user,
    get_or_create_dev_user,
)
from barbearia.utils.decorators import debug_only
from barbearia.utils.respostas import json_payload, sucesso
from barbearia.utils.serializers import usuario_to_dict

auth_bp = Blueprint("auth_bp", __name__)


@auth_bp.route("/auth/login", methods=["POST"])
def login():
    dados = json_payload()
    username = (dados.get("username") or "").strip()
    password = dados.get("password") or ""

    user = authenticate_user(username, password)
    if user is None:
        return (
            {"success": False, "message": "Usuário ou senha inválidos."},
            401,
        )
    login_user(user)
    return sucesso(usuario_to_dict(user), message="Login realizado.")


@auth_bp.route("/auth/logout", methods=["POST"])
@login_required
def logout():
    logout_user()
    return sucesso(message="Logout realizado.")


@auth_bp.route("/auth/me", methods=["GET"])
@login_required
def me():
    return sucesso(usuario_to_dict(current_user))


@auth_bp.route("/__dev/login_as/<role>", methods=["GET"])  # dev-only
@debug_only
def dev_login_as(role: str):
    """Login as a specific role for local debugging and tests.

    Enabled only when app.debug or TESTING is set. Use:
      GET /__dev/login_as/admin
      GET /__dev/login_as/funcionario
      GET /__dev/login_as/barbeiro
    """
    try:
        enum = RoleEnum((role or "").strip().upper())
    except ValueError:
        abort(400)

    user = get_or_create_dev_user(enum)
    session.permanent = True
    login_user(user, remember=True, duration=timedelta(days=30))
    return sucesso(usuario_to_dict(user))
