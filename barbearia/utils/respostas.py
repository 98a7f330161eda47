"""Envelope JSON comum às rotas: {"success": ..., "data"/"message"}."""
from __future__ import annotations

from typing import Any

from flask import jsonify, request

from barbearia.errors import ValidationFailed

from .serializers import jsonify_value


def sucesso(data: Any = None, message: str | None = None, status: int = 200):
    body: dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = jsonify_value(data)
    if message:
        body["message"] = message
    return jsonify(body), status


def json_payload() -> dict[str, Any]:
    """Corpo JSON da requisição; precisa ser um objeto."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationFailed("Corpo da requisição deve ser um objeto JSON.")
    return data


def query_int(name: str) -> int | None:
    raw = request.args.get(name)
    if raw in (None, ""):
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationFailed(f"Parâmetro '{name}' deve ser numérico.")
