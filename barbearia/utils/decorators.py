from __future__ import annotations

from functools import wraps
from typing import Any, Callable

from flask import abort, current_app, jsonify
from flask_login import current_user

from barbearia.models import RoleEnum


def debug_only(func: Callable[..., Any]) -> Callable[..., Any]:
    """Rotas de desenvolvimento: só com app.debug ou TESTING."""
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        if not (current_app.debug or current_app.config.get("TESTING")):
            abort(404)
        return func(*args, **kwargs)
    return wrapper


def role_required(*roles: RoleEnum) -> Callable[..., Any]:
    """Restrict a route to authenticated users with one of ``roles``.

    - Anonymous users get 401 (JSON body, same shape as other errors).
    - Authenticated users with another role get 403.
    - ADMIN is always allowed.
    """
    allowed = set(roles) | {RoleEnum.ADMIN}

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            if not getattr(current_user, "is_authenticated", False):
                return (
                    jsonify(
                        {"success": False, "message": "Não autenticado."}
                    ),
                    401,
                )
            if getattr(current_user, "role", None) not in allowed:
                return (
                    jsonify({"success": False, "message": "Acesso negado."}),
                    403,
                )
            return func(*args, **kwargs)
        return wrapper
    return decorator


def admin_required(func: Callable[..., Any]) -> Callable[..., Any]:
    """Atalho para rotas exclusivas de administradores."""
    return role_required(RoleEnum.ADMIN)(func)
