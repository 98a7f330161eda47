from __future__ import annotations

from werkzeug.security import check_password_hash, generate_password_hash

from barbearia import db
from barbearia.models import RoleEnum, Usuario
from barbearia.utils.sanitization import sanitizar_input


def authenticate_user(username: str, password: str) -> Usuario | None:
    """Authenticate a user by username and password.

    Returns the Usuario if credentials are valid and the user is active,
    otherwise returns None.
    """
    user = Usuario.query.filter_by(username=username).first()
    if not user:
        return None
    if not getattr(user, "is_active", False):
        return None
    if not check_password_hash(user.password_hash, password):
        return None
    return user


def create_user(
    username: str,
    password: str,
    role: RoleEnum,
    nome_completo: str | None = None,
) -> Usuario:
    """Cria um usuário com senha em hash.

    :raises ValueError: username vazio, senha curta ou username em uso
    """
    username = sanitizar_input(username) or ""
    if not username:
        raise ValueError("Username é obrigatório.")
    if not password or len(password) < 6:
        raise ValueError("Senha deve ter ao menos 6 caracteres.")
    if Usuario.query.filter_by(username=username).first() is not None:
        raise ValueError(f"Username '{username}' já está em uso.")

    user = Usuario()
    user.username = username
    user.role = role
    user.nome_completo = sanitizar_input(nome_completo) or username
    user.password_hash = generate_password_hash(password)
    db.session.add(user)
    db.session.commit()
    return user


def get_or_create_dev_user(role: RoleEnum) -> Usuario:
    """Return a lightweight dev user for the given role, creating if needed.

    Dev-only helper: username ``dev_<role>``, password ``devpass``.
    """
    username = f"dev_{role.value.lower()}"
    user = Usuario.query.filter_by(username=username).first()
    if user:
        return user
    return create_user(
        username, "devpass", role, nome_completo=f"Dev {role.value.title()}"
    )
