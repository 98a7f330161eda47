from __future__ import annotations

from barbearia.models import RoleEnum
from barbearia.services.user_service import create_user


def test_login_e_logout(client, db_session):
    create_user("recepcao", "segredo1", RoleEnum.FUNCIONARIO, "Recepção")

    resp = client.post(
        "/auth/login", json={"username": "recepcao", "password": "errada"}
    )
    assert resp.status_code == 401

    resp = client.post(
        "/auth/login", json={"username": "recepcao", "password": "segredo1"}
    )
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["role"] == "FUNCIONARIO"
    assert "password_hash" not in data

    assert client.get("/auth/me").get_json()["data"]["username"] == "recepcao"
    assert client.post("/auth/logout").status_code == 200
    assert client.get("/auth/me").status_code == 401


def test_dev_login_as_papel_invalido(client, db_session):
    assert client.get("/__dev/login_as/gerente").status_code == 400


def test_dev_login_as_fora_de_debug(app, client, db_session):
    app.debug = False
    app.config["TESTING"] = False
    assert client.get("/__dev/login_as/admin").status_code == 404
