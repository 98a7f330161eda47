from __future__ import annotations

from barbearia import db
from barbearia.models import (
    Agendamento,
    MovimentacaoFinanceira,
    Servico,
    Usuario,
)


def test_seed_dev_e_idempotente(app, app_ctx):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["seed-dev"])
    assert result.exit_code == 0, result.output
    assert db.session.query(Servico).count() == 5
    assert db.session.query(Agendamento).count() == 4
    assert db.session.query(MovimentacaoFinanceira).count() == 2

    result = runner.invoke(args=["seed-dev"])
    assert result.exit_code == 0
    assert db.session.query(Agendamento).count() == 4


def test_init_db_e_create_user(app, app_ctx):
    runner = app.test_cli_runner()
    assert runner.invoke(args=["init-db"]).exit_code == 0
    result = runner.invoke(
        args=["create-user", "gerente", "--password", "segredo1",
              "--role", "ADMIN"]
    )
    assert result.exit_code == 0, result.output
    user = db.session.query(Usuario).filter_by(username="gerente").one()
    assert user.role.value == "ADMIN"

    result = runner.invoke(
        args=["create-user", "gerente", "--password", "segredo1"]
    )
    assert result.exit_code != 0
    assert "já está em uso" in result.output
