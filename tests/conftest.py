from datetime import date, timedelta
from decimal import Decimal

import pytest
from dotenv import load_dotenv

from barbearia import create_app, db
from barbearia.models import Barbeiro, Cliente, Servico


@pytest.fixture
def app():
    """Application fixture for pytest-flask 'client' support.

    Uses the in-memory SQLite database unless BARBEARIA_TEST_DB is set.
    """
    load_dotenv()
    app = create_app("testing")
    return app


@pytest.fixture
def app_ctx(app):
    """Application context bound to the same app used by the Flask client.

    Avoids creating a second Flask instance which caused teardown conflicts.
    """
    with app.app_context():
        yield


@pytest.fixture
def db_session(app_ctx):
    """Fresh schema per test (create_all / drop_all)."""
    db.create_all()
    yield db.session
    db.session.remove()
    db.drop_all()


@pytest.fixture
def amanha():
    """Dia seguinte ao de hoje: horários do expediente são sempre futuros."""
    return date.today() + timedelta(days=1)


@pytest.fixture
def cadastros(db_session):
    """Um cliente, dois barbeiros e dois serviços (corte 25,00 e barba 20,00)."""
    cliente = Cliente()
    cliente.nome = "Carlos Oliveira"
    db.session.add(cliente)

    joao = Barbeiro()
    joao.nome = "João"
    joao.comissao = Decimal("50")
    pedro = Barbeiro()
    pedro.nome = "Pedro"
    pedro.comissao = Decimal("40")
    db.session.add_all([joao, pedro])

    corte = Servico()
    corte.nome = "Corte"
    corte.preco = Decimal("25.00")
    corte.duracao = 30
    barba = Servico()
    barba.nome = "Barba"
    barba.preco = Decimal("20.00")
    barba.duracao = 20
    db.session.add_all([corte, barba])
    db.session.commit()
    return {
        "cliente": cliente,
        "joao": joao,
        "pedro": pedro,
        "corte": corte,
        "barba": barba,
    }


@pytest.fixture
def login_as(client, db_session):
    """Autentica o client com o usuário de desenvolvimento do papel."""

    def _login(role: str = "admin"):
        resp = client.get(f"/__dev/login_as/{role}")
        assert resp.status_code == 200
        return resp

    return _login
