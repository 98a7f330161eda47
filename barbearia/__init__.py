import logging
import os

from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_login import LoginManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from werkzeug.exceptions import HTTPException

# Extensões globais
db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()


def _configure_logging(app: Flask) -> None:
    level_name = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)
    app.logger.setLevel(level)
    # Loggers dos services (barbearia.services.*) herdam deste
    logging.getLogger(__name__).setLevel(level)
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        )


def create_app(_config_name: str | None = None) -> Flask:
    """Application Factory.

    Inicializa Flask, SQLAlchemy, Migrate e Login, registra blueprints,
    comandos de CLI e os handlers de erro JSON. Com ``"testing"`` usa o
    banco de ``BARBEARIA_TEST_DB`` (padrão: SQLite em memória).
    """
    load_dotenv()
    app = Flask(__name__, instance_relative_config=True)

    from .config import Config

    app.config.from_object(Config)
    if not app.config.get("SECRET_KEY"):
        # Fallback apenas para desenvolvimento/testes
        app.config["SECRET_KEY"] = "dev-secret-key"

    if _config_name == "testing":
        app.config["TESTING"] = True
        # Rotas /__dev/* ficam disponíveis nos testes
        app.debug = True
        app.config["SQLALCHEMY_DATABASE_URI"] = os.environ.get(
            "BARBEARIA_TEST_DB", "sqlite://"
        )
        app.config["SQLALCHEMY_ENGINE_OPTIONS"] = {}

    _configure_logging(app)

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    from . import models  # noqa: F401  (registra as tabelas no metadata)
    from .cli import register_cli

    register_cli(app)

    # Registro de Blueprints
    from .blueprints.agendamento_bp import agendamento_bp
    from .blueprints.auth_bp import auth_bp
    from .blueprints.cadastro_bp import cadastro_bp
    from .blueprints.financeiro_bp import financeiro_bp

    for bp in (auth_bp, agendamento_bp, financeiro_bp, cadastro_bp):
        app.register_blueprint(bp)

    from .errors import AgendaError

    @app.errorhandler(AgendaError)
    def handle_agenda_error(e: AgendaError):
        return jsonify(e.to_dict()), e.http_status

    # Handler global de erros
    @app.errorhandler(Exception)
    def handle_global_exception(e):
        # Preserve HTTP errors with their original status codes
        if isinstance(e, HTTPException):
            return e
        db.session.rollback()
        app.logger.exception("Erro não tratado: %s", e)
        return (
            jsonify({"success": False, "message": "Erro interno do servidor"}),
            500,
        )

    return app


@login_manager.user_loader
def load_user(user_id: str):  # pragma: no cover - thin wrapper
    # Local import to avoid circulars at import time
    from .models import Usuario

    try:
        return db.session.get(Usuario, int(user_id))
    except ValueError:
        return None


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({"success": False, "message": "Não autenticado."}), 401
