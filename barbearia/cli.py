import click

from . import db
from .seeder import seed_all


def register_cli(app):
    @app.cli.command("init-db")
    @click.option(
        "--drop",
        is_flag=True,
        help="Remove as tabelas existentes antes de criar (destrutivo).",
    )
    def init_db(drop: bool):
        """DEV-only: cria as tabelas via create_all (sem migrations)."""
        if drop:
            click.echo("[init-db] Removendo tabelas existentes...")
            db.drop_all()
        db.create_all()
        click.echo("[init-db] Tabelas criadas.")

    @app.cli.command("seed-dev")
    def seed_dev():
        """DEV-only: cria as tabelas e popula dados de demonstração.

        Idempotente: cada etapa só insere se a tabela estiver vazia.
        """
        click.echo("[seed-dev] Criando tabelas (se necessário)...")
        db.create_all()
        try:
            seed_all()
        except Exception:
            db.session.rollback()
            click.echo("[seed-dev] ERRO durante o seed.", err=True)
            raise
        click.echo("[seed-dev] Concluído.")

    @app.cli.command("create-user")
    @click.argument("username")
    @click.option("--password", prompt=True, hide_input=True)
    @click.option(
        "--role",
        type=click.Choice(["ADMIN", "FUNCIONARIO", "BARBEIRO"]),
        default="FUNCIONARIO",
        show_default=True,
    )
    @click.option("--nome", default=None, help="Nome completo.")
    def create_user_cmd(username: str, password: str, role: str, nome):
        """Cria um usuário de acesso."""
        from .models import RoleEnum
        from .services.user_service import create_user

        try:
            user = create_user(username, password, RoleEnum(role), nome)
        except ValueError as e:
            raise click.ClickException(str(e))
        click.echo(f"[create-user] Usuário '{user.username}' criado.")
