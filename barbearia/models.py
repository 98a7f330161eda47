from __future__ import annotations

from enum import Enum
from datetime import datetime, timezone

"""Model definitions for Barbearia.

Note: We intentionally do not use Flask-Login's UserMixin here to avoid a
name collision with the soft-delete column `is_active`. Flask-Login only
requires the User class to expose `is_authenticated`, `is_active`,
`is_anonymous`, and `get_id` attributes at runtime.
"""

from . import db


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ----------------------------------
# Enums
# ----------------------------------


class RoleEnum(str, Enum):
    ADMIN = "ADMIN"
    FUNCIONARIO = "FUNCIONARIO"
    BARBEIRO = "BARBEIRO"


# Estados do Agendamento (vocabulário único para todo o sistema)
class StatusAgendamentoEnum(str, Enum):
    AGENDADO = "AGENDADO"
    CONFIRMADO = "CONFIRMADO"
    EM_ANDAMENTO = "EM_ANDAMENTO"
    CONCLUIDO = "CONCLUIDO"
    CANCELADO = "CANCELADO"
    NAO_COMPARECEU = "NAO_COMPARECEU"


class FormaPagamentoEnum(str, Enum):
    DINHEIRO = "DINHEIRO"
    CARTAO_DEBITO = "CARTAO_DEBITO"
    CARTAO_CREDITO = "CARTAO_CREDITO"
    PIX = "PIX"
    TRANSFERENCIA = "TRANSFERENCIA"


class TipoMovimentacaoEnum(str, Enum):
    RECEITA = "RECEITA"
    DESPESA = "DESPESA"


# ----------------------------------
# Models
# ----------------------------------


class Usuario(db.Model):
    __tablename__ = "usuarios"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.Enum(RoleEnum, name="role_enum"), nullable=False)
    nome_completo = db.Column(db.String(200), nullable=True)

    # Soft-delete: usuários desativados não autenticam
    is_active = db.Column(
        db.Boolean,
        nullable=False,
        default=True,
        server_default=db.true(),
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Usuario {self.username} ({self.role})>"

    # Flask-Login protocol without inheriting UserMixin
    @property
    def is_authenticated(self) -> bool:  # pragma: no cover - trivial
        return True

    @property
    def is_anonymous(self) -> bool:  # pragma: no cover - trivial
        return False

    def get_id(self) -> str:  # pragma: no cover - trivial
        return str(self.id)


class Cliente(db.Model):
    __tablename__ = "clientes"

    id = db.Column(db.Integer, primary_key=True)
    nome = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), nullable=True)
    telefone = db.Column(db.String(20), nullable=True)
    cpf = db.Column(
        db.String(14), unique=True, nullable=True
    )  # formato: 000.000.000-00
    data_nascimento = db.Column(db.Date, nullable=True)
    observacoes = db.Column(db.Text, nullable=True)
    ativo = db.Column(
        db.Boolean, nullable=False, default=True, server_default=db.true()
    )
    created_at = db.Column(
        db.DateTime(timezone=True), nullable=False, default=_utcnow
    )

    agendamentos = db.relationship("Agendamento", back_populates="cliente")

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Cliente {self.nome}>"


class Barbeiro(db.Model):
    __tablename__ = "barbeiros"

    id = db.Column(db.Integer, primary_key=True)
    nome = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), nullable=True)
    telefone = db.Column(db.String(20), nullable=True)
    cpf = db.Column(db.String(14), unique=True, nullable=True)
    # Lista de especialidades (ex.: ["Corte", "Barba"])
    especialidades = db.Column(db.JSON, nullable=False, default=list)
    # Percentual de comissão sobre serviços concluídos (0-100)
    comissao = db.Column(
        db.Numeric(5, 2),
        nullable=False,
        default=50,
        server_default=db.text("50"),
    )
    ativo = db.Column(
        db.Boolean, nullable=False, default=True, server_default=db.true()
    )
    created_at = db.Column(
        db.DateTime(timezone=True), nullable=False, default=_utcnow
    )

    agendamentos = db.relationship("Agendamento", back_populates="barbeiro")

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Barbeiro {self.nome}>"


class Servico(db.Model):
    __tablename__ = "servicos"

    id = db.Column(db.Integer, primary_key=True)
    nome = db.Column(db.String(100), nullable=False)
    descricao = db.Column(db.String(500), nullable=True)
    preco = db.Column(db.Numeric(10, 2), nullable=False)
    # Duração em minutos
    duracao = db.Column(db.Integer, nullable=False, default=30)
    categoria = db.Column(db.String(50), nullable=False, default="Corte")
    # Soft-delete: preservar histórico de agendamentos antigos
    ativo = db.Column(
        db.Boolean, nullable=False, default=True, server_default=db.true()
    )
    created_at = db.Column(
        db.DateTime(timezone=True), nullable=False, default=_utcnow
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Servico {self.nome} R$ {self.preco}>"


class Agendamento(db.Model):
    __tablename__ = "agendamentos"

    id = db.Column(db.Integer, primary_key=True)
    cliente_id = db.Column(
        db.Integer, db.ForeignKey("clientes.id"), nullable=False, index=True
    )
    barbeiro_id = db.Column(
        db.Integer, db.ForeignKey("barbeiros.id"), nullable=False, index=True
    )

    # Instante do atendimento (horário local, naive). Não há end_time:
    # a duração é derivada dos serviços.
    data_hora = db.Column(db.DateTime, nullable=False, index=True)

    # Lista ordenada de ids de Servico (repetições permitidas)
    servico_ids = db.Column(db.JSON, nullable=False, default=list)

    status = db.Column(
        db.Enum(StatusAgendamentoEnum, name="status_agendamento_enum"),
        nullable=False,
        default=StatusAgendamentoEnum.AGENDADO,
        server_default=db.text("'AGENDADO'"),
    )

    # Valor congelado no momento do agendamento
    valor_total = db.Column(db.Numeric(10, 2), nullable=False)
    observacoes = db.Column(db.Text, nullable=True)
    forma_pagamento = db.Column(
        db.Enum(FormaPagamentoEnum, name="forma_pagamento_enum"),
        nullable=True,
    )

    created_at = db.Column(
        db.DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    cliente = db.relationship("Cliente", back_populates="agendamentos")
    barbeiro = db.relationship("Barbeiro", back_populates="agendamentos")
    movimentacoes = db.relationship(
        "MovimentacaoFinanceira", back_populates="agendamento"
    )

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"<Agendamento id={self.id} barbeiro_id={self.barbeiro_id} "
            f"{self.data_hora} status={self.status}>"
        )


class MovimentacaoFinanceira(db.Model):
    """Lançamento do livro-caixa (receita ou despesa).

    - `data` é data civil (sem horário).
    - `agendamento_id` é opcional e NÃO é único: mais de uma movimentação
      pode referenciar o mesmo agendamento.
    """

    __tablename__ = "movimentacoes_financeiras"

    id = db.Column(db.Integer, primary_key=True)
    tipo = db.Column(
        db.Enum(TipoMovimentacaoEnum, name="tipo_movimentacao_enum"),
        nullable=False,
        index=True,
    )
    categoria = db.Column(db.String(50), nullable=False)
    descricao = db.Column(db.String(200), nullable=False)
    valor = db.Column(db.Numeric(10, 2), nullable=False)
    data = db.Column(db.Date, nullable=False, index=True)
    agendamento_id = db.Column(
        db.Integer,
        db.ForeignKey("agendamentos.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    observacoes = db.Column(db.Text, nullable=True)
    created_at = db.Column(
        db.DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    agendamento = db.relationship(
        "Agendamento", back_populates="movimentacoes"
    )

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"<MovimentacaoFinanceira {self.tipo} {self.categoria} "
            f"valor={self.valor} data={self.data}>"
        )
