"""schema inicial barbearia

Revision ID: 3b7c9d1e2f40
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3b7c9d1e2f40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ROLE = sa.Enum('ADMIN', 'FUNCIONARIO', 'BARBEIRO', name='role_enum')
STATUS = sa.Enum(
    'AGENDADO', 'CONFIRMADO', 'EM_ANDAMENTO', 'CONCLUIDO', 'CANCELADO',
    'NAO_COMPARECEU', name='status_agendamento_enum',
)
FORMA_PAGAMENTO = sa.Enum(
    'DINHEIRO', 'CARTAO_DEBITO', 'CARTAO_CREDITO', 'PIX', 'TRANSFERENCIA',
    name='forma_pagamento_enum',
)
TIPO_MOV = sa.Enum('RECEITA', 'DESPESA', name='tipo_movimentacao_enum')


def upgrade() -> None:
    op.create_table(
        'usuarios',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(length=80), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', ROLE, nullable=False),
        sa.Column('nome_completo', sa.String(length=200), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_table(
        'clientes',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('nome', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=120), nullable=True),
        sa.Column('telefone', sa.String(length=20), nullable=True),
        sa.Column('cpf', sa.String(length=14), nullable=True, unique=True),
        sa.Column('data_nascimento', sa.Date(), nullable=True),
        sa.Column('observacoes', sa.Text(), nullable=True),
        sa.Column('ativo', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_table(
        'barbeiros',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('nome', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=120), nullable=True),
        sa.Column('telefone', sa.String(length=20), nullable=True),
        sa.Column('cpf', sa.String(length=14), nullable=True, unique=True),
        sa.Column('especialidades', sa.JSON(), nullable=False),
        sa.Column('comissao', sa.Numeric(5, 2), nullable=False, server_default=sa.text('50')),
        sa.Column('ativo', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_table(
        'servicos',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('nome', sa.String(length=100), nullable=False),
        sa.Column('descricao', sa.String(length=500), nullable=True),
        sa.Column('preco', sa.Numeric(10, 2), nullable=False),
        sa.Column('duracao', sa.Integer(), nullable=False),
        sa.Column('categoria', sa.String(length=50), nullable=False),
        sa.Column('ativo', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_table(
        'agendamentos',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('cliente_id', sa.Integer(), sa.ForeignKey('clientes.id'), nullable=False),
        sa.Column('barbeiro_id', sa.Integer(), sa.ForeignKey('barbeiros.id'), nullable=False),
        sa.Column('data_hora', sa.DateTime(), nullable=False),
        sa.Column('servico_ids', sa.JSON(), nullable=False),
        sa.Column('status', STATUS, nullable=False, server_default=sa.text("'AGENDADO'")),
        sa.Column('valor_total', sa.Numeric(10, 2), nullable=False),
        sa.Column('observacoes', sa.Text(), nullable=True),
        sa.Column('forma_pagamento', FORMA_PAGAMENTO, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_agendamentos_cliente_id', 'agendamentos', ['cliente_id'])
    op.create_index('ix_agendamentos_barbeiro_id', 'agendamentos', ['barbeiro_id'])
    op.create_index('ix_agendamentos_data_hora', 'agendamentos', ['data_hora'])
    op.create_table(
        'movimentacoes_financeiras',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tipo', TIPO_MOV, nullable=False),
        sa.Column('categoria', sa.String(length=50), nullable=False),
        sa.Column('descricao', sa.String(length=200), nullable=False),
        sa.Column('valor', sa.Numeric(10, 2), nullable=False),
        sa.Column('data', sa.Date(), nullable=False),
        sa.Column(
            'agendamento_id',
            sa.Integer(),
            sa.ForeignKey('agendamentos.id', ondelete='SET NULL'),
            nullable=True,
        ),
        sa.Column('observacoes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_movimentacoes_financeiras_tipo', 'movimentacoes_financeiras', ['tipo'])
    op.create_index('ix_movimentacoes_financeiras_data', 'movimentacoes_financeiras', ['data'])
    op.create_index(
        'ix_movimentacoes_financeiras_agendamento_id',
        'movimentacoes_financeiras',
        ['agendamento_id'],
    )


def downgrade() -> None:
    op.drop_table('movimentacoes_financeiras')
    op.drop_table('agendamentos')
    op.drop_table('servicos')
    op.drop_table('barbeiros')
    op.drop_table('clientes')
    op.drop_table('usuarios')
    bind = op.get_bind()
    for enum in (TIPO_MOV, FORMA_PAGAMENTO, STATUS, ROLE):
        enum.drop(bind, checkfirst=True)
