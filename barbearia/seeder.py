from datetime import date, datetime, time, timedelta
from decimal import Decimal

from werkzeug.security import generate_password_hash

from barbearia import db
from barbearia.models import (
    Agendamento,
    Barbeiro,
    Cliente,
    MovimentacaoFinanceira,
    RoleEnum,
    Servico,
    StatusAgendamentoEnum,
    TipoMovimentacaoEnum,
    Usuario,
)

USUARIOS_DEV = [
    ("admin", "admin123", RoleEnum.ADMIN, "Administrador"),
    ("recepcao", "recepcao123", RoleEnum.FUNCIONARIO, "Recepção"),
    ("joao", "joao123", RoleEnum.BARBEIRO, "João Silva"),
]

SERVICOS_DEV = [
    # nome, preço, duração (min), categoria
    ("Corte Masculino", "35.00", 30, "Corte"),
    ("Barba", "25.00", 20, "Barba"),
    ("Corte + Barba", "55.00", 50, "Combo"),
    ("Sobrancelha", "15.00", 10, "Acabamento"),
    ("Pigmentação", "45.00", 40, "Tratamento"),
]


def seed_usuarios() -> None:
    for username, senha, role, nome in USUARIOS_DEV:
        if Usuario.query.filter_by(username=username).first():
            continue
        user = Usuario()
        user.username = username
        user.password_hash = generate_password_hash(senha)
        user.role = role
        user.nome_completo = nome
        db.session.add(user)
    db.session.commit()


def seed_cadastros() -> None:
    if Servico.query.first() is None:
        for nome, preco, duracao, categoria in SERVICOS_DEV:
            s = Servico()
            s.nome = nome
            s.preco = Decimal(preco)
            s.duracao = duracao
            s.categoria = categoria
            db.session.add(s)

    if Barbeiro.query.first() is None:
        for nome, especialidades, comissao in (
            ("João Silva", ["Corte", "Barba"], 50),
            ("Pedro Santos", ["Corte", "Pigmentação"], 40),
        ):
            b = Barbeiro()
            b.nome = nome
            b.especialidades = especialidades
            b.comissao = Decimal(comissao)
            db.session.add(b)

    if Cliente.query.first() is None:
        for nome, telefone in (
            ("Carlos Oliveira", "(11) 98888-0001"),
            ("Marcos Souza", "(11) 98888-0002"),
            ("Rafael Lima", "(11) 98888-0003"),
        ):
            c = Cliente()
            c.nome = nome
            c.telefone = telefone
            db.session.add(c)
    db.session.commit()


def seed_movimento(hoje: date | None = None) -> None:
    """Agenda de exemplo (ontem concluído, amanhã agendado) e caixa."""
    if Agendamento.query.first() is not None:
        return
    hoje = hoje or date.today()
    ontem = hoje - timedelta(days=1)
    amanha = hoje + timedelta(days=1)

    barbeiros = Barbeiro.query.order_by(Barbeiro.id).all()
    clientes = Cliente.query.order_by(Cliente.id).all()
    servicos = {s.nome: s for s in Servico.query.all()}
    corte = servicos["Corte Masculino"]
    combo = servicos["Corte + Barba"]

    concluido = Agendamento()
    concluido.cliente_id = clientes[0].id
    concluido.barbeiro_id = barbeiros[0].id
    concluido.data_hora = datetime.combine(ontem, time(10, 0))
    concluido.servico_ids = [combo.id]
    concluido.valor_total = combo.preco
    concluido.status = StatusAgendamentoEnum.CONCLUIDO
    db.session.add(concluido)

    for i, (cliente, hora) in enumerate(zip(clientes, (9, 11, 15))):
        ag = Agendamento()
        ag.cliente_id = cliente.id
        ag.barbeiro_id = barbeiros[i % len(barbeiros)].id
        ag.data_hora = datetime.combine(amanha, time(hora, 0))
        ag.servico_ids = [corte.id]
        ag.valor_total = corte.preco
        db.session.add(ag)
    db.session.flush()

    receita = MovimentacaoFinanceira()
    receita.tipo = TipoMovimentacaoEnum.RECEITA
    receita.categoria = "servico"
    receita.descricao = f"Atendimento #{concluido.id} - {barbeiros[0].nome}"
    receita.valor = concluido.valor_total
    receita.data = ontem
    receita.agendamento_id = concluido.id
    db.session.add(receita)

    aluguel = MovimentacaoFinanceira()
    aluguel.tipo = TipoMovimentacaoEnum.DESPESA
    aluguel.categoria = "aluguel"
    aluguel.descricao = "Aluguel do salão"
    aluguel.valor = Decimal("1500.00")
    aluguel.data = hoje.replace(day=1)
    db.session.add(aluguel)
    db.session.commit()


def seed_all() -> None:
    print("INFO: [seed] Usuários...")
    seed_usuarios()
    print("INFO: [seed] Clientes, barbeiros e serviços...")
    seed_cadastros()
    print("INFO: [seed] Agenda e caixa de exemplo...")
    seed_movimento()
    print("INFO: [seed] Concluído.")
